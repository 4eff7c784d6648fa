"""Dense, growable row storage used while a table is being decoded."""

from typing import Optional

import numpy as np

from f06tools.blocks import FinalBlock
from f06tools.indexing import NasIndex, same_variant

INITIAL_CAPACITY = 64
GROWTH_FACTOR = 4


class RowBlock:
    """A float64 matrix with a fixed set of keyed columns and keyed rows.

    Columns are given at construction as a key -> slot mapping and never
    change. Rows get the next free slot the first time their key is seen;
    inserting a known key again overwrites that row. Slots are a storage
    detail: anything that enumerates rows or columns uses key order.
    """

    def __init__(self, col_indexes: dict, row_hint: Optional[int] = None):
        if not col_indexes:
            raise ValueError("a row block needs at least one column")
        cols = list(col_indexes)
        if any(not same_variant(cols[0], c) for c in cols[1:]):
            raise TypeError("column keys must all be the same index variant")
        if sorted(col_indexes.values()) != list(range(len(col_indexes))):
            raise ValueError("column slots must be 0..width-1, each used once")

        self.col_indexes: dict = dict(col_indexes)
        self.row_indexes: dict = {}
        self.width = len(self.col_indexes)
        capacity = row_hint if row_hint and row_hint > 0 else INITIAL_CAPACITY
        self._data = np.zeros((capacity, self.width), dtype=np.float64)

    def __len__(self) -> int:
        return len(self.row_indexes)

    def __contains__(self, row: NasIndex) -> bool:
        return row in self.row_indexes

    @property
    def capacity(self) -> int:
        return self._data.shape[0]

    def _grow(self):
        grown = np.zeros((self.capacity * GROWTH_FACTOR, self.width), dtype=np.float64)
        grown[: len(self.row_indexes)] = self._data[: len(self.row_indexes)]
        self._data = grown

    def insert_raw(self, row: NasIndex, values) -> int:
        """Store a full row of values in slot order. Returns the row's slot."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.width,):
            raise ValueError(
                f"row {row} has {values.size} values, this block is {self.width} wide"
            )
        if self.row_indexes:
            first = next(iter(self.row_indexes))
            if not same_variant(first, row):
                raise TypeError(
                    f"row key is a {row.INDEX_NAME}, this block uses {first.INDEX_NAME}"
                )

        slot = self.row_indexes.get(row)
        if slot is None:
            slot = len(self.row_indexes)
            if slot >= self.capacity:
                self._grow()
            self.row_indexes[row] = slot
        self._data[slot] = values
        return slot

    def insert(self, row: NasIndex, values: dict) -> int:
        """Store a row given as {column key: value}; missing columns are zero."""
        raw = np.zeros(self.width, dtype=np.float64)
        for col, value in values.items():
            try:
                raw[self.col_indexes[col]] = value
            except KeyError:
                raise ValueError(f"no such column in this block: {col}") from None
        return self.insert_raw(row, raw)

    def get(self, row: NasIndex, col: NasIndex) -> Optional[float]:
        i = self.row_indexes.get(row)
        j = self.col_indexes.get(col)
        if i is None or j is None:
            return None
        return float(self._data[i, j])

    def row_values(self, row: NasIndex) -> Optional[np.ndarray]:
        """A copy of a stored row, in slot order."""
        i = self.row_indexes.get(row)
        if i is None:
            return None
        return self._data[i].copy()

    def finalise(self, block_type, subcase: int,
                 line_range: Optional[tuple[int, int]] = None) -> FinalBlock:
        data = self._data[: len(self.row_indexes)].copy()
        return FinalBlock(
            block_type=block_type,
            subcase=subcase,
            line_range=line_range,
            row_indexes=dict(self.row_indexes),
            col_indexes=dict(self.col_indexes),
            data=data,
        )
