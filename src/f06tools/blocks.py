"""Finalised data blocks and block references."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from f06tools.compare import IncompatibilityReason
from f06tools.errors import MergeError
from f06tools.indexing import NasIndex, same_variant

if TYPE_CHECKING:
    from f06tools.blocktypes import BlockType


@dataclass(frozen=True, order=True)
class BlockRef:
    """Identifies a logical table: a table kind within a subcase."""
    block_type: "BlockType"
    subcase: int

    def __str__(self) -> str:
        return f"subcase {self.subcase}, {self.block_type.desc.lower()}"


@dataclass
class FinalBlock:
    """The immutable result of decoding one table instance."""
    block_type: "BlockType"
    subcase: int
    line_range: Optional[tuple[int, int]]
    row_indexes: dict
    col_indexes: dict
    data: np.ndarray

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=np.float64)
        self.data.flags.writeable = False

    def __len__(self) -> int:
        return len(self.row_indexes)

    @property
    def block_ref(self) -> BlockRef:
        return BlockRef(self.block_type, self.subcase)

    @property
    def is_empty(self) -> bool:
        return not self.row_indexes

    def get(self, row: NasIndex, col: NasIndex) -> Optional[float]:
        i = self.row_indexes.get(row)
        j = self.col_indexes.get(col)
        if i is None or j is None:
            return None
        return float(self.data[i, j])

    def rows(self) -> list:
        return sorted(self.row_indexes)

    def cols(self) -> list:
        return sorted(self.col_indexes)

    def sample_row(self) -> Optional[NasIndex]:
        return next(iter(self.row_indexes), None)

    def sample_col(self) -> Optional[NasIndex]:
        return next(iter(self.col_indexes), None)

    def to_rows(self) -> list[tuple[NasIndex, list[float]]]:
        """Rows in key order, each with its values in column key order."""
        col_slots = [self.col_indexes[c] for c in self.cols()]
        return [
            (row, [float(self.data[self.row_indexes[row], j]) for j in col_slots])
            for row in self.rows()
        ]

    # --- Merging ---

    def can_merge(self, other: "FinalBlock") -> Optional[IncompatibilityReason]:
        """None if the two blocks hold parts of the same table."""
        if self.block_type != other.block_type:
            return IncompatibilityReason.DIFFERENT_TYPE
        if self.subcase != other.subcase:
            return IncompatibilityReason.DIFFERENT_SUBCASE
        if set(self.col_indexes) != set(other.col_indexes):
            return IncompatibilityReason.DIFFERENT_COLUMNS
        return None

    def row_conflicts(self, other: "FinalBlock") -> set:
        return set(self.row_indexes) & set(other.row_indexes)

    def try_merge(self, other: "FinalBlock") -> "FinalBlock":
        """A new block holding the rows of both. Neither input is changed."""
        reason = self.can_merge(other)
        if reason is not None:
            raise MergeError(str(reason))
        conflicts = self.row_conflicts(other)
        if conflicts:
            raise MergeError(f"{len(conflicts)} rows appear in both blocks")
        mine, theirs = self.sample_row(), other.sample_row()
        if mine is not None and theirs is not None and not same_variant(mine, theirs):
            raise MergeError("row key types differ")

        # other's columns reordered into this block's slots
        by_slot = sorted(self.col_indexes, key=self.col_indexes.get)
        perm = [other.col_indexes[c] for c in by_slot]
        data = np.vstack([self.data, other.data[:, perm]])

        offset = len(self.row_indexes)
        row_indexes = dict(self.row_indexes)
        for row, slot in other.row_indexes.items():
            row_indexes[row] = offset + slot

        return FinalBlock(
            block_type=self.block_type,
            subcase=self.subcase,
            line_range=_span(self.line_range, other.line_range),
            row_indexes=row_indexes,
            col_indexes=dict(self.col_indexes),
            data=data,
        )


def _span(a: Optional[tuple[int, int]], b: Optional[tuple[int, int]]):
    if a is None:
        return b
    if b is None:
        return a
    return (min(a[0], b[0]), max(a[1], b[1]))
