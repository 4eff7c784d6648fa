"""Addressing single values, and sets of them, in parsed files."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterator, Optional, TypeVar

from f06tools.blocks import BlockRef
from f06tools.errors import (
    BlockIsEmpty, ColumnTypeMismatch, MissingColumn, MissingRow, NoSuchBlock,
    NotUniqueBlock, RowTypeMismatch,
)
from f06tools.f06file import F06File
from f06tools.indexing import NasIndex, element_id, grid_point_id, same_variant

A = TypeVar("A")


class SpecifierKind(Enum):
    ALL = "all"
    LIST = "list"
    ALL_EXCEPT = "all except"


@dataclass(frozen=True)
class Specifier(Generic[A]):
    """Selects all values, a listed few, or all but a listed few."""
    kind: SpecifierKind = SpecifierKind.ALL
    items: tuple = ()

    @classmethod
    def all(cls) -> "Specifier":
        return cls()

    @classmethod
    def only(cls, *items) -> "Specifier":
        return cls(SpecifierKind.LIST, tuple(items))

    @classmethod
    def all_except(cls, *items) -> "Specifier":
        return cls(SpecifierKind.ALL_EXCEPT, tuple(items))

    def filter(self, item: A) -> bool:
        if self.kind is SpecifierKind.ALL:
            return True
        if self.kind is SpecifierKind.LIST:
            return item in self.items
        return item not in self.items

    def lax_filter(self, item: Optional[A]) -> bool:
        """Like ``filter``, but a missing item only passes ALL."""
        if self.kind is SpecifierKind.ALL:
            return True
        if item is None:
            return False
        return self.filter(item)

    def strict_filter(self, item: Optional[A]) -> bool:
        """Like ``filter``, but a missing item never passes."""
        if item is None:
            return False
        return self.filter(item)


@dataclass(frozen=True)
class DatumIndex:
    """The address of one value in a parsed file."""
    block_ref: BlockRef
    row: NasIndex
    col: NasIndex

    def get_from(self, file: F06File) -> float:
        found = file.block_search(self.block_ref.block_type, self.block_ref.subcase)
        if not found:
            raise NoSuchBlock(self.block_ref)
        if len(found) > 1:
            raise NotUniqueBlock(self.block_ref, len(found))
        (block,) = found
        sample_row, sample_col = block.sample_row(), block.sample_col()
        if sample_row is None or sample_col is None:
            raise BlockIsEmpty()
        if not same_variant(self.row, sample_row):
            raise RowTypeMismatch(self.row, sample_row)
        if not same_variant(self.col, sample_col):
            raise ColumnTypeMismatch(self.col, sample_col)
        if self.row not in block.row_indexes:
            raise MissingRow(self.row)
        if self.col not in block.col_indexes:
            raise MissingColumn(self.col)
        return block.get(self.row, self.col)


@dataclass
class Extraction:
    """A subset of a file's values, chosen by block, row and column filters."""
    subcases: Specifier = field(default_factory=Specifier)
    block_types: Specifier = field(default_factory=Specifier)
    grid_points: Specifier = field(default_factory=Specifier)
    elements: Specifier = field(default_factory=Specifier)
    rows: Specifier = field(default_factory=Specifier)
    cols: Specifier = field(default_factory=Specifier)

    def _keep_row(self, row: NasIndex) -> bool:
        return (
            self.rows.filter(row)
            and self.grid_points.lax_filter(grid_point_id(row))
            and self.elements.lax_filter(element_id(row))
        )

    def _keep_col(self, col: NasIndex) -> bool:
        # columns are usually field names; only filter those naming an entity
        grid, elem = grid_point_id(col), element_id(col)
        return (
            self.cols.filter(col)
            and (grid is None or self.grid_points.filter(grid))
            and (elem is None or self.elements.filter(elem))
        )

    def lookup(self, file: F06File) -> Iterator[DatumIndex]:
        """Addresses of the selected values, block by block, in key order."""
        for block in sorted(file.blocks, key=lambda b: b.block_ref):
            if not self.subcases.filter(block.subcase):
                continue
            if not self.block_types.filter(block.block_type):
                continue
            rows = [r for r in block.rows() if self._keep_row(r)]
            cols = [c for c in block.cols() if self._keep_col(c)]
            for row in rows:
                for col in cols:
                    yield DatumIndex(block.block_ref, row, col)
