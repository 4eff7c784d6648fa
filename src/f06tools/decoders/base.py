"""Block decoder interface and shared decoder plumbing."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from f06tools.blocks import FinalBlock
from f06tools.flavour import Flavour, Solver
from f06tools.indexing import NasIndex
from f06tools.lines import strip_data_carriage_control
from f06tools.rowblock import RowBlock

if TYPE_CHECKING:
    from f06tools.blocktypes import BlockType


class LineResponse(Enum):
    """What a decoder made of one line."""
    USELESS = "useless"
    DATA = "data"
    METADATA = "metadata"
    BAD_FLAVOUR = "bad flavour"
    ABORT = "abort"

    @property
    def is_abnormal(self) -> bool:
        """Abnormal responses end the block immediately."""
        return self in (LineResponse.BAD_FLAVOUR, LineResponse.ABORT)


class BlockDecoder(ABC):
    """Turns the lines of one table instance into a FinalBlock."""

    def __init__(self, block_type: "BlockType", flavour: Flavour):
        self.block_type = block_type
        self.flavour = Flavour(flavour.solver, flavour.soltype)

    def good_header(self, text: str) -> bool:
        """Check the full header text before any data line is fed."""
        return True

    @abstractmethod
    def consume(self, line: str) -> LineResponse:
        ...

    def hint_last_row(self, row: NasIndex):
        """Seed the decoder with the last row of an earlier table of its kind."""

    def last_row_index(self) -> Optional[NasIndex]:
        return None

    @abstractmethod
    def finalise(self, subcase: int,
                 line_range: Optional[tuple[int, int]] = None) -> FinalBlock:
        ...


class TabularDecoder(BlockDecoder):
    """A decoder that fills a RowBlock with a fixed column catalogue.

    Subclasses set COLUMNS to a field catalogue (anything with
    ``canonical_cols()``) and implement ``consume``.
    """

    COLUMNS = None
    # Simcenter prints a carriage control digit in column one
    STRIP_CARRIAGE_CONTROL = False

    def __init__(self, block_type: "BlockType", flavour: Flavour):
        super().__init__(block_type, flavour)
        self.etype = block_type.element_type
        self.data = RowBlock(self.COLUMNS.canonical_cols())
        self.last_row: Optional[NasIndex] = None
        self.hint: Optional[NasIndex] = None

    def hint_last_row(self, row: NasIndex):
        self.hint = row

    def last_row_index(self) -> Optional[NasIndex]:
        return self.last_row if self.last_row is not None else self.hint

    def clean(self, line: str) -> str:
        if self.STRIP_CARRIAGE_CONTROL and self.flavour.solver is Solver.SIMCENTER:
            return strip_data_carriage_control(line)
        return line

    def insert(self, row: NasIndex, values) -> LineResponse:
        """Store a full row in canonical column order."""
        self.data.insert_raw(row, values)
        self.last_row = row
        return LineResponse.DATA

    def insert_fields(self, row: NasIndex, values: dict) -> LineResponse:
        self.data.insert(row, values)
        self.last_row = row
        return LineResponse.DATA

    def finalise(self, subcase: int,
                 line_range: Optional[tuple[int, int]] = None) -> FinalBlock:
        return self.data.finalise(self.block_type, subcase, line_range)


class RelabelledDecoder(BlockDecoder):
    """Reuses another decoder's line handling under new column keys.

    Every call is forwarded to the wrapped decoder; only the finalised block
    is changed, getting this decoder's block type and relabelled columns.
    """

    def __init__(self, block_type: "BlockType", inner: BlockDecoder,
                 relabel: Callable[[NasIndex], NasIndex]):
        super().__init__(block_type, inner.flavour)
        self.inner = inner
        self.relabel = relabel

    def good_header(self, text: str) -> bool:
        return self.inner.good_header(text)

    def consume(self, line: str) -> LineResponse:
        return self.inner.consume(line)

    def hint_last_row(self, row: NasIndex):
        self.inner.hint_last_row(row)

    def last_row_index(self) -> Optional[NasIndex]:
        return self.inner.last_row_index()

    def finalise(self, subcase: int,
                 line_range: Optional[tuple[int, int]] = None) -> FinalBlock:
        block = self.inner.finalise(subcase, line_range)
        return FinalBlock(
            block_type=self.block_type,
            subcase=block.subcase,
            line_range=block.line_range,
            row_indexes=block.row_indexes,
            col_indexes={self.relabel(c): slot for c, slot in block.col_indexes.items()},
            data=block.data,
        )


def relabelled(inner_cls: type, relabel: Callable[[NasIndex], NasIndex]):
    """Decoder factory for a table that reads like ``inner_cls`` but means something else."""
    def factory(block_type: "BlockType", flavour: Flavour) -> RelabelledDecoder:
        return RelabelledDecoder(block_type, inner_cls(block_type, flavour), relabel)
    return factory
