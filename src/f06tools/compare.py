"""Structural compatibility and value-by-value comparison of blocks."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Union

from f06tools.errors import IncompatibleBlocksError
from f06tools.indexing import NasIndex

if TYPE_CHECKING:
    from f06tools.blocks import FinalBlock


class IncompatibilityReason(Enum):
    DIFFERENT_TYPE = "block types differ"
    DIFFERENT_SUBCASE = "subcases differ"
    DIFFERENT_COLUMNS = "column sets differ"
    NO_COMMON_ROWS = "no rows in common"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Incompatible:
    reason: IncompatibilityReason


@dataclass(frozen=True)
class Compatible:
    common_rows: frozenset
    disjunction: frozenset


BlockCompatibility = Union[Incompatible, Compatible]


def block_compatibility(a: "FinalBlock", b: "FinalBlock") -> BlockCompatibility:
    """Shallow comparison: what two blocks have in common, structurally."""
    if a.block_type != b.block_type:
        return Incompatible(IncompatibilityReason.DIFFERENT_TYPE)
    if a.subcase != b.subcase:
        return Incompatible(IncompatibilityReason.DIFFERENT_SUBCASE)
    if set(a.col_indexes) != set(b.col_indexes):
        return Incompatible(IncompatibilityReason.DIFFERENT_COLUMNS)
    rows_a, rows_b = set(a.row_indexes), set(b.row_indexes)
    common = rows_a & rows_b
    if not common:
        return Incompatible(IncompatibilityReason.NO_COMMON_ROWS)
    return Compatible(frozenset(common), frozenset(rows_a ^ rows_b))


class DisjunctionBehaviour(Enum):
    """What to do with rows present in only one of the compared blocks."""
    SKIP = "skip"
    ASSUME_ZEROES = "zero"
    FLAG = "flag"

    @classmethod
    def from_str(cls, text: str) -> "DisjunctionBehaviour":
        for member in cls:
            if text.strip().lower() == member.value:
                return member
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"unknown disjunction behaviour {text!r} (expected one of {choices})")

    @property
    def small_name(self) -> str:
        return self.value

    def __str__(self) -> str:
        return _DXN_DESCRIPTIONS[self]


_DXN_DESCRIPTIONS = {
    DisjunctionBehaviour.SKIP: "skip",
    DisjunctionBehaviour.ASSUME_ZEROES: "assume zeros",
    DisjunctionBehaviour.FLAG: "flag",
}


class FlagKind(Enum):
    NAN = "NaN detected"
    INFINITY = "infinity detected"
    SIGNS = "signs differ"
    DIFFERENCE = "maximum difference exceeded"
    RATIO = "maximum ratio exceeded"
    DISJUNCTION = "value absent in one of the files"


@dataclass(frozen=True)
class FlagReason:
    """Why a pair of values was flagged.

    For DIFFERENCE, ``value`` is the absolute difference and ``limit`` the
    exceeded epsilon. For RATIO, ``value`` is the big-to-small magnitude ratio
    and ``limit`` the exceeded maximum. Other kinds carry neither.
    """
    kind: FlagKind
    value: Optional[float] = None
    limit: Optional[float] = None

    def __str__(self) -> str:
        if self.value is None:
            return self.kind.value
        return f"{self.kind.value} ({self.value:.6g} > {self.limit:.6g})"


@dataclass
class Criteria:
    """Value flagging criteria; the checks run in field order below."""
    difference: Optional[float] = None
    ratio: Optional[float] = None
    nan: bool = True
    inf: bool = True
    sig: bool = False

    def check(self, a: float, b: float) -> Optional[FlagReason]:
        if self.nan and (math.isnan(a) or math.isnan(b)):
            return FlagReason(FlagKind.NAN)
        if self.inf and (math.isinf(a) or math.isinf(b)):
            return FlagReason(FlagKind.INFINITY)
        if self.sig and math.copysign(1.0, a) != math.copysign(1.0, b):
            return FlagReason(FlagKind.SIGNS)
        if self.difference is not None:
            diff = abs(a - b)
            if diff > self.difference:
                return FlagReason(FlagKind.DIFFERENCE, diff, self.difference)
        if self.ratio is not None:
            big, small = max(abs(a), abs(b)), min(abs(a), abs(b))
            if big != 0.0:
                rat = math.inf if small == 0.0 else big / small
                if rat > self.ratio:
                    return FlagReason(FlagKind.RATIO, rat, self.ratio)
        return None


@dataclass(frozen=True)
class FoundValues:
    row: NasIndex
    col: NasIndex
    val_a: float
    val_b: float


@dataclass(frozen=True)
class FlaggedPosition:
    values: FoundValues
    reason: FlagReason


class BlockDiff:
    """Lazy sequence of flagged positions between two compatible blocks.

    Walks the union of both blocks' rows against the columns, in key order.
    Every call to ``iter()`` starts the walk over.
    """

    def __init__(self, differ: "DataDiffer", a: "FinalBlock", b: "FinalBlock",
                 compatibility: Compatible):
        self.differ = differ
        self.a = a
        self.b = b
        self.compatibility = compatibility

    def _value(self, block: "FinalBlock", row, col) -> Union[float, FlagReason, None]:
        if row in block.row_indexes:
            return block.get(row, col)
        behaviour = self.differ.dxn_behaviour
        if behaviour is DisjunctionBehaviour.SKIP:
            return None
        if behaviour is DisjunctionBehaviour.ASSUME_ZEROES:
            return 0.0
        return FlagReason(FlagKind.DISJUNCTION)

    def __iter__(self) -> Iterator[FlaggedPosition]:
        rows = sorted(set(self.a.row_indexes) | set(self.b.row_indexes))
        cols = self.a.cols()
        for row in rows:
            for col in cols:
                x = self._value(self.a, row, col)
                y = self._value(self.b, row, col)
                if isinstance(x, FlagReason) or isinstance(y, FlagReason):
                    reason = x if isinstance(x, FlagReason) else y
                    yield FlaggedPosition(FoundValues(row, col, 0.0, 0.0), reason)
                    continue
                if x is None or y is None:
                    continue
                reason = self.differ.criteria.check(x, y)
                if reason is not None:
                    yield FlaggedPosition(FoundValues(row, col, x, y), reason)


@dataclass
class DataDiffer:
    criteria: Criteria
    dxn_behaviour: DisjunctionBehaviour = DisjunctionBehaviour.ASSUME_ZEROES

    def compare(self, a: "FinalBlock", b: "FinalBlock") -> BlockDiff:
        compat = block_compatibility(a, b)
        if isinstance(compat, Incompatible):
            raise IncompatibleBlocksError(compat.reason)
        return BlockDiff(self, a, b, compat)
