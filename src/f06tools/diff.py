"""Block-by-block comparison of two parsed F06 files."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from itertools import islice
from typing import Optional

from f06tools.blocks import BlockRef
from f06tools.compare import (
    Criteria, DataDiffer, DisjunctionBehaviour, FlaggedPosition, Incompatible,
    IncompatibilityReason, block_compatibility,
)
from f06tools.f06file import F06File

logger = logging.getLogger(__name__)


@dataclass
class DiffSettings:
    criteria: Criteria = field(default_factory=Criteria)
    dxn_behaviour: DisjunctionBehaviour = DisjunctionBehaviour.ASSUME_ZEROES
    # flags kept per block; None keeps them all
    max_flags: Optional[int] = None


class NotComparedKind(Enum):
    NO_COUNTERPART = "no counterpart in the other file"
    NOT_UNIQUE_IN_FIRST = "not unique in the first file"
    NOT_UNIQUE_IN_SECOND = "not unique in the second file"
    NOT_UNIQUE_IN_BOTH = "not unique in either file"
    INCOMPATIBLE = "blocks are incompatible"


@dataclass(frozen=True)
class NotComparedReason:
    kind: NotComparedKind
    incompatibility: Optional[IncompatibilityReason] = None

    def __str__(self) -> str:
        if self.incompatibility is not None:
            return f"{self.kind.value} ({self.incompatibility})"
        return self.kind.value


@dataclass
class F06Diff:
    """Flags for every block compared, and why the others were not."""
    compared: dict[BlockRef, list[FlaggedPosition]] = field(default_factory=dict)
    not_compared: dict[BlockRef, NotComparedReason] = field(default_factory=dict)

    @property
    def total_flags(self) -> int:
        return sum(len(flags) for flags in self.compared.values())

    @property
    def is_clean(self) -> bool:
        return self.total_flags == 0

    @classmethod
    def compare(cls, settings: DiffSettings, first: F06File, second: F06File) -> "F06Diff":
        differ = DataDiffer(settings.criteria, settings.dxn_behaviour)
        diff = cls()
        refs = sorted(set(first.block_refs()) | set(second.block_refs()))
        for ref in refs:
            in_first = first.block_search(ref.block_type, ref.subcase)
            in_second = second.block_search(ref.block_type, ref.subcase)
            reason = _pairing_problem(len(in_first), len(in_second))
            if reason is None:
                compat = block_compatibility(in_first[0], in_second[0])
                if isinstance(compat, Incompatible):
                    reason = NotComparedReason(NotComparedKind.INCOMPATIBLE, compat.reason)
            if reason is not None:
                logger.debug(f"Not comparing {ref}: {reason}")
                diff.not_compared[ref] = reason
                continue
            flags = differ.compare(in_first[0], in_second[0])
            diff.compared[ref] = list(islice(flags, settings.max_flags))
        logger.info(
            f"Compared {len(diff.compared)} blocks, skipped {len(diff.not_compared)}, "
            f"{diff.total_flags} values flagged"
        )
        return diff


def _pairing_problem(n_first: int, n_second: int) -> Optional[NotComparedReason]:
    if n_first == 0 or n_second == 0:
        return NotComparedReason(NotComparedKind.NO_COUNTERPART)
    if n_first > 1 and n_second > 1:
        return NotComparedReason(NotComparedKind.NOT_UNIQUE_IN_BOTH)
    if n_first > 1:
        return NotComparedReason(NotComparedKind.NOT_UNIQUE_IN_FIRST)
    if n_second > 1:
        return NotComparedReason(NotComparedKind.NOT_UNIQUE_IN_SECOND)
    return None
