"""The parsed form of an F06 file and its reconciliation passes."""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from f06tools.blocks import BlockRef, FinalBlock
from f06tools.blocktypes import BlockType
from f06tools.flavour import Flavour
from f06tools.lines import PotentialHeader

logger = logging.getLogger(__name__)


@dataclass
class F06File:
    """Everything extracted from one F06 file."""
    flavour: Flavour = field(default_factory=Flavour)
    filename: Optional[str] = None
    blocks: list[FinalBlock] = field(default_factory=list)
    warnings: dict[int, str] = field(default_factory=dict)
    fatal_errors: dict[int, str] = field(default_factory=dict)
    potential_headers: list[PotentialHeader] = field(default_factory=list)

    def add_potential_header(self, header: PotentialHeader):
        """Insert keeping the list sorted by starting line."""
        bisect.insort(self.potential_headers, header)

    # --- Reconciliation ---

    def merge_blocks(self) -> int:
        """Merge fragments of the same table. Returns the number of merges.

        Only clean merges happen: blocks that share a row are left apart.
        """
        pending = list(self.blocks)
        done: list[FinalBlock] = []
        merges = 0
        while pending:
            primary = pending.pop()
            for i, secondary in enumerate(pending):
                if primary.can_merge(secondary) is None and not primary.row_conflicts(secondary):
                    break
            else:
                done.append(primary)
                continue
            secondary = pending.pop(i)
            pending.append(primary.try_merge(secondary))
            merges += 1
        done.reverse()
        self.blocks = done
        if merges:
            logger.info(f"Merged {merges} block fragments in {self.filename or 'file'}")
        return merges

    def merge_potential_headers(self) -> int:
        """Merge touching or overlapping potential headers. Returns the number of merges."""
        pending = sorted(self.potential_headers)
        merged_list: list[PotentialHeader] = []
        merges = 0
        while pending:
            first = pending.pop(0)
            if not pending:
                merged_list.append(first)
                break
            second = pending.pop(0)
            merged = first.try_merge(second)
            if merged is not None:
                pending.insert(0, merged)
                merges += 1
            else:
                merged_list.append(first)
                pending.insert(0, second)
        self.potential_headers = merged_list
        if merges:
            logger.info(f"Merged {merges} potential headers")
        return merges

    # --- Queries ---

    def subcases(self) -> list[int]:
        return sorted({b.subcase for b in self.blocks})

    def block_types(self) -> list[BlockType]:
        return sorted({b.block_type for b in self.blocks})

    def block_refs(self) -> list[BlockRef]:
        return sorted({b.block_ref for b in self.blocks})

    def block_search(self, block_type: Optional[BlockType] = None,
                     subcase: Optional[int] = None) -> list[FinalBlock]:
        """Blocks matching the given type and subcase; None matches anything."""
        return [
            b for b in self.blocks
            if (block_type is None or b.block_type == block_type)
            and (subcase is None or b.subcase == subcase)
        ]

    def unique_blocks(self) -> Iterator[FinalBlock]:
        """Blocks that are the only one of their type in their subcase."""
        for ref in self.block_refs():
            found = self.block_search(ref.block_type, ref.subcase)
            if len(found) == 1:
                yield found[0]
            else:
                logger.warning(
                    f'Subcase {ref.subcase} has {len(found)} "{ref.block_type}" blocks'
                )
