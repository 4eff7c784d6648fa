"""One-pass, line-driven F06 parser."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from f06tools.blocktypes import BlockType, has_bad_word
from f06tools.decoders.base import BlockDecoder
from f06tools.f06file import F06File
from f06tools.flavour import Solver, SolType
from f06tools.indexing import NasIndex
from f06tools.lines import PotentialHeader, check_header

logger = logging.getLogger(__name__)

# --- Subcase patterns ---
RE_SUBCASE_MARKER = re.compile(r"OUTPUT FOR (?:SUBCASE|EIGENVECTOR)\s+(\d+)")
RE_TRAILING_SUBCASE = re.compile(r"\bSUBCASE\s+(\d+)\s*$")

# --- Message patterns ---
RE_WARNING = re.compile(r"\bWARNING\b")
RE_FATAL = re.compile(r"\bFATAL\b")

INITIAL_SUBCASE = 1


class ParserPhase(Enum):
    IDLE = "idle"
    ACCUMULATING_HEADER = "accumulating header"
    DECODING_BLOCK = "decoding block"


class ResponseKind(Enum):
    USELESS = "useless"
    SOLVER = "solver"
    SOLTYPE = "solution type"
    SUBCASE = "subcase"
    WARNING = "warning"
    FATAL = "fatal"
    BLOCK_HEADER = "block header"
    BEGIN_BLOCK = "begin block"
    POTENTIAL_HEADER = "potential header"
    REJECTED_HEADER = "rejected header"
    AMBIGUOUS_HEADER = "ambiguous header"
    BEGINNING_WITHOUT_SOLVER = "beginning without solver"
    PASSED_TO_DECODER = "passed to decoder"
    BLOCK_END = "block end"


@dataclass(frozen=True)
class ParserResponse:
    """What the parser did with one line.

    Payloads by kind: SOLVER a Solver, SOLTYPE a SolType, SUBCASE the new
    subcase, WARNING/FATAL/BLOCK_HEADER/REJECTED_HEADER the text,
    BEGIN_BLOCK/BEGINNING_WITHOUT_SOLVER/BLOCK_END a BlockType,
    POTENTIAL_HEADER a PotentialHeader, AMBIGUOUS_HEADER a tuple of
    BlockTypes, PASSED_TO_DECODER a (BlockType, LineResponse) pair.
    """
    kind: ResponseKind
    payload: Any = None


USELESS = ParserResponse(ResponseKind.USELESS)


class OnePassParser:
    """Folds a sequence of lines into an F06File.

    Feed lines with ``consume`` and call ``finish`` once at the end.
    """

    def __init__(self, filename: Optional[str] = None):
        self.file = F06File(filename=filename)
        self.subcase = INITIAL_SUBCASE
        self.line_no = 0
        self.decoder: Optional[BlockDecoder] = None
        self.block_start = 0
        self.block_last_line = 0
        self.header_lines: list[str] = []
        self.header_start = 0
        # last row of each table kind, to seed its next occurrence
        self.last_rows: dict[BlockType, NasIndex] = {}

    @property
    def phase(self) -> ParserPhase:
        if self.header_lines:
            return ParserPhase.ACCUMULATING_HEADER
        if self.decoder is not None:
            return ParserPhase.DECODING_BLOCK
        return ParserPhase.IDLE

    # --- Detection ---

    def _detect_subcase(self, line: str) -> Optional[int]:
        m = RE_SUBCASE_MARKER.search(line) or RE_TRAILING_SUBCASE.search(line)
        if m:
            return int(m.group(1))
        return None

    # --- Block bookkeeping ---

    def flush_decoder(self):
        """Finalise the active decoder, keeping its block if it has rows."""
        decoder, self.decoder = self.decoder, None
        if decoder is None:
            return
        last = decoder.last_row_index()
        if last is not None:
            self.last_rows[decoder.block_type] = last
        block = decoder.finalise(self.subcase, (self.block_start, self.block_last_line))
        if block.is_empty:
            logger.debug(f"Dropped empty {decoder.block_type.short_name} block at line {self.block_start}")
            return
        logger.debug(
            f"Finalised {block.block_type.short_name} block, subcase {block.subcase}, "
            f"{len(block)} rows, lines {self.block_start}-{self.block_last_line}"
        )
        self.file.blocks.append(block)

    def _resolve_header(self) -> Optional[ParserResponse]:
        """Match the accumulated header lines against the known tables."""
        if not self.header_lines:
            return None
        self.flush_decoder()
        text = " ".join(self.header_lines)
        start, span = self.header_start, len(self.header_lines)
        self.header_lines = []

        matches = BlockType.matching(text)
        if not matches:
            return self._potential_header(start, span, text)
        if len(matches) > 1:
            logger.warning(
                f"Header at line {start} matches {len(matches)} tables "
                f"({', '.join(m.short_name for m in matches)}); skipping it"
            )
            return ParserResponse(ResponseKind.AMBIGUOUS_HEADER, tuple(matches))

        block_type = matches[0]
        if self.file.flavour.solver is None:
            logger.warning(f"{block_type.short_name} block at line {start} before any solver was detected")
            return ParserResponse(ResponseKind.BEGINNING_WITHOUT_SOLVER, block_type)
        decoder = block_type.init_decoder(self.file.flavour)
        if not decoder.good_header(text):
            return self._potential_header(start, span, text)
        if block_type in self.last_rows:
            decoder.hint_last_row(self.last_rows[block_type])
        self.decoder = decoder
        self.block_start = start
        self.block_last_line = start + span - 1
        logger.debug(f"Started {block_type.short_name} block at line {start}")
        return ParserResponse(ResponseKind.BEGIN_BLOCK, block_type)

    def _potential_header(self, start: int, span: int, text: str) -> ParserResponse:
        if has_bad_word(text):
            return ParserResponse(ResponseKind.REJECTED_HEADER, text)
        header = PotentialHeader(start, span, text)
        self.file.add_potential_header(header)
        return ParserResponse(ResponseKind.POTENTIAL_HEADER, header)

    # --- Main loop ---

    def consume(self, line: str) -> ParserResponse:
        """Process one line of the file."""
        self.line_no += 1
        line = line.rstrip("\r\n")
        flavour = self.file.flavour

        if flavour.solver is None:
            solver = Solver.detect(line)
            if solver is not None:
                flavour.solver = solver
                logger.debug(f"Detected solver {solver.value} at line {self.line_no}")
                return ParserResponse(ResponseKind.SOLVER, solver)

        if flavour.soltype is None:
            soltype = SolType.detect(line)
            if soltype is not None:
                flavour.soltype = soltype
                logger.debug(f"Detected solution type {soltype.value} at line {self.line_no}")
                return ParserResponse(ResponseKind.SOLTYPE, soltype)

        subcase = self._detect_subcase(line)
        if subcase is not None and subcase != self.subcase:
            self.flush_decoder()
            self.subcase = subcase
            self._resolve_header()
            return ParserResponse(ResponseKind.SUBCASE, subcase)

        if RE_FATAL.search(line):
            self.file.fatal_errors[self.line_no] = line.strip()
            self._resolve_header()
            return ParserResponse(ResponseKind.FATAL, line.strip())
        if RE_WARNING.search(line):
            self.file.warnings[self.line_no] = line.strip()
            self._resolve_header()
            return ParserResponse(ResponseKind.WARNING, line.strip())

        header = check_header(line)
        if header is not None:
            if not self.header_lines:
                self.header_start = self.line_no
            self.header_lines.append(header)
            return ParserResponse(ResponseKind.BLOCK_HEADER, header)

        if self.header_lines:
            response = self._resolve_header()
            if response.kind is ResponseKind.BEGIN_BLOCK:
                self._forward(line)
            return response

        if self.decoder is not None:
            block_type = self.decoder.block_type
            if not block_type.ignores_block_end_sentinels and any(
                s in line for s in flavour.block_end_sentinels()
            ):
                self.flush_decoder()
                return ParserResponse(ResponseKind.BLOCK_END, block_type)
            return ParserResponse(ResponseKind.PASSED_TO_DECODER, (block_type, self._forward(line)))

        return USELESS

    def _forward(self, line: str):
        decoder = self.decoder
        response = decoder.consume(line)
        self.block_last_line = self.line_no
        if response.is_abnormal:
            logger.debug(
                f"{decoder.block_type.short_name} decoder gave {response.value} at line {self.line_no}"
            )
            self.flush_decoder()
        return response

    def finish(self) -> F06File:
        """Flush whatever is pending and return the parsed file."""
        self._resolve_header()
        self.flush_decoder()
        return self.file

    # --- Convenience entry points ---

    @classmethod
    def parse_lines(cls, lines: Iterable[str], filename: Optional[str] = None) -> F06File:
        parser = cls(filename)
        for line in lines:
            parser.consume(line)
        return parser.finish()

    @classmethod
    def parse_file(cls, filepath: str | Path) -> F06File:
        path = Path(filepath)
        logger.info(f"Parsing {path.name}")
        with open(path, "r", errors="replace") as f:
            parsed = cls.parse_lines(f, filename=path.name)
        logger.info(
            f"{path.name}: {len(parsed.blocks)} blocks, {len(parsed.warnings)} warnings, "
            f"{len(parsed.fatal_errors)} fatal errors"
        )
        return parsed
