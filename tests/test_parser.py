"""
Tests for the one-pass parser and file reconciliation.

Tests cover:
- Flavour detection and its monotonicity
- Header accumulation, matching, ambiguity and rejection
- Block start/end, subcase changes and abnormal decoder responses
- Warnings and fatal errors
- Fragment merging and potential header merging
"""

import pytest

from f06tools.blocktypes import BlockType
from f06tools.decoders import LineResponse
from f06tools.elements import ElementType
from f06tools.errors import MergeError
from f06tools.f06file import F06File
from f06tools.flavour import Flavour, Solver, SolType
from f06tools.indexing import (
    Dof, ElementPoint, ElementRef, ElementSide, ElementSidedPoint,
    GridPointRef, RodForceField,
)
from f06tools.lines import PotentialHeader
from f06tools.parser import OnePassParser, ParserPhase, ResponseKind

MYSTRAN_BANNER = "          MYSTRAN Version 15.2.1   Dec 20 2023"
SIMCENTER_BANNER = "                    Simcenter Nastran 2021.1"
DASHES = "                  -------------      -------------      -------------"


def f06_text(*lines: str) -> str:
    return "\n".join(lines) + "\n"


def spaced(caption: str) -> str:
    """Print a caption the way solvers do: letters one space apart, words three."""
    return "          " + "   ".join(" ".join(word) for word in caption.split())


SIX = "1.0E+00 2.0E+00 3.0E+00 4.0E+00 5.0E+00 6.0E+00"
SEVEN = "1.1E+00 2.1E+00 3.1E+00 4.1E+00 5.1E+00 6.1E+00 7.1E+00"
EIGHT = "1.0E+00 2.0E+00 3.0E+00 4.0E+00 5.0E+00 6.0E+00 7.0E+00 8.0E+00"

SIX_DOF_LINES = (f"        1      0   {SIX}", f"        2      0   {SIX}")
SPRING_LINES = ("       11   1.0E+00       12   2.0E+00",)
ROD_STRESS_LINES = (
    "       11   1.0E+00   2.0E+00   3.0E+00   4.0E+00",
    "       12   1.0E+00   2.0E+00   3.0E+00   4.0E+00",
)
BAR_STRESS_LINES = (f"       21   {EIGHT}", f"            {SEVEN}",
                    f"       22   {EIGHT}", f"            {SEVEN}")
PLATE_FORCE_LINES = (f"      101   {EIGHT}", f"      102   {EIGHT}")
PLATE_STRESS_LINES = (f"      101   {EIGHT}", f"            {EIGHT}")
BUSH_LINES = (f"      101   {SIX}", f"      102   {SIX}")

# (table kind, caption, data lines, rows expected)
EVERY_TABLE = [
    (BlockType.DISPLACEMENTS, "DISPLACEMENTS", SIX_DOF_LINES, 2),
    (BlockType.GRID_POINT_FORCE_BALANCE, "GRID POINT FORCE BALANCE", (
        "   FORCE BALANCE FOR GRID POINT        5",
        f"   APPLIED FORCE        {SIX}",
        f"   SPC FORCE            {SIX}",
    ), 2),
    (BlockType.SPC_FORCES, "FORCES OF SINGLE-POINT CONSTRAINT", SIX_DOF_LINES, 2),
    (BlockType.MPC_FORCES, "FORCES OF MULTI-POINT CONSTRAINT", SIX_DOF_LINES, 2),
    (BlockType.APPLIED_FORCES, "APPLIED FORCES", SIX_DOF_LINES, 2),
    (BlockType.ELAS1_FORCES, "FORCES IN SCALAR SPRINGS (CELAS1)", SPRING_LINES, 2),
    (BlockType.ELAS1_STRESSES, "STRESSES IN SCALAR SPRINGS (CELAS1)", SPRING_LINES, 2),
    (BlockType.ELAS1_STRAINS, "STRAINS IN SCALAR SPRINGS (CELAS1)", SPRING_LINES, 2),
    (BlockType.ROD_FORCES, "FORCES IN ROD ELEMENTS",
     ("       11   1.0E+00   2.0E+00       12   3.0E+00   4.0E+00",), 2),
    (BlockType.ROD_STRESSES, "STRESSES IN ROD ELEMENTS", ROD_STRESS_LINES, 2),
    (BlockType.ROD_STRAINS, "STRAINS IN ROD ELEMENTS", ROD_STRESS_LINES, 2),
    (BlockType.BAR_FORCES, "FORCES IN BAR ELEMENTS",
     (f"       21   {EIGHT}", f"       22   {EIGHT}"), 2),
    (BlockType.BAR_STRESSES, "STRESSES IN BAR ELEMENTS", BAR_STRESS_LINES, 2),
    (BlockType.BAR_STRAINS, "STRAINS IN BAR ELEMENTS", BAR_STRESS_LINES, 2),
    (BlockType.TRIA_FORCES, "FORCES IN TRIANGULAR ELEMENTS (CTRIA3)", PLATE_FORCE_LINES, 2),
    (BlockType.TRIA_STRESSES, "STRESSES IN TRIANGULAR ELEMENTS (CTRIA3)", PLATE_STRESS_LINES, 2),
    (BlockType.TRIA_STRAINS, "STRAINS IN TRIANGULAR ELEMENTS (CTRIA3)", PLATE_STRESS_LINES, 2),
    (BlockType.QUAD_FORCES, "FORCES IN QUADRILATERAL ELEMENTS (QUAD4)", PLATE_FORCE_LINES, 2),
    (BlockType.QUAD_STRESSES, "STRESSES IN QUADRILATERAL ELEMENTS (QUAD4)", PLATE_STRESS_LINES, 2),
    (BlockType.QUAD_STRAINS, "STRAINS IN QUADRILATERAL ELEMENTS (QUAD4)", PLATE_STRESS_LINES, 2),
    (BlockType.BUSH_FORCES, "FORCES IN BUSH ELEMENTS", BUSH_LINES, 2),
    (BlockType.BUSH_STRESSES, "STRESSES IN BUSH ELEMENTS", BUSH_LINES, 2),
    (BlockType.BUSH_STRAINS, "STRAINS IN BUSH ELEMENTS", BUSH_LINES, 2),
    (BlockType.EIGENVECTOR, "REAL EIGENVECTOR NO. 1", SIX_DOF_LINES, 2),
    (BlockType.REAL_EIGENVALUES, "REAL EIGENVALUES", (
        "      1         1   3.9E+03  6.2E+01  1.0E+01  1.0E+00  3.9E+03",
        "      2         2   1.5E+04  1.2E+02  2.0E+01  1.0E+00  1.5E+04",
    ), 2),
]


# =============================================================================
# FLAVOUR
# =============================================================================


class TestFlavourDetection:
    """Tests for solver and solution type detection while parsing."""

    def test_detected_once(self):
        parser = OnePassParser()
        assert parser.consume(MYSTRAN_BANNER).kind is ResponseKind.SOLVER
        assert parser.consume(" SOL 103").kind is ResponseKind.SOLTYPE
        # later mentions never change the flavour
        assert parser.consume("  NX NASTRAN  VERSION 12").kind is ResponseKind.USELESS
        assert parser.consume(" SOL 101").kind is ResponseKind.USELESS
        assert parser.file.flavour.solver is Solver.MYSTRAN
        assert parser.file.flavour.soltype is SolType.EIGENVALUE

    def test_decoders_get_the_flavour(self, mystran_parser):
        mystran_parser.consume("   D I S P L A C E M E N T S")
        mystran_parser.consume("")
        assert mystran_parser.decoder.flavour.solver is Solver.MYSTRAN


# =============================================================================
# HEADERS
# =============================================================================


class TestHeaders:
    """Tests for header resolution."""

    def test_block_starts_after_header(self, mystran_parser):
        assert mystran_parser.phase is ParserPhase.IDLE
        r1 = mystran_parser.consume("FORCES IN ROD ELEMENTS")
        r2 = mystran_parser.consume("FORCES IN ROD ELEMENTS")
        assert r1.kind is r2.kind is ResponseKind.BLOCK_HEADER
        assert mystran_parser.phase is ParserPhase.ACCUMULATING_HEADER
        begin = mystran_parser.consume("   Element    Axial    Torque")
        assert begin.kind is ResponseKind.BEGIN_BLOCK
        assert begin.payload is BlockType.ROD_FORCES
        assert mystran_parser.phase is ParserPhase.DECODING_BLOCK

    def test_beginning_without_solver(self):
        parser = OnePassParser()
        parser.consume("FORCES IN ROD ELEMENTS")
        parser.consume("FORCES IN ROD ELEMENTS")
        response = parser.consume("  11  1.0E+00  2.0E+00")
        assert response.kind is ResponseKind.BEGINNING_WITHOUT_SOLVER
        assert response.payload is BlockType.ROD_FORCES
        assert parser.decoder is None
        assert parser.phase is ParserPhase.IDLE

    def test_ambiguous_header_is_dropped(self, mystran_parser):
        mystran_parser.consume("   D I S P L A C E M E N T S   A N D   S P C   F O R C E S")
        response = mystran_parser.consume("        1      0   1.0 2.0 3.0 4.0 5.0 6.0")
        assert response.kind is ResponseKind.AMBIGUOUS_HEADER
        assert set(response.payload) == {BlockType.DISPLACEMENTS, BlockType.SPC_FORCES}
        assert mystran_parser.decoder is None
        assert mystran_parser.finish().blocks == []

    def test_unknown_header_is_kept(self, mystran_parser):
        mystran_parser.consume("")
        mystran_parser.consume("   S T R E S S E S   I N   H E X A   E L E M E N T S")
        response = mystran_parser.consume("")
        assert response.kind is ResponseKind.POTENTIAL_HEADER
        assert response.payload == PotentialHeader(4, 1, "STRESSES IN HEXA ELEMENTS")
        assert mystran_parser.file.potential_headers == [response.payload]

    def test_bad_words_are_rejected(self, mystran_parser):
        mystran_parser.consume("   G R I D   P O I N T   B U L K   D A T A   E C H O")
        response = mystran_parser.consume("")
        assert response.kind is ResponseKind.REJECTED_HEADER
        assert mystran_parser.file.potential_headers == []

    def test_decoder_refusing_header(self, mystran_parser):
        mystran_parser.consume(
            "   S T R E S S E S   I N   Q U A D R I L A T E R A L   E L E M E N T S   ( Q U A D 4 )")
        mystran_parser.consume("   C O M P O S I T E   E L E M E N T S")
        response = mystran_parser.consume("")
        assert response.kind is ResponseKind.POTENTIAL_HEADER
        assert mystran_parser.decoder is None

    def test_header_flushes_running_block(self, parse, displacements_text):
        text = displacements_text.replace(DASHES + "\n", "")
        text += f06_text(
            "                F O R C E S   I N   R O D   E L E M E N T S",
            "       11      1.0E+00   2.0E+00",
        )
        f06 = parse(text)
        assert [b.block_type for b in f06.blocks] == [BlockType.DISPLACEMENTS, BlockType.ROD_FORCES]


# =============================================================================
# BLOCKS
# =============================================================================


class TestBlocks:
    """Tests for decoding whole tables."""

    def test_displacements(self, parse, displacements_text):
        f06 = parse(displacements_text)
        assert len(f06.blocks) == 1
        block = f06.blocks[0]
        assert block.block_type is BlockType.DISPLACEMENTS
        assert block.subcase == 1
        assert block.rows() == [GridPointRef(1), GridPointRef(2), GridPointRef(3)]
        assert block.get(GridPointRef(2), Dof.R1) == 0.41
        assert block.line_range == (5, 9)

    def test_rod_forces(self, parse, rod_forces_text):
        f06 = parse(rod_forces_text)
        block = f06.blocks[0]
        assert len(block) == 3
        assert block.get(ElementRef(13, ElementType.ROD), RodForceField.AXIAL_FORCE) == -1.5

    def test_dashes_end_the_block(self, mystran_parser):
        mystran_parser.consume("   D I S P L A C E M E N T S")
        mystran_parser.consume("")
        mystran_parser.consume("   1   0   1.0 2.0 3.0 4.0 5.0 6.0")
        response = mystran_parser.consume(DASHES)
        assert response.kind is ResponseKind.BLOCK_END
        assert mystran_parser.decoder is None
        assert mystran_parser.consume("   2   0   1.0 2.0 3.0 4.0 5.0 6.0").kind is ResponseKind.USELESS

    def test_force_balance_ignores_dashes(self, mystran_parser):
        mystran_parser.consume("   G R I D   P O I N T   F O R C E   B A L A N C E")
        mystran_parser.consume("   FORCE BALANCE FOR GRID POINT        5")
        mystran_parser.consume("   APPLIED FORCE        1.0 2.0 3.0 4.0 5.0 6.0")
        response = mystran_parser.consume(DASHES)
        assert response.kind is ResponseKind.PASSED_TO_DECODER
        assert mystran_parser.consume("   SPC FORCE  -1.0 0.0 0.0 0.0 0.0 0.0").kind is ResponseKind.PASSED_TO_DECODER
        block = mystran_parser.finish().blocks[0]
        assert block.block_type is BlockType.GRID_POINT_FORCE_BALANCE
        assert len(block) == 2

    def test_abnormal_response_ends_block(self, mystran_parser):
        mystran_parser.consume("   S T R E S S E S   I N   B A R   E L E M E N T S")
        mystran_parser.consume("")
        response = mystran_parser.consume("     1.0E+00 2.0E+00 3.0E+00 4.0E+00 5.0E+00 6.0E+00")
        assert response.kind is ResponseKind.PASSED_TO_DECODER
        assert response.payload == (BlockType.BAR_STRESSES, LineResponse.ABORT)
        assert mystran_parser.decoder is None

    def test_empty_blocks_are_dropped(self, mystran_parser):
        mystran_parser.consume("   D I S P L A C E M E N T S")
        mystran_parser.consume("")
        mystran_parser.consume(DASHES)
        assert mystran_parser.finish().blocks == []

    def test_subcase_change_flushes(self, parse, two_subcase_text):
        f06 = parse(two_subcase_text)
        assert [(b.block_type, b.subcase) for b in f06.blocks] == [
            (BlockType.DISPLACEMENTS, 1),
            (BlockType.DISPLACEMENTS, 2),
        ]
        assert f06.blocks[1].get(GridPointRef(1), Dof.T1) == 7.0
        assert f06.subcases() == [1, 2]

    def test_last_row_carries_to_next_instance(self, mystran_parser):
        mystran_parser.consume("   S T R E S S E S   I N   B A R   E L E M E N T S")
        mystran_parser.consume("")
        mystran_parser.consume(f"     21   {EIGHT}")
        mystran_parser.consume(DASHES)
        mystran_parser.consume("   S T R E S S E S   I N   B A R   E L E M E N T S")
        mystran_parser.consume("")
        response = mystran_parser.consume("          1.1E+00 2.1E+00 3.1E+00 4.1E+00 6.1E+00 7.1E+00")
        assert response.payload == (BlockType.BAR_STRESSES, LineResponse.DATA)
        blocks = mystran_parser.finish().blocks
        assert [b.rows() for b in blocks] == [[ElementRef(21, ElementType.BAR)]] * 2

    def test_every_table_kind_is_covered(self):
        assert {case[0] for case in EVERY_TABLE} == set(BlockType)

    @pytest.mark.parametrize(
        "block_type, caption, lines, n_rows", EVERY_TABLE,
        ids=[case[0].short_name for case in EVERY_TABLE],
    )
    def test_table_from_header_and_data(self, parse, block_type, caption, lines, n_rows):
        f06 = parse(f06_text(MYSTRAN_BANNER, " SOL 1", spaced(caption), "", *lines))
        (block,) = f06.blocks
        assert block.block_type is block_type
        assert block.subcase == 1
        assert len(block) == n_rows
        canonical = block_type.init_decoder(Flavour(Solver.MYSTRAN)).finalise(1).cols()
        assert block.cols() == canonical

    def test_simcenter_corner_output(self, parse):
        caption = spaced("STRESSES IN QUADRILATERAL ELEMENTS (QUAD4)") + "        OPTION = BILIN"
        f06 = parse(f06_text(
            SIMCENTER_BANNER,
            caption,
            "",
            f"0      101    CEN/4  {EIGHT}",
            f"                     {EIGHT}",
            f"               7     {EIGHT}",
            f"                     {EIGHT}",
        ))
        (block,) = f06.blocks
        quad = ElementRef(101, ElementType.QUAD4)
        assert block.rows() == [
            ElementSidedPoint(quad, ElementPoint.centroid(), ElementSide.BOTTOM),
            ElementSidedPoint(quad, ElementPoint.centroid(), ElementSide.TOP),
            ElementSidedPoint(quad, ElementPoint.corner(7), ElementSide.BOTTOM),
            ElementSidedPoint(quad, ElementPoint.corner(7), ElementSide.TOP),
        ]


# =============================================================================
# MESSAGES
# =============================================================================


class TestMessages:
    """Tests for warnings and fatal errors."""

    def test_recorded_by_line(self, mystran_parser):
        mystran_parser.consume(" *** USER WARNING MESSAGE 2101 (GRIDSET)")
        mystran_parser.consume(" *** SYSTEM FATAL MESSAGE 4276 (EQD4D)")
        f06 = mystran_parser.finish()
        assert f06.warnings == {3: "*** USER WARNING MESSAGE 2101 (GRIDSET)"}
        assert f06.fatal_errors == {4: "*** SYSTEM FATAL MESSAGE 4276 (EQD4D)"}

    def test_message_resolves_pending_header(self, mystran_parser):
        mystran_parser.consume("   D I S P L A C E M E N T S")
        mystran_parser.consume(" *** USER WARNING MESSAGE 2101")
        assert mystran_parser.phase is ParserPhase.DECODING_BLOCK


# =============================================================================
# RECONCILIATION
# =============================================================================


class TestReconciliation:
    """Tests for F06File merge passes and queries."""

    def test_fragments_merge(self, parse, displacements_text):
        page_two = f06_text(
            "                                D I S P L A C E M E N T S",
            "",
            "        4      0   1.0 2.0 3.0 4.0 5.0 6.0",
            DASHES,
        )
        f06 = parse(displacements_text + page_two)
        assert len(f06.blocks) == 2
        assert f06.merge_blocks() == 1
        assert len(f06.blocks) == 1
        assert len(f06.blocks[0]) == 4

    def test_three_fragments_merge_into_one(self, make_block):
        fragments = [
            make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(g): [float(g)] * 6})
            for g in (1, 2, 3)
        ]
        f06 = F06File(blocks=fragments)
        assert f06.merge_blocks() == 2
        (merged,) = f06.blocks
        assert sorted(merged.rows()) == [GridPointRef(1), GridPointRef(2), GridPointRef(3)]
        assert merged.get(GridPointRef(3), Dof.R3) == 3.0
        with pytest.raises(MergeError):
            merged.try_merge(merged)

    def test_conflicting_fragments_stay_apart(self, parse, displacements_text):
        f06 = parse(displacements_text + displacements_text)
        assert f06.merge_blocks() == 0
        assert len(f06.blocks) == 2
        assert list(f06.unique_blocks()) == []

    def test_block_search(self, parse, two_subcase_text):
        f06 = parse(two_subcase_text)
        assert len(f06.block_search(BlockType.DISPLACEMENTS)) == 2
        assert len(f06.block_search(subcase=2)) == 1
        assert f06.block_search(BlockType.ROD_FORCES) == []
        assert f06.block_types() == [BlockType.DISPLACEMENTS]
        assert len(list(f06.unique_blocks())) == 2

    def test_potential_headers_merge(self):
        f06 = F06File()
        f06.add_potential_header(PotentialHeader(12, 1, "IN HEXA ELEMENTS"))
        f06.add_potential_header(PotentialHeader(30, 1, "HEAT FLUX"))
        f06.add_potential_header(PotentialHeader(10, 2, "STRAIN ENERGY"))
        assert [h.start for h in f06.potential_headers] == [10, 12, 30]
        assert f06.merge_potential_headers() == 1
        assert f06.potential_headers == [
            PotentialHeader(10, 3, "STRAIN ENERGY IN HEXA ELEMENTS"),
            PotentialHeader(30, 1, "HEAT FLUX"),
        ]

    def test_parse_file(self, f06_file):
        f06 = OnePassParser.parse_file(f06_file)
        assert f06.filename == "model.f06"
        assert len(f06.blocks) == 1
