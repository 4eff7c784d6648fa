"""
Pytest configuration and shared fixtures.

The F06 fragments below are trimmed copies of MYSTRAN output: a solver
banner, a solution line, a spaced-out table caption, a column title line
and a few data lines closed by the MYSTRAN dashes.

Usage:
    def test_example(parse, displacements_text):
        f06 = parse(displacements_text)
        assert len(f06.blocks) == 1
"""

import logging

import pytest

from f06tools.parser import OnePassParser
from f06tools.rowblock import RowBlock


MYSTRAN_BANNER = "          MYSTRAN Version 15.2.1   Dec 20 2023"
DASHES = "                  -------------      -------------      -------------"


def f06_text(*lines: str) -> str:
    return "\n".join(lines) + "\n"


# =============================================================================
# PARSING FIXTURES
# =============================================================================


@pytest.fixture
def parse():
    """
    Factory fixture: parse F06 text into an F06File.

    Usage:
        f06 = parse(text)
    """
    def _parse(text: str, filename: str = "test.f06"):
        return OnePassParser.parse_lines(text.splitlines(), filename=filename)
    return _parse


@pytest.fixture
def mystran_parser():
    """A parser that has already seen a MYSTRAN banner and a SOL 1 line."""
    parser = OnePassParser("test.f06")
    parser.consume(MYSTRAN_BANNER)
    parser.consume(" SOL 1")
    return parser


@pytest.fixture
def displacements_text():
    """Displacements of three grid points in subcase 1."""
    return f06_text(
        MYSTRAN_BANNER,
        " SOL 1",
        " OUTPUT FOR SUBCASE        1",
        "",
        "                                D I S P L A C E M E N T S",
        "     Grid   Coord    T1           T2           T3           R1           R2           R3",
        "        1      0   1.000000E-01 2.000000E-01 3.000000E-01 4.000000E-01 5.000000E-01 6.000000E-01",
        "        2      0   1.100000E-01 2.100000E-01 3.100000E-01 4.100000E-01 5.100000E-01 6.100000E-01",
        "        3      0   0.000000E+00 0.000000E+00 0.000000E+00 0.000000E+00 0.000000E+00 0.000000E+00",
        DASHES,
    )


@pytest.fixture
def rod_forces_text():
    """Rod forces printed two elements per line."""
    return f06_text(
        MYSTRAN_BANNER,
        " SOL 1",
        " OUTPUT FOR SUBCASE        1",
        "",
        "                F O R C E S   I N   R O D   E L E M E N T S     ( C R O D )",
        "     Element      Axial         Torque            Element      Axial         Torque",
        "       11      1.000000E+00   2.000000E+00          12      3.000000E+00   4.000000E+00",
        "       13     -1.500000E+00   0.000000E+00",
        DASHES,
    )


@pytest.fixture
def two_subcase_text():
    """The same displacements table in subcases 1 and 2, with no closing dashes."""
    return f06_text(
        MYSTRAN_BANNER,
        " SOL 1",
        " OUTPUT FOR SUBCASE        1",
        "                                D I S P L A C E M E N T S",
        "",
        "        1      0   1.0E+00 2.0E+00 3.0E+00 4.0E+00 5.0E+00 6.0E+00",
        " OUTPUT FOR SUBCASE        2",
        "                                D I S P L A C E M E N T S",
        "",
        "        1      0   7.0E+00 8.0E+00 9.0E+00 1.0E+01 1.1E+01 1.2E+01",
    )


@pytest.fixture
def f06_file(tmp_path, displacements_text):
    """The displacements fragment written to disk."""
    path = tmp_path / "model.f06"
    path.write_text(displacements_text)
    return path


# =============================================================================
# BLOCK FIXTURES
# =============================================================================


@pytest.fixture
def make_block():
    """
    Factory fixture: build a FinalBlock from {row: [values...]}.

    Columns default to a canonical catalogue such as ``Dof``.

    Usage:
        block = make_block(BlockType.DISPLACEMENTS, Dof, {GridPointRef(1): [0.0] * 6})
    """
    def _make(block_type, columns, rows: dict, subcase: int = 1):
        col_indexes = columns.canonical_cols() if hasattr(columns, "canonical_cols") else columns
        data = RowBlock(col_indexes)
        for row, values in rows.items():
            data.insert_raw(row, values)
        return data.finalise(block_type, subcase)
    return _make


# =============================================================================
# LOGGING
# =============================================================================


@pytest.fixture(autouse=True)
def reset_f06tools_logger():
    """Drop handlers the CLI attached, so later tests never log to a closed stream."""
    yield
    logger = logging.getLogger("f06tools")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
