"""f06tools: extract and compare result tables from Nastran-like F06 files."""

__version__ = "0.3.0"

from f06tools.blocks import BlockRef, FinalBlock
from f06tools.blocktypes import BlockType
from f06tools.compare import Criteria, DataDiffer, DisjunctionBehaviour
from f06tools.diff import DiffSettings, F06Diff
from f06tools.extraction import DatumIndex, Extraction, Specifier
from f06tools.f06file import F06File
from f06tools.flavour import Flavour, Solver, SolType
from f06tools.parser import OnePassParser

__all__ = [
    "BlockRef",
    "BlockType",
    "Criteria",
    "DataDiffer",
    "DatumIndex",
    "DiffSettings",
    "DisjunctionBehaviour",
    "Extraction",
    "F06Diff",
    "F06File",
    "FinalBlock",
    "Flavour",
    "OnePassParser",
    "SolType",
    "Solver",
    "Specifier",
    "__version__",
]
