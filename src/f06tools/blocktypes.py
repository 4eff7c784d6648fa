"""Catalogue of the tables f06tools knows how to decode."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from f06tools.decoders.base import BlockDecoder, relabelled
from f06tools.decoders.eigen import RealEigenvaluesDecoder
from f06tools.decoders.elements import (
    BarForcesDecoder, BarStressesDecoder, BushDecoder, Elas1ForcesDecoder,
    Elas1StressesDecoder, PlateForcesDecoder, PlateStressesDecoder,
    RodForcesDecoder, RodStressesDecoder,
)
from f06tools.decoders.grid import GridPointForceBalanceDecoder, SixDofDecoder
from f06tools.elements import ElementType
from f06tools.flavour import Flavour
from f06tools.indexing import (
    BarStrainField, PlateStrainField, RodStrainField, SingleStrain,
)

# Captions with these words are report boilerplate, never tables we decode
BAD_WORDS = ("NASTRAN", "CONTROL", "BULK", "ECHO", "NODAL", "GENERATOR")

_LOCAL_STRESSES = "ELEMENT STRESSES IN LOCAL ELEMENT COORDINATE SYSTEM FOR ELEMENT TYPE "
_LOCAL_STRAINS = "ELEMENT STRAINS IN LOCAL ELEMENT COORDINATE SYSTEM FOR ELEMENT TYPE "
_ENGINEERING_FORCES = "ELEMENT ENGINEERING FORCES FOR ELEMENT TYPE "


class BlockType(Enum):
    """Known tables. Declaration order is also their sort order."""
    DISPLACEMENTS = "Displacements"
    GRID_POINT_FORCE_BALANCE = "GridPointForceBalance"
    SPC_FORCES = "SpcForces"
    MPC_FORCES = "MpcForces"
    APPLIED_FORCES = "AppliedForces"
    ELAS1_FORCES = "Elas1Forces"
    ELAS1_STRESSES = "Elas1Stresses"
    ELAS1_STRAINS = "Elas1Strains"
    ROD_FORCES = "RodForces"
    ROD_STRESSES = "RodStresses"
    ROD_STRAINS = "RodStrains"
    BAR_FORCES = "BarForces"
    BAR_STRESSES = "BarStresses"
    BAR_STRAINS = "BarStrains"
    TRIA_FORCES = "TriaForces"
    TRIA_STRESSES = "TriaStresses"
    TRIA_STRAINS = "TriaStrains"
    QUAD_FORCES = "QuadForces"
    QUAD_STRESSES = "QuadStresses"
    QUAD_STRAINS = "QuadStrains"
    BUSH_FORCES = "BushForces"
    BUSH_STRESSES = "BushStresses"
    BUSH_STRAINS = "BushStrains"
    EIGENVECTOR = "EigenVector"
    REAL_EIGENVALUES = "RealEigenvalues"

    def __lt__(self, other):
        if not isinstance(other, BlockType):
            return NotImplemented
        return _RANK[self] < _RANK[other]

    def __str__(self) -> str:
        return self.desc

    @property
    def desc(self) -> str:
        return _CATALOGUE[self].desc

    @property
    def headers(self) -> tuple[str, ...]:
        """Unspaced header texts that open this table, for any solver."""
        return _CATALOGUE[self].headers

    @property
    def element_type(self) -> Optional[ElementType]:
        return _CATALOGUE[self].element_type

    @property
    def short_name(self) -> str:
        return self.value

    @property
    def snake_case_name(self) -> str:
        return self.name.lower()

    @property
    def ignores_block_end_sentinels(self) -> bool:
        """Tables that print sentinel-like separators inside their body."""
        return self in _SENTINEL_EXEMPT

    def matches(self, header: str) -> bool:
        return any(h in header for h in self.headers)

    def init_decoder(self, flavour: Flavour) -> BlockDecoder:
        return _CATALOGUE[self].factory(self, flavour)

    @classmethod
    def from_name(cls, name: str) -> "BlockType":
        """Look up a table kind by its short, snake case or enum name."""
        for bt in cls:
            if name in (bt.value, bt.name, bt.snake_case_name):
                return bt
        raise ValueError(f"unknown block type: {name}")

    @classmethod
    def matching(cls, header: str) -> list["BlockType"]:
        return [bt for bt in cls if bt.matches(header)]


@dataclass(frozen=True)
class _Entry:
    desc: str
    headers: tuple[str, ...]
    element_type: Optional[ElementType]
    factory: Callable[[BlockType, Flavour], BlockDecoder]


def _element_headers(forces_or_stresses: str, kind: str, etype: str) -> tuple[str, ...]:
    """Headers of an element table in both solvers' wordings."""
    if forces_or_stresses == "FORCES":
        return (kind, _ENGINEERING_FORCES + etype)
    if forces_or_stresses == "STRESSES":
        return (kind, _LOCAL_STRESSES + etype)
    return (kind, _LOCAL_STRAINS + etype)


_CATALOGUE = {
    BlockType.DISPLACEMENTS: _Entry(
        "Grid point displacements",
        ("DISPLACEMENTS", "DISPLACEMENT VECTOR"),
        None, SixDofDecoder),
    BlockType.GRID_POINT_FORCE_BALANCE: _Entry(
        "Grid point force balance",
        ("GRID POINT FORCE BALANCE",),
        None, GridPointForceBalanceDecoder),
    BlockType.SPC_FORCES: _Entry(
        "Forces of single-point constraint",
        ("SPC FORCES", "FORCES OF SINGLE-POINT CONSTRAINT"),
        None, SixDofDecoder),
    BlockType.MPC_FORCES: _Entry(
        "Forces of multi-point constraint",
        ("MPC FORCES", "FORCES OF MULTIPOINT CONSTRAINT", "FORCES OF MULTI-POINT CONSTRAINT"),
        None, SixDofDecoder),
    BlockType.APPLIED_FORCES: _Entry(
        "Applied forces",
        ("APPLIED FORCES", "LOAD VECTOR"),
        None, SixDofDecoder),
    BlockType.ELAS1_FORCES: _Entry(
        "Engineering forces in ELAS1 elements",
        _element_headers("FORCES", "FORCES IN SCALAR SPRINGS (CELAS1)", "ELAS1"),
        ElementType.ELAS1, Elas1ForcesDecoder),
    BlockType.ELAS1_STRESSES: _Entry(
        "Stresses in ELAS1 elements",
        _element_headers("STRESSES", "STRESSES IN SCALAR SPRINGS (CELAS1)", "ELAS1"),
        ElementType.ELAS1, Elas1StressesDecoder),
    BlockType.ELAS1_STRAINS: _Entry(
        "Strains in ELAS1 elements",
        _element_headers("STRAINS", "STRAINS IN SCALAR SPRINGS (CELAS1)", "ELAS1"),
        ElementType.ELAS1, relabelled(Elas1StressesDecoder, lambda col: SingleStrain.STRAIN)),
    BlockType.ROD_FORCES: _Entry(
        "Engineering forces in rod elements",
        _element_headers("FORCES", "FORCES IN ROD ELEMENTS", "ROD"),
        ElementType.ROD, RodForcesDecoder),
    BlockType.ROD_STRESSES: _Entry(
        "Stresses in rod elements",
        _element_headers("STRESSES", "STRESSES IN ROD ELEMENTS", "ROD"),
        ElementType.ROD, RodStressesDecoder),
    BlockType.ROD_STRAINS: _Entry(
        "Strains in rod elements",
        _element_headers("STRAINS", "STRAINS IN ROD ELEMENTS", "ROD"),
        ElementType.ROD, relabelled(RodStressesDecoder, RodStrainField)),
    BlockType.BAR_FORCES: _Entry(
        "Engineering forces in bar elements",
        _element_headers("FORCES", "FORCES IN BAR ELEMENTS", "BAR"),
        ElementType.BAR, BarForcesDecoder),
    BlockType.BAR_STRESSES: _Entry(
        "Stresses in bar elements",
        _element_headers("STRESSES", "STRESSES IN BAR ELEMENTS", "BAR"),
        ElementType.BAR, BarStressesDecoder),
    BlockType.BAR_STRAINS: _Entry(
        "Strains in bar elements",
        _element_headers("STRAINS", "STRAINS IN BAR ELEMENTS", "BAR"),
        ElementType.BAR, relabelled(BarStressesDecoder, BarStrainField)),
    BlockType.TRIA_FORCES: _Entry(
        "Engineering forces in triangular elements",
        _element_headers("FORCES", "FORCES IN TRIANGULAR ELEMENTS (CTRIA3)", "TRIA3"),
        ElementType.TRIA3, PlateForcesDecoder),
    BlockType.TRIA_STRESSES: _Entry(
        "Stresses in triangular elements",
        _element_headers("STRESSES", "STRESSES IN TRIANGULAR ELEMENTS (CTRIA3)", "TRIA3"),
        ElementType.TRIA3, PlateStressesDecoder),
    BlockType.TRIA_STRAINS: _Entry(
        "Strains in triangular elements",
        _element_headers("STRAINS", "STRAINS IN TRIANGULAR ELEMENTS (CTRIA3)", "TRIA3"),
        ElementType.TRIA3, relabelled(PlateStressesDecoder, PlateStrainField)),
    BlockType.QUAD_FORCES: _Entry(
        "Engineering forces in quadrilateral elements",
        _element_headers("FORCES", "FORCES IN QUADRILATERAL ELEMENTS (QUAD4)", "QUAD4"),
        ElementType.QUAD4, PlateForcesDecoder),
    BlockType.QUAD_STRESSES: _Entry(
        "Stresses in quadrilateral elements",
        _element_headers("STRESSES", "STRESSES IN QUADRILATERAL ELEMENTS (QUAD4)", "QUAD4"),
        ElementType.QUAD4, PlateStressesDecoder),
    BlockType.QUAD_STRAINS: _Entry(
        "Strains in quadrilateral elements",
        _element_headers("STRAINS", "STRAINS IN QUADRILATERAL ELEMENTS (QUAD4)", "QUAD4"),
        ElementType.QUAD4, relabelled(PlateStressesDecoder, PlateStrainField)),
    BlockType.BUSH_FORCES: _Entry(
        "Engineering forces in BUSH elements",
        _element_headers("FORCES", "FORCES IN BUSH ELEMENTS", "BUSH"),
        ElementType.BUSH, BushDecoder),
    BlockType.BUSH_STRESSES: _Entry(
        "Stresses in BUSH elements",
        _element_headers("STRESSES", "STRESSES IN BUSH ELEMENTS", "BUSH"),
        ElementType.BUSH, BushDecoder),
    BlockType.BUSH_STRAINS: _Entry(
        "Strains in BUSH elements",
        _element_headers("STRAINS", "STRAINS IN BUSH ELEMENTS", "BUSH"),
        ElementType.BUSH, BushDecoder),
    BlockType.EIGENVECTOR: _Entry(
        "Eigenvector",
        ("EIGENVECTOR",),
        None, SixDofDecoder),
    BlockType.REAL_EIGENVALUES: _Entry(
        "Real eigenvalues",
        ("REAL EIGENVALUES",),
        None, RealEigenvaluesDecoder),
}

_RANK = {bt: i for i, bt in enumerate(BlockType)}

_SENTINEL_EXEMPT = frozenset({BlockType.GRID_POINT_FORCE_BALANCE})


def has_bad_word(text: str) -> bool:
    return any(word in text for word in BAD_WORDS)
