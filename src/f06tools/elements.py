"""Element types that appear in Nastran-like output."""

from enum import Enum
from typing import Optional


class ElementCategory(Enum):
    RIGID_BODY = "Rigid body"
    SCALAR_MASS = "Scalar mass"
    SCALAR_SPRING = "Scalar spring"
    BUSHING = "Bushing"
    ONE_DIMENSIONAL_ELASTIC = "1D elastic"
    TWO_DIMENSIONAL_ELASTIC = "2D elastic"
    THREE_DIMENSIONAL_ELASTIC = "3D elastic"


class ElementType(Enum):
    """Known element types; the value is the upper-case solver name."""
    RBE2 = "RBE2"
    RBE3 = "RBE3"
    RSPLINE = "RSPLINE"
    MASS1 = "MASS1"
    MASS2 = "MASS2"
    MASS3 = "MASS3"
    MASS4 = "MASS4"
    ELAS1 = "ELAS1"
    ELAS2 = "ELAS2"
    ELAS3 = "ELAS3"
    ELAS4 = "ELAS4"
    BUSH = "BUSH"
    BAR = "BAR"
    ROD = "ROD"
    BEAM = "BEAM"
    QUAD4 = "QUAD4"
    QUAD4K = "QUAD4K"
    QUAD6 = "QUAD6"
    QUAD8 = "QUAD8"
    QUADR = "QUADR"
    TRIA3 = "TRIA3"
    TRIA3K = "TRIA3K"
    TRIA6 = "TRIA6"
    TRIAR = "TRIAR"
    SHEAR = "SHEAR"
    TETRA = "TETRA"
    PENTA = "PENTA"
    HEXA = "HEXA"

    @property
    def category(self) -> ElementCategory:
        return _CATEGORIES[self]

    @property
    def order(self) -> int:
        return _ORDER[self]

    @classmethod
    def from_token(cls, token: str) -> Optional["ElementType"]:
        """Recognise an element type in a single field, e.g. "QUAD4" or "CQUAD4"."""
        try:
            return cls(token)
        except ValueError:
            pass
        # longest names first so "CQUAD4K" is not read as QUAD4
        for etype in _BY_LENGTH:
            if etype.value in token:
                return etype
        return None


_CATEGORIES = {
    ElementType.RBE2: ElementCategory.RIGID_BODY,
    ElementType.RBE3: ElementCategory.RIGID_BODY,
    ElementType.RSPLINE: ElementCategory.RIGID_BODY,
    ElementType.MASS1: ElementCategory.SCALAR_MASS,
    ElementType.MASS2: ElementCategory.SCALAR_MASS,
    ElementType.MASS3: ElementCategory.SCALAR_MASS,
    ElementType.MASS4: ElementCategory.SCALAR_MASS,
    ElementType.ELAS1: ElementCategory.SCALAR_SPRING,
    ElementType.ELAS2: ElementCategory.SCALAR_SPRING,
    ElementType.ELAS3: ElementCategory.SCALAR_SPRING,
    ElementType.ELAS4: ElementCategory.SCALAR_SPRING,
    ElementType.BUSH: ElementCategory.BUSHING,
    ElementType.BAR: ElementCategory.ONE_DIMENSIONAL_ELASTIC,
    ElementType.ROD: ElementCategory.ONE_DIMENSIONAL_ELASTIC,
    ElementType.BEAM: ElementCategory.ONE_DIMENSIONAL_ELASTIC,
    ElementType.QUAD4: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.QUAD4K: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.QUAD6: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.QUAD8: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.QUADR: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.TRIA3: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.TRIA3K: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.TRIA6: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.TRIAR: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.SHEAR: ElementCategory.TWO_DIMENSIONAL_ELASTIC,
    ElementType.TETRA: ElementCategory.THREE_DIMENSIONAL_ELASTIC,
    ElementType.PENTA: ElementCategory.THREE_DIMENSIONAL_ELASTIC,
    ElementType.HEXA: ElementCategory.THREE_DIMENSIONAL_ELASTIC,
}

_ORDER = {etype: i for i, etype in enumerate(ElementType)}
_BY_LENGTH = sorted(ElementType, key=lambda e: -len(e.value))
