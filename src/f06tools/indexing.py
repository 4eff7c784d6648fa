"""Abstract row/column keys for F06 data blocks.

Every table is a matrix whose rows and columns are addressed by one of the
key types below. A table's rows all share one key type, and so do its
columns. All key types derive from NasIndex, which gives them:

  - a display form close to the solver's own vocabulary (``str(key)``),
  - a short category name (``key.INDEX_NAME``),
  - a total order, first by key type, then within the type. For enumerated
    field catalogues the declaration order is also the canonical column
    order of the tables that use them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from f06tools.elements import ElementType

_VARIANT_RANKS: dict[type, int] = {}


def index_variant(name: str):
    """Register a class as a member of the closed set of index variants."""
    def register(cls):
        cls.INDEX_NAME = name
        _VARIANT_RANKS[cls] = len(_VARIANT_RANKS)
        return cls
    return register


class NasIndex:
    """Common behaviour of every row/column key."""

    INDEX_NAME: ClassVar[str] = ""

    def sort_key(self) -> tuple:
        raise NotImplementedError

    def _full_key(self) -> tuple:
        return (_VARIANT_RANKS[type(self)], self.sort_key())

    def __lt__(self, other):
        if not isinstance(other, NasIndex):
            return NotImplemented
        return self._full_key() < other._full_key()

    def __le__(self, other):
        if not isinstance(other, NasIndex):
            return NotImplemented
        return self._full_key() <= other._full_key()

    def __gt__(self, other):
        if not isinstance(other, NasIndex):
            return NotImplemented
        return self._full_key() > other._full_key()

    def __ge__(self, other):
        if not isinstance(other, NasIndex):
            return NotImplemented
        return self._full_key() >= other._full_key()


class IndexEnum(NasIndex, Enum):
    """An index whose values form a fixed catalogue, e.g. table columns."""

    def __str__(self) -> str:
        return self.value

    def sort_key(self) -> tuple:
        return (type(self)._member_names_.index(self.name),)

    @classmethod
    def all(cls) -> list:
        return list(cls)

    @classmethod
    def canonical_cols(cls) -> dict:
        return {member: i for i, member in enumerate(cls)}


# --- Geometry ---

class DofType(Enum):
    TRANSLATIONAL = "T"
    ROTATIONAL = "R"


@index_variant("AXIS")
class Axis(IndexEnum):
    X = "X"
    Y = "Y"
    Z = "Z"

    @property
    def number(self) -> int:
        return self.sort_key()[0] + 1


@index_variant("DOF")
class Dof(IndexEnum):
    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
    R1 = "R1"
    R2 = "R2"
    R3 = "R3"

    @property
    def dof_type(self) -> DofType:
        return DofType(self.value[0])

    @property
    def axis(self) -> Axis:
        return list(Axis)[int(self.value[1]) - 1]

    @property
    def number(self) -> int:
        """Nastran component number, 1-6."""
        return self.sort_key()[0] + 1

    @classmethod
    def from_number(cls, n: int) -> "Dof":
        if not 1 <= n <= 6:
            raise ValueError(f"no such degree of freedom: {n}")
        return list(cls)[n - 1]


SIXDOF = 6


# --- References to model entities ---

@index_variant("GRID POINT ID")
@dataclass(frozen=True)
class GridPointRef(NasIndex):
    gid: int

    def __str__(self) -> str:
        return f"GRID {self.gid}"

    def sort_key(self) -> tuple:
        return (self.gid,)


@index_variant("ELEMENT ID")
@dataclass(frozen=True)
class ElementRef(NasIndex):
    eid: int
    etype: Optional[ElementType] = None

    def __str__(self) -> str:
        if self.etype is not None:
            return f"ELEMENT {self.eid} ({self.etype.value})"
        return f"ELEMENT {self.eid}"

    def sort_key(self) -> tuple:
        return (self.eid, -1 if self.etype is None else self.etype.order)


@index_variant("COORD SYS ID")
@dataclass(frozen=True)
class CsysRef(NasIndex):
    cid: int

    def __str__(self) -> str:
        return f"COORD SYS {self.cid}"

    def sort_key(self) -> tuple:
        return (self.cid,)


@index_variant("GRID POINT COORD SYS")
@dataclass(frozen=True)
class GridPointCsys(NasIndex):
    gid: GridPointRef
    cid: CsysRef

    def __str__(self) -> str:
        return f"{self.gid} ON {self.cid}"

    def sort_key(self) -> tuple:
        return (self.gid.sort_key(), self.cid.sort_key())


# --- Force origins ---

class ForceOriginKind(Enum):
    LOAD = "APPLIED LOAD"
    ELEMENT = "ELEMENT"
    SPC = "SINGLE-POINT CONSTRAINT"
    MPC = "MULTI-POINT CONSTRAINT"


_ORIGIN_ORDER = {kind: i for i, kind in enumerate(ForceOriginKind)}


@index_variant("FORCE ORIGIN")
@dataclass(frozen=True)
class ForceOrigin(NasIndex):
    kind: ForceOriginKind
    element: Optional[ElementRef] = None

    def __post_init__(self):
        if (self.kind is ForceOriginKind.ELEMENT) != (self.element is not None):
            raise ValueError("an element reference is required exactly for element force origins")

    @classmethod
    def load(cls) -> "ForceOrigin":
        return cls(ForceOriginKind.LOAD)

    @classmethod
    def spc(cls) -> "ForceOrigin":
        return cls(ForceOriginKind.SPC)

    @classmethod
    def mpc(cls) -> "ForceOrigin":
        return cls(ForceOriginKind.MPC)

    @classmethod
    def from_element(cls, element: ElementRef) -> "ForceOrigin":
        return cls(ForceOriginKind.ELEMENT, element)

    def __str__(self) -> str:
        if self.element is not None:
            return str(self.element)
        return self.kind.value

    def sort_key(self) -> tuple:
        elem = self.element.sort_key() if self.element is not None else ()
        return (_ORIGIN_ORDER[self.kind], elem)


@index_variant("GRID POINT FORCE ORIGIN")
@dataclass(frozen=True)
class GridPointForceOrigin(NasIndex):
    grid_point: GridPointRef
    force_origin: ForceOrigin

    def __str__(self) -> str:
        return f"{self.force_origin} FORCE AT {self.grid_point}"

    def sort_key(self) -> tuple:
        return (self.grid_point.sort_key(), self.force_origin.sort_key())


# --- Points within elements ---

class PointKind(Enum):
    CENTROID = "CENTROID"
    CORNER = "CORNER"
    MIDPOINT = "MIDPOINT"
    ANYWHERE = "ANYWHERE"


_POINT_ORDER = {kind: i for i, kind in enumerate(PointKind)}


@dataclass(frozen=True)
class ElementPoint:
    """Where in an element a value was recovered."""
    kind: PointKind
    grid: Optional[GridPointRef] = None

    def __post_init__(self):
        needs_grid = self.kind in (PointKind.CORNER, PointKind.MIDPOINT)
        if needs_grid != (self.grid is not None):
            raise ValueError(f"{self.kind.value} points need a grid point exactly when at a corner or midpoint")

    @classmethod
    def centroid(cls) -> "ElementPoint":
        return cls(PointKind.CENTROID)

    @classmethod
    def corner(cls, gid: int) -> "ElementPoint":
        return cls(PointKind.CORNER, GridPointRef(gid))

    @classmethod
    def midpoint(cls, gid: int) -> "ElementPoint":
        return cls(PointKind.MIDPOINT, GridPointRef(gid))

    @classmethod
    def anywhere(cls) -> "ElementPoint":
        return cls(PointKind.ANYWHERE)

    def __str__(self) -> str:
        if self.kind is PointKind.CORNER:
            return f"CORNER AT GRID {self.grid.gid}"
        if self.kind is PointKind.MIDPOINT:
            return f"MIDPOINT AT GRID {self.grid.gid}"
        if self.kind is PointKind.ANYWHERE:
            return "ANYWHERE IN THE ELEMENT"
        return "CENTROID"

    def sort_key(self) -> tuple:
        grid = self.grid.sort_key() if self.grid is not None else ()
        return (_POINT_ORDER[self.kind], grid)


class ElementSide(Enum):
    BOTTOM = "BOTTOM"
    TOP = "TOP"

    def opposite(self) -> "ElementSide":
        return ElementSide.TOP if self is ElementSide.BOTTOM else ElementSide.BOTTOM

    def __str__(self) -> str:
        return f"{self.value} SIDE"


@index_variant("POINT IN ELEMENT")
@dataclass(frozen=True)
class PointInElement(NasIndex):
    element: ElementRef
    point: ElementPoint

    def __str__(self) -> str:
        return f"{self.element}, {self.point}"

    def sort_key(self) -> tuple:
        return (self.element.sort_key(), self.point.sort_key())


@index_variant("ELEMENT, POINT AND SIDE")
@dataclass(frozen=True)
class ElementSidedPoint(NasIndex):
    element: ElementRef
    point: ElementPoint
    side: ElementSide

    def __str__(self) -> str:
        return f"{self.element}, {self.point}, {self.side}"

    def sort_key(self) -> tuple:
        side = 0 if self.side is ElementSide.BOTTOM else 1
        return (self.element.sort_key(), self.point.sort_key(), side)

    def flipped(self) -> "ElementSidedPoint":
        return ElementSidedPoint(self.element, self.point, self.side.opposite())


# --- Field catalogues ---

@dataclass(frozen=True)
class _WrappedField(NasIndex):
    """A field that reuses another catalogue's columns under a new meaning."""
    field: IndexEnum

    INNER: ClassVar[type] = IndexEnum

    def __str__(self) -> str:
        return str(self.field)

    def sort_key(self) -> tuple:
        return self.field.sort_key()

    @classmethod
    def all(cls) -> list:
        return [cls(f) for f in cls.INNER]

    @classmethod
    def canonical_cols(cls) -> dict:
        return {cls(f): i for i, f in enumerate(cls.INNER)}


@index_variant("FORCE")
class SingleForce(IndexEnum):
    FORCE = "FORCE"


@index_variant("STRESS")
class SingleStress(IndexEnum):
    STRESS = "STRESS"


@index_variant("STRAIN")
class SingleStrain(IndexEnum):
    STRAIN = "STRAIN"


@index_variant("BAR FORCE FIELD")
class BarForceField(IndexEnum):
    BEND_MOMENT_A1 = "BEND-MOMENT END-A, PLANE 1"
    BEND_MOMENT_A2 = "BEND-MOMENT END-A, PLANE 2"
    BEND_MOMENT_B1 = "BEND-MOMENT END-B, PLANE 1"
    BEND_MOMENT_B2 = "BEND-MOMENT END-B, PLANE 2"
    SHEAR_1 = "SHEAR PLANE 1"
    SHEAR_2 = "SHEAR PLANE 2"
    AXIAL_FORCE = "AXIAL FORCE"
    TORQUE = "TORQUE"


@index_variant("BAR STRESS FIELD")
class BarStressField(IndexEnum):
    SA1 = "END-A, RECOVERY POINT 1"
    SA2 = "END-A, RECOVERY POINT 2"
    SA3 = "END-A, RECOVERY POINT 3"
    SA4 = "END-A, RECOVERY POINT 4"
    MAX_A = "MAX AT END-A"
    MIN_A = "MIN AT END-A"
    SB1 = "END-B, RECOVERY POINT 1"
    SB2 = "END-B, RECOVERY POINT 2"
    SB3 = "END-B, RECOVERY POINT 3"
    SB4 = "END-B, RECOVERY POINT 4"
    MAX_B = "MAX AT END-B"
    MIN_B = "MIN AT END-B"
    AXIAL = "AXIAL"
    MS_TENSION = "MARGIN OF SAFETY FOR TENSION"
    MS_COMPRESSION = "MARGIN OF SAFETY FOR COMPRESSION"


@index_variant("BAR STRAIN FIELD")
@dataclass(frozen=True)
class BarStrainField(_WrappedField):
    INNER = BarStressField


@index_variant("ROD FORCE FIELD")
class RodForceField(IndexEnum):
    AXIAL_FORCE = "AXIAL FORCE"
    TORQUE = "TORQUE"


@index_variant("ROD STRESS FIELD")
class RodStressField(IndexEnum):
    AXIAL = "AXIAL"
    AXIAL_SAFETY_MARGIN = "AXIAL SAFETY MARGIN"
    TORSIONAL = "TORSIONAL"
    TORSIONAL_SAFETY_MARGIN = "TORSIONAL SAFETY MARGIN"


@index_variant("ROD STRAIN FIELD")
@dataclass(frozen=True)
class RodStrainField(_WrappedField):
    INNER = RodStressField


@index_variant("2D ELEM FORCE FIELD")
class PlateForceField(IndexEnum):
    NORMAL_X = "Nx"
    NORMAL_Y = "Ny"
    NORMAL_XY = "Nxy"
    MOMENT_X = "Mx"
    MOMENT_Y = "My"
    MOMENT_XY = "Mxy"
    TRANSVERSE_SHEAR_X = "Qx"
    TRANSVERSE_SHEAR_Y = "Qy"


@index_variant("PLATE STRESS FIELD")
class PlateStressField(IndexEnum):
    FIBRE_DISTANCE = "FIBRE DISTANCE"
    NORMAL_X = "NORMAL-X"
    NORMAL_Y = "NORMAL-Y"
    SHEAR_XY = "SHEAR-XY"
    ANGLE = "ANGLE"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    VON_MISES = "VON MISES"


@index_variant("PLATE STRAIN FIELD")
@dataclass(frozen=True)
class PlateStrainField(_WrappedField):
    INNER = PlateStressField


@index_variant("EIGENVALUE FIELDS")
class RealEigenvalueField(IndexEnum):
    EIGENVALUE = "EIGENVALUE"
    RADIANS = "RADIANS"
    CYCLES = "CYCLES"
    GENERALIZED_MASS = "GENERALIZED MASS"
    GENERALIZED_STIFFNESS = "GENERALIZED STIFFNESS"


@index_variant("EIGEN SOLUTION MODE")
@dataclass(frozen=True)
class EigenSolutionMode(NasIndex):
    mode: int

    def __str__(self) -> str:
        return f"MODE {self.mode}"

    def sort_key(self) -> tuple:
        return (self.mode,)


INDEX_VARIANTS: tuple[type, ...] = tuple(_VARIANT_RANKS)


def same_variant(a: NasIndex, b: NasIndex) -> bool:
    return type(a) is type(b)


def grid_point_id(index: NasIndex) -> Optional[GridPointRef]:
    """The grid point an index refers to, if any."""
    if isinstance(index, GridPointRef):
        return index
    if isinstance(index, GridPointForceOrigin):
        return index.grid_point
    if isinstance(index, GridPointCsys):
        return index.gid
    if isinstance(index, (PointInElement, ElementSidedPoint)):
        return index.point.grid
    return None


def element_id(index: NasIndex) -> Optional[ElementRef]:
    """The element an index refers to, if any."""
    if isinstance(index, ElementRef):
        return index
    if isinstance(index, (PointInElement, ElementSidedPoint)):
        return index.element
    if isinstance(index, GridPointForceOrigin):
        return index.force_origin.element
    return None
