"""Decoders for grid point tables."""

from f06tools.decoders.base import LineResponse, TabularDecoder
from f06tools.flavour import Solver
from f06tools.indexing import (
    SIXDOF, Dof, ElementRef, ForceOrigin, GridPointForceOrigin, GridPointRef,
)
from f06tools.lines import extract_reals, nth_etype, nth_integer

# --- Grid point force balance markers ---
GPFB_GRID_MARKER = "FORCE BALANCE FOR GRID POINT"
GPFB_TOTALS = "*TOTALS*"

MYSTRAN_LOAD = "APPLIED FORCE"
MYSTRAN_SPC = "SPC FORCE"
MYSTRAN_MPC = "MPC FORCE"
MYSTRAN_ELEM = "ELEM"

SIMCENTER_LOAD = "APP-LOAD"
SIMCENTER_SPC = "F-OF-SPC"
SIMCENTER_MPC = "F-OF-MPC"


class SixDofDecoder(TabularDecoder):
    """Tables with one grid point per line and one value per degree of freedom.

    Used for displacements, SPC/MPC forces, applied loads and eigenvectors.
    The grid id is the first integer; a coordinate system id may follow it.
    """

    COLUMNS = Dof
    STRIP_CARRIAGE_CONTROL = True

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        values = extract_reals(line, SIXDOF)
        if values is None:
            return LineResponse.USELESS
        gid = nth_integer(line, 0)
        if gid is None:
            return LineResponse.USELESS
        return self.insert(GridPointRef(gid), values)


class GridPointForceBalanceDecoder(TabularDecoder):
    """Grid point force balance: one row per (grid point, force origin)."""

    COLUMNS = Dof
    STRIP_CARRIAGE_CONTROL = True

    def __init__(self, block_type, flavour):
        super().__init__(block_type, flavour)
        self.grid: GridPointRef | None = None

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        if GPFB_GRID_MARKER in line:
            gid = nth_integer(line, 0)
            self.grid = GridPointRef(gid) if gid is not None else None
            return LineResponse.METADATA
        if GPFB_TOTALS in line:
            return LineResponse.USELESS

        if self.flavour.solver is Solver.MYSTRAN:
            origin = self._mystran_origin(line)
        elif self.flavour.solver is Solver.SIMCENTER:
            origin = self._simcenter_origin(line)
        else:
            return LineResponse.BAD_FLAVOUR
        if origin is None or self.grid is None:
            return LineResponse.USELESS

        values = extract_reals(line, SIXDOF)
        if values is None:
            return LineResponse.ABORT
        return self.insert(GridPointForceOrigin(self.grid, origin), values)

    def _mystran_origin(self, line: str) -> ForceOrigin | None:
        if MYSTRAN_LOAD in line:
            return ForceOrigin.load()
        if MYSTRAN_SPC in line:
            return ForceOrigin.spc()
        if MYSTRAN_MPC in line:
            return ForceOrigin.mpc()
        if MYSTRAN_ELEM in line:
            eid = nth_integer(line, 0)
            if eid is None:
                return None
            return ForceOrigin.from_element(ElementRef(eid, nth_etype(line, 0)))
        return None

    def _simcenter_origin(self, line: str) -> ForceOrigin | None:
        gid = nth_integer(line, 0)
        if gid is None:
            return None
        self.grid = GridPointRef(gid)
        if SIMCENTER_LOAD in line:
            return ForceOrigin.load()
        if SIMCENTER_SPC in line:
            return ForceOrigin.spc()
        if SIMCENTER_MPC in line:
            return ForceOrigin.mpc()
        eid = nth_integer(line, 1)
        etype = nth_etype(line, 0)
        if eid is None or etype is None:
            return None
        return ForceOrigin.from_element(ElementRef(eid, etype))
