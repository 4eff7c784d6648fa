"""Solver identity and solution type, the "flavour" of an F06 file."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# MYSTRAN closes every table with a run of dashes
MYSTRAN_DASHES = "-------------"
SIMCENTER_END_OF_JOB = "* * * END OF JOB * * *"

RE_SOL_LINE = re.compile(r"^\s*SOL\s+([A-Z0-9]+)\b")


class Solver(Enum):
    MYSTRAN = "MYSTRAN"
    SIMCENTER = "Simcenter Nastran"

    @property
    def markers(self) -> tuple[str, ...]:
        """Upper-case substrings that identify this solver in a line."""
        return _SOLVER_MARKERS[self]

    @property
    def block_end_sentinels(self) -> tuple[str, ...]:
        """Substrings that terminate a table for this solver."""
        return _SOLVER_SENTINELS[self]

    @classmethod
    def detect(cls, line: str) -> Optional["Solver"]:
        upper = line.upper()
        for solver in cls:
            if any(marker in upper for marker in solver.markers):
                return solver
        return None


_SOLVER_MARKERS = {
    Solver.MYSTRAN: ("MYSTRAN",),
    Solver.SIMCENTER: ("SIMCENTER NASTRAN", "NX NASTRAN"),
}

_SOLVER_SENTINELS = {
    Solver.MYSTRAN: (MYSTRAN_DASHES,),
    Solver.SIMCENTER: (SIMCENTER_END_OF_JOB,),
}


class SolType(Enum):
    LINEAR_STATIC = "Linear static"
    EIGENVALUE = "Eigenvalue"
    LINEAR_STATIC_DIFF_STIFF = "Linear static with differential stiffness"
    LINEAR_BUCKLING = "Linear buckling"

    @classmethod
    def from_token(cls, token: str) -> Optional["SolType"]:
        """Map a SOL card argument (number or name) to a solution type."""
        return _SOL_TOKENS.get(token.strip().upper())

    @classmethod
    def detect(cls, line: str) -> Optional["SolType"]:
        m = RE_SOL_LINE.match(line)
        if m:
            return cls.from_token(m.group(1))
        return None


_SOL_TOKENS = {
    "1": SolType.LINEAR_STATIC,
    "101": SolType.LINEAR_STATIC,
    "STATIC": SolType.LINEAR_STATIC,
    "STATICS": SolType.LINEAR_STATIC,
    "SESTATIC": SolType.LINEAR_STATIC,
    "3": SolType.EIGENVALUE,
    "103": SolType.EIGENVALUE,
    "MODES": SolType.EIGENVALUE,
    "SEMODES": SolType.EIGENVALUE,
    "4": SolType.LINEAR_STATIC_DIFF_STIFF,
    "104": SolType.LINEAR_STATIC_DIFF_STIFF,
    "DIFFEN": SolType.LINEAR_STATIC_DIFF_STIFF,
    "5": SolType.LINEAR_BUCKLING,
    "105": SolType.LINEAR_BUCKLING,
    "BUCKLING": SolType.LINEAR_BUCKLING,
    "SEBUCKL": SolType.LINEAR_BUCKLING,
}


@dataclass
class Flavour:
    """What produced an F06 file. Both fields fill in once and stay put."""
    solver: Optional[Solver] = None
    soltype: Optional[SolType] = None

    def block_end_sentinels(self) -> tuple[str, ...]:
        if self.solver is None:
            return ()
        return self.solver.block_end_sentinels
