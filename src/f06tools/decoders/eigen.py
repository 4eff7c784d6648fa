"""Decoder for the real eigenvalue summary table."""

from f06tools.decoders.base import LineResponse, TabularDecoder
from f06tools.indexing import EigenSolutionMode, RealEigenvalueField
from f06tools.lines import extract_reals, nth_integer

EIGENVALUE_FIELDS = len(RealEigenvalueField)


class RealEigenvaluesDecoder(TabularDecoder):
    """Mode number, then eigenvalue, radians, cycles, generalized mass and stiffness."""

    COLUMNS = RealEigenvalueField

    def consume(self, line: str) -> LineResponse:
        values = extract_reals(line, EIGENVALUE_FIELDS)
        if values is None:
            return LineResponse.USELESS
        mode = nth_integer(line, 0)
        if mode is None:
            return LineResponse.USELESS
        return self.insert(EigenSolutionMode(mode), values)
