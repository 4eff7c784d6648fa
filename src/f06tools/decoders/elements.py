"""Decoders for element force, stress and strain tables."""

import math

from f06tools.decoders.base import LineResponse, TabularDecoder
from f06tools.indexing import (
    SIXDOF, BarForceField, BarStressField, Dof, ElementPoint, ElementRef,
    ElementSide, ElementSidedPoint, PlateForceField, PlateStressField,
    PointInElement, RodForceField, RodStressField, SingleForce, SingleStress,
)
from f06tools.lines import (
    all_integers, all_reals, extract_reals, id_before_reals, int_pattern,
)

NAN = math.nan

# --- Plate point markers ---
CENTROID_MARKERS = ("CEN/4", "CENTER")
CORNER_OUTPUT_MARKER = "BILIN"
# the QUAD4 centroid is only labelled this way when corners follow
CORNER_CENTROID_MARKER = "CEN/4"
UNSUPPORTED_PLATE_HEADERS = ("THERMAL", "COMPOSITE")

PLATE_FIELDS = 8
BAR_FORCE_FIELDS = len(BarForceField)


class _ElementDecoder(TabularDecoder):

    def element(self, eid: int) -> ElementRef:
        return ElementRef(eid, self.etype)


# --- Scalar springs ---

class ScalarSpringDecoder(_ElementDecoder):
    """(eid, value) pairs, several per line."""

    def consume(self, line: str) -> LineResponse:
        response = LineResponse.USELESS
        for eid, values in int_pattern(line).items():
            if len(values) == 1:
                response = self.insert(self.element(eid), values)
        return response


class Elas1ForcesDecoder(ScalarSpringDecoder):
    COLUMNS = SingleForce


class Elas1StressesDecoder(ScalarSpringDecoder):
    COLUMNS = SingleStress


# --- Rods ---

class RodForcesDecoder(_ElementDecoder):
    """(eid, axial force, torque) groups, several per line."""

    COLUMNS = RodForceField

    def consume(self, line: str) -> LineResponse:
        response = LineResponse.USELESS
        for eid, values in int_pattern(line).items():
            if len(values) == 2:
                response = self.insert(self.element(eid), values)
        return response


class RodStressesDecoder(_ElementDecoder):
    """(eid, axial, [margin], torsional, [margin]) groups, several per line.

    Margins are often left blank; those are stored as NaN. With three
    values printed, the margin is taken to be the axial one.
    """

    COLUMNS = RodStressField

    def consume(self, line: str) -> LineResponse:
        response = LineResponse.USELESS
        for eid, values in int_pattern(line).items():
            if len(values) == 4:
                row = values
            elif len(values) == 3:
                row = [values[0], values[1], values[2], NAN]
            elif len(values) == 2:
                row = [values[0], NAN, values[1], NAN]
            else:
                continue
            response = self.insert(self.element(eid), row)
        return response


# --- Bars ---

class BarForcesDecoder(_ElementDecoder):
    COLUMNS = BarForceField
    STRIP_CARRIAGE_CONTROL = True

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        values = extract_reals(line, BAR_FORCE_FIELDS)
        if values is None:
            return LineResponse.USELESS
        eid = id_before_reals(line)
        if eid is None:
            return LineResponse.USELESS
        return self.insert(self.element(eid), values)


_END_A = (BarStressField.SA1, BarStressField.SA2, BarStressField.SA3,
          BarStressField.SA4, BarStressField.AXIAL, BarStressField.MAX_A,
          BarStressField.MIN_A, BarStressField.MS_TENSION)
_END_B = (BarStressField.SB1, BarStressField.SB2, BarStressField.SB3,
          BarStressField.SB4, BarStressField.MAX_B, BarStressField.MIN_B,
          BarStressField.MS_COMPRESSION)


class BarStressesDecoder(_ElementDecoder):
    """Two lines per element.

    The first carries the element id, end A recovery points, axial stress,
    end A extremes and an optional tension margin. The second has no id and
    carries the same for end B, with an optional compression margin.
    """

    COLUMNS = BarStressField
    STRIP_CARRIAGE_CONTROL = True

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        reals = all_reals(line)
        eid = id_before_reals(line)
        if eid is not None and len(reals) in (7, 8):
            values = dict.fromkeys(BarStressField, NAN)
            values.update(zip(_END_A, reals))
            return self.insert_fields(self.element(eid), values)
        if eid is None and not all_integers(line) and len(reals) in (6, 7):
            row = self.last_row_index()
            if row is None:
                return LineResponse.ABORT
            values = self._known_values(row)
            values.update(zip(_END_B, reals))
            return self.insert_fields(row, values)
        return LineResponse.USELESS

    def _known_values(self, row) -> dict:
        stored = self.data.row_values(row)
        if stored is None:
            return dict.fromkeys(BarStressField, NAN)
        return {col: stored[slot] for col, slot in self.data.col_indexes.items()}


# --- Bushings ---

class BushDecoder(_ElementDecoder):
    """Element id and one value per degree of freedom."""

    COLUMNS = Dof
    STRIP_CARRIAGE_CONTROL = True

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        values = extract_reals(line, SIXDOF)
        if values is None:
            return LineResponse.USELESS
        eid = id_before_reals(line)
        if eid is None:
            return LineResponse.USELESS
        return self.insert(self.element(eid), values)


# --- Plates ---

class _PlateDecoder(_ElementDecoder):
    """Shared point bookkeeping for QUAD4/TRIA3 tables.

    Each data line has eight values. A line naming an element starts at its
    centroid (or at a corner when a corner grid id follows it). In corner
    output, a lone integer after an element is the next corner's grid id.
    """

    STRIP_CARRIAGE_CONTROL = True

    def __init__(self, block_type, flavour):
        super().__init__(block_type, flavour)
        self.corner_output = False
        self.current: ElementRef | None = None

    def good_header(self, text: str) -> bool:
        if any(word in text for word in UNSUPPORTED_PLATE_HEADERS):
            return False
        self.corner_output = CORNER_OUTPUT_MARKER in text
        return True

    def locate(self, line: str, ints: list[int]) -> tuple[ElementRef, ElementPoint]:
        centroid = any(marker in line for marker in CENTROID_MARKERS)
        if CORNER_CENTROID_MARKER in line:
            self.corner_output = True
        if len(ints) >= 2:
            element = self.element(ints[0])
            point = ElementPoint.centroid() if centroid else ElementPoint.corner(ints[1])
        elif self.corner_output and self.current is not None and not centroid:
            element = self.current
            point = ElementPoint.corner(ints[0])
        else:
            element = self.element(ints[0])
            point = ElementPoint.centroid()
        self.current = element
        return element, point


class PlateStressesDecoder(_PlateDecoder):
    """Rows are (element, point, side); the second line of a point is the top side."""

    COLUMNS = PlateStressField

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        values = extract_reals(line, PLATE_FIELDS)
        if values is None:
            return LineResponse.USELESS
        ints = all_integers(line)
        if not ints:
            last = self.last_row_index()
            if not isinstance(last, ElementSidedPoint):
                return LineResponse.ABORT
            self.current = last.element
            return self.insert(last.flipped(), values)
        element, point = self.locate(line, ints)
        return self.insert(ElementSidedPoint(element, point, ElementSide.BOTTOM), values)


class PlateForcesDecoder(_PlateDecoder):
    """Rows are (element, point)."""

    COLUMNS = PlateForceField

    def consume(self, line: str) -> LineResponse:
        line = self.clean(line)
        values = extract_reals(line, PLATE_FIELDS)
        if values is None:
            return LineResponse.USELESS
        ints = all_integers(line)
        if not ints:
            return LineResponse.USELESS
        element, point = self.locate(line, ints)
        return self.insert(PointInElement(element, point), values)
