"""Line tokenising helpers and block header detection."""

import re
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, NamedTuple, Optional, Union

from f06tools.elements import ElementType

# Characters allowed in a spaced-out header caption
SPACED_SPECIAL = "()[]-."
CAPTION_CHARS = frozenset(string.ascii_uppercase + string.digits + SPACED_SPECIAL)

# A spaced caption may end in unspaced text once this much has been seen
MIN_CAP_BEFORE_TAIL = 20
MIN_CAP = 4

# Output option printed unspaced after a spaced caption, e.g. "OPTION = BILIN"
RE_OPTION_TAIL = re.compile(r"^OPTION\s*=\s*([A-Z0-9]+)")

# An already-unspaced caption: words split by single spaces, none of them numeric
RE_PLAIN_CAPTION = re.compile(
    r"^[A-Z(][A-Z0-9()\[\]\-.]*(?: [A-Z(][A-Z0-9()\[\]\-.]*)+$"
)

# Words that make a caption look like a table header
SUS_WORDS = (
    "ELEMENT", "ELEM", "FORCE", "FORCES", "STRESS", "STRESSES", "STRAIN",
    "STRAINS", "SPC", "CONSTRAINT", "CONSTRAINTS", "MPC", "GRID",
    "DISPLACEMENT", "APPLIED", "LOAD", "TEMPERATURE", "HEAT", "FLUX",
    "GRAVITY", "POINT", "COORDINATE", "COORD", "SYSTEM", "LOCAL",
    "EIGENVECTOR", "EIGENVALUES",
)


# --- Field classification ---

class FieldKind(Enum):
    INTEGER = "integer"
    REAL = "real"
    CHARACTER = "character"
    ELEMENT_TYPE = "element type"
    NO_IDEA = "no idea"


class LineField(NamedTuple):
    kind: FieldKind
    value: Union[int, float, str, ElementType]


def parse_field(token: str) -> LineField:
    try:
        return LineField(FieldKind.INTEGER, int(token))
    except ValueError:
        pass
    try:
        return LineField(FieldKind.REAL, float(token))
    except ValueError:
        pass
    if len(token) == 1:
        return LineField(FieldKind.CHARACTER, token)
    for etype in ElementType:
        if etype.value in token:
            return LineField(FieldKind.ELEMENT_TYPE, etype)
    return LineField(FieldKind.NO_IDEA, token)


def line_breakdown(line: str) -> Iterator[LineField]:
    """Split a line on whitespace and classify each field."""
    for token in line.split():
        yield parse_field(token)


def _of_kind(line: str, kind: FieldKind) -> Iterator:
    return (f.value for f in line_breakdown(line) if f.kind is kind)


def extract_reals(line: str, n: int) -> Optional[list[float]]:
    """Exactly ``n`` reals from a line, or None if there are more or fewer.

    Integers do not count as reals: "1 .1 .2" has two reals.
    """
    reals = list(_of_kind(line, FieldKind.REAL))
    if len(reals) != n:
        return None
    return reals


def lax_reals(line: str, n: int) -> Optional[list[float]]:
    """The first ``n`` reals from a line, ignoring any extra ones."""
    reals = list(_of_kind(line, FieldKind.REAL))
    if len(reals) < n:
        return None
    return reals[:n]


def all_reals(line: str) -> list[float]:
    return list(_of_kind(line, FieldKind.REAL))


def all_integers(line: str) -> list[int]:
    return list(_of_kind(line, FieldKind.INTEGER))


def nth_integer(line: str, n: int) -> Optional[int]:
    for i, value in enumerate(_of_kind(line, FieldKind.INTEGER)):
        if i == n:
            return value
    return None


def nth_natural(line: str, n: int) -> Optional[int]:
    naturals = [i for i in _of_kind(line, FieldKind.INTEGER) if i >= 0]
    if n < len(naturals):
        return naturals[n]
    return None


def nth_etype(line: str, n: int) -> Optional[ElementType]:
    for i, value in enumerate(_of_kind(line, FieldKind.ELEMENT_TYPE)):
        if i == n:
            return value
    return None


def last_int(line: str) -> Optional[int]:
    ints = all_integers(line)
    return ints[-1] if ints else None


def id_before_reals(line: str) -> Optional[int]:
    """The last integer printed before the first real of a line.

    This is the row id of most tables, whatever precedes it (carriage
    control digits, point types).
    """
    last = None
    for f in line_breakdown(line):
        if f.kind is FieldKind.INTEGER:
            last = f.value
        elif f.kind is FieldKind.REAL:
            return last
    return None


def int_pattern(line: str) -> dict[int, list[float]]:
    """Group each integer with the reals that follow it.

    Any other kind of field closes the current group. Used for tables that
    print several (id, value...) groups side by side.
    """
    groups: dict[int, list[float]] = {}
    current: Optional[int] = None
    for f in line_breakdown(line):
        if f.kind is FieldKind.INTEGER:
            current = f.value
            groups[current] = []
        elif f.kind is FieldKind.REAL:
            if current is not None:
                groups[current].append(f.value)
        else:
            current = None
    return groups


def strip_carriage_control(line: str) -> str:
    """Drop a leading "0"/"1" carriage control character, as Nastran prints them."""
    if len(line) > 1 and line[0] in "01" and line[1] == " ":
        return " " + line[1:]
    return line


def strip_data_carriage_control(line: str) -> str:
    """Strip carriage control from a data line without eating a row id.

    "0       7  1.0 ..." loses its "0", but in "1 .1 .2" the "1" is a grid id.
    The leading digit is control when Simcenter's column padding follows it
    or when another integer still comes before the first real.
    """
    stripped = strip_carriage_control(line)
    if stripped == line or line[1:3] == "  ":
        return stripped
    for f in line_breakdown(stripped):
        if f.kind is FieldKind.INTEGER:
            return stripped
        if f.kind is FieldKind.REAL:
            return line
    return stripped


# --- Header detection ---

def unspace(line: str) -> Optional[str]:
    """Turn a caption printed as spaced upper-case letters back into words.

    "   F O R C E S   I N   R O D   E L E M E N T S" becomes
    "FORCES IN ROD ELEMENTS". Returns None if the line is not such a caption.
    """
    line = line.rstrip("\r\n")
    words = line.split()
    # Simcenter prints eigenvector captions after the cycles value
    if words and words[0] == "CYCLES":
        r = line.find("R")
        if r < 1:
            return None
        line = line[r - 1:]

    cap = 0
    last = " "
    stop_at = len(line)
    tail = ""
    for i, ch in enumerate(line):
        if ch in CAPTION_CHARS:
            if last == " ":
                last = ch
                cap += 2
                continue
            if cap > MIN_CAP_BEFORE_TAIL:
                # the unspaced word started one character back
                stop_at = max(0, i - 1)
                tail = line[stop_at:].strip()
                break
            return None
        if ch == " ":
            last = ch
            continue
        return None
    if cap < MIN_CAP:
        return None

    out = []
    space_run = 0
    for ch in strip_carriage_control(line[:stop_at]):
        if ch == " ":
            space_run += 1
            continue
        # letters are one space apart, words at least two
        if space_run >= 2:
            out.append(" ")
        out.append(ch)
        space_run = 0
    text = "".join(out).strip()
    m = RE_OPTION_TAIL.match(tail)
    if m:
        text += f" OPTION = {m.group(1)}"
    return text


def plain_caption(line: str) -> Optional[str]:
    """Recognise a caption printed as ordinary upper-case words."""
    text = line.strip()
    if RE_PLAIN_CAPTION.match(text):
        return text
    return None


def check_header(line: str) -> Optional[str]:
    """Return the caption text if the line looks like a block header."""
    text = unspace(line) or plain_caption(line)
    if not text:
        return None
    if any(word in text for word in SUS_WORDS):
        return text
    if any(etype.value in text for etype in ElementType):
        return text
    return None


@dataclass(order=False)
class PotentialHeader:
    """An unrecognised header span, kept for diagnostics."""
    start: int
    span: int
    text: str = field(default="")

    @property
    def end(self) -> int:
        """Last line of the span (inclusive)."""
        return self.start + self.span - 1

    def lines(self) -> range:
        return range(self.start, self.start + self.span)

    def __lt__(self, other: "PotentialHeader") -> bool:
        return self.start < other.start

    def try_merge(self, other: "PotentialHeader") -> Optional["PotentialHeader"]:
        """Merge two headers whose line spans touch or overlap.

        Returns the merged header, or None if the spans are apart.
        """
        first, second = (self, other) if self.start <= other.start else (other, self)
        if second.start > first.end + 1:
            return None
        end = max(first.end, second.end)
        if second.start == first.end + 1:
            text = f"{first.text} {second.text}".strip()
        elif second.text in first.text:
            text = first.text
        else:
            text = f"{first.text} {second.text}".strip()
        return PotentialHeader(first.start, end - first.start + 1, text)
