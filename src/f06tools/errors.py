"""Exceptions raised by f06tools.

Per-line parsing problems never raise; they are reported through decoder and
parser responses. Only lookups, merges and comparisons raise.
"""


class F06Error(Exception):
    """Base class for all f06tools errors."""


class MergeError(F06Error):
    """Two blocks cannot be merged."""

    def __init__(self, reason: str):
        super().__init__(f"cannot merge blocks: {reason}")
        self.reason = reason


class IncompatibleBlocksError(F06Error):
    """Two blocks cannot be compared value by value."""

    def __init__(self, reason):
        super().__init__(f"blocks are incompatible: {reason}")
        self.reason = reason


class ExtractionError(F06Error):
    """A datum could not be looked up in a parsed file."""


class NoSuchBlock(ExtractionError):
    def __init__(self, block_ref):
        super().__init__(
            f"no such block ({block_ref.block_type.name}, subcase {block_ref.subcase})"
        )
        self.block_ref = block_ref


class NotUniqueBlock(ExtractionError):
    """Several blocks share the reference; merge fragments first."""

    def __init__(self, block_ref, count: int):
        super().__init__(
            f"{count} blocks match ({block_ref.block_type.name}, subcase {block_ref.subcase})"
        )
        self.block_ref = block_ref
        self.count = count


class BlockIsEmpty(ExtractionError):
    def __init__(self):
        super().__init__("block is empty")


class RowTypeMismatch(ExtractionError):
    def __init__(self, tried, against):
        super().__init__(
            f"wrong row type (tried a {tried.INDEX_NAME}, block uses {against.INDEX_NAME})"
        )
        self.tried = tried
        self.against = against


class ColumnTypeMismatch(ExtractionError):
    def __init__(self, tried, against):
        super().__init__(
            f"wrong column type (tried a {tried.INDEX_NAME}, block uses {against.INDEX_NAME})"
        )
        self.tried = tried
        self.against = against


class MissingRow(ExtractionError):
    def __init__(self, row):
        super().__init__(f"no such row ({row})")
        self.row = row


class MissingColumn(ExtractionError):
    def __init__(self, col):
        super().__init__(f"no such column ({col})")
        self.col = col
