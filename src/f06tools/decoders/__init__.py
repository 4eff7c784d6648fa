"""Per-table decoders."""

from f06tools.decoders.base import (
    BlockDecoder, LineResponse, RelabelledDecoder, TabularDecoder, relabelled,
)

__all__ = [
    "BlockDecoder",
    "LineResponse",
    "RelabelledDecoder",
    "TabularDecoder",
    "relabelled",
]
