"""JSON output for parsed files and diffs."""

import dataclasses
import json
import math
from enum import Enum
from pathlib import Path

from f06tools.blocks import FinalBlock
from f06tools.diff import F06Diff
from f06tools.f06file import F06File
from f06tools.indexing import NasIndex


def _convert(obj):
    if isinstance(obj, NasIndex):
        return str(obj)
    if isinstance(obj, FinalBlock):
        return block_to_dict(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _convert(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    elif isinstance(obj, list):
        return [_convert(item) for item in obj]
    elif isinstance(obj, dict):
        return {str(k): _convert(v) for k, v in obj.items()}
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, tuple):
        return [_convert(item) for item in obj]
    elif isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, float) and not math.isfinite(obj):
        # JSON has no NaN/inf
        return None
    return obj


def block_to_dict(block: FinalBlock) -> dict:
    return {
        "block_type": block.block_type.short_name,
        "subcase": block.subcase,
        "line_range": list(block.line_range) if block.line_range else None,
        "columns": [str(c) for c in block.cols()],
        "rows": [
            {"row": str(row), "values": [_convert(v) for v in values]}
            for row, values in block.to_rows()
        ],
    }


def file_to_dict(f06: F06File) -> dict:
    """Convert a parsed file to a JSON-serializable dictionary."""
    return _convert(f06)


def diff_to_dict(diff: F06Diff) -> dict:
    return {
        "compared": [
            {
                "subcase": ref.subcase,
                "block_type": ref.block_type.short_name,
                "flags": [
                    {
                        "row": str(fp.values.row),
                        "col": str(fp.values.col),
                        "first": _convert(fp.values.val_a),
                        "second": _convert(fp.values.val_b),
                        "reason": fp.reason.kind.name,
                        "detail": str(fp.reason),
                    }
                    for fp in flags
                ],
            }
            for ref, flags in sorted(diff.compared.items())
        ],
        "not_compared": [
            {
                "subcase": ref.subcase,
                "block_type": ref.block_type.short_name,
                "reason": str(reason),
            }
            for ref, reason in sorted(diff.not_compared.items())
        ],
    }


def write_json(data: dict, filepath: Path):
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
