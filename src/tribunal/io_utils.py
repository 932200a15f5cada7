"""JSON I/O helpers for the rules dataset, decision payloads and CLI output.

All encoding goes through orjson so the API, the scripts and the tests agree
on byte-level output (sorted keys, two-space indent when pretty).
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def dumps_json(obj: Any, *, pretty: bool = True) -> bytes:
    """Encode an object as JSON bytes with sorted keys."""
    opts = orjson.OPT_SORT_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, option=opts)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_json(obj, pretty=pretty))


def dump_json(obj: Any) -> None:
    """Write pretty JSON to stdout followed by a newline."""
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()
