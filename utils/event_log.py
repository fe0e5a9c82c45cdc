"""Recorded event streams — one wire message per line (JSON lines).

Lines are returned as raw text, unparsed, so a replay goes through exactly the
same classification as a live stream (malformed lines are dropped there).
"""
import json
from pathlib import Path
from typing import Any, Iterable, Iterator


def read_events(path: Path) -> Iterator[str]:
    """Yield each non-blank line of an event log file."""
    with path.open(encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if line:
                yield line


def write_events(path: Path, messages: Iterable[Any]) -> int:
    """Write messages (mappings or pydantic models) as JSON lines.

    Returns the number of lines written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8") as fh:
        for message in messages:
            if hasattr(message, "model_dump_json"):
                fh.write(message.model_dump_json())
            else:
                fh.write(json.dumps(message, ensure_ascii=False))
            fh.write("\n")
            count += 1
    return count
