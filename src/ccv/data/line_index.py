"""Map JSON field paths to source line numbers.

The mapping is a line-oriented heuristic that relies on the layout produced
by ``json.dumps(value, indent=2)``: one key, scalar array element or bracket
per line. Lines are split on line feeds only; with ``ensure_ascii=False`` other
Unicode line separators (U+0085, U+2028, U+2029) appear raw inside strings.
Minified or otherwise formatted JSON maps poorly or not at all, so callers
re-serialize the decoded value with that pretty-printer first.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

type LineMap = dict[str, int]

_KEY_LINE = re.compile(r'^"((?:[^"\\]|\\.)*)"\s*:\s*(.*)$')
_BRACKET_PATH = re.compile(r"\[(\d+)\]")
_OPENERS = frozenset({"{", "["})
_CLOSERS = frozenset({"}", "},", "]", "],"})


@dataclass(slots=True)
class _Frame:
    kind: str  # "object" or "array"
    path: tuple[str, ...]
    next_index: int = 0


def build_line_map(text: str) -> LineMap:
    """Return a field path → 1-based line number mapping for pretty JSON.

    Every ancestor prefix of a recorded path is mapped as well (to the line
    where it first appears), so lookups can fall back to the nearest known
    ancestor. The root object itself is not given an entry.
    """
    line_map: LineMap = {}
    stack: list[_Frame] = []

    for line_no, raw_line in enumerate(text.split("\n"), 1):
        line = raw_line.strip()
        if not line:
            continue

        if line in _CLOSERS:
            if stack:
                stack.pop()
            continue

        current = stack[-1] if stack else None

        if line in _OPENERS:
            kind = "object" if line == "{" else "array"
            if current is None:
                stack.append(_Frame(kind, ()))
                continue
            path = _element_path(current)
            _record(line_map, path, line_no)
            stack.append(_Frame(kind, path))
            continue

        if current is None:
            continue

        if current.kind == "object":
            key_match = _KEY_LINE.match(line)
            if key_match is None:
                continue
            key = _decode_key(key_match.group(1))
            path = (*current.path, key)
            _record(line_map, path, line_no)
            value = key_match.group(2)
            if value in _OPENERS:
                stack.append(_Frame("object" if value == "{" else "array", path))
            continue

        # Scalar (or empty container) element of an array.
        path = _element_path(current)
        _record(line_map, path, line_no)

    return line_map


def pretty_json(value: object, indent: int = 2) -> str:
    """Serialize ``value`` in the layout ``build_line_map`` expects."""
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def normalize_path(path: str) -> str:
    """Convert bracketed array notation to dotted form: ``a[0].b`` → ``a.0.b``."""
    dotted = _BRACKET_PATH.sub(r".\1", path)
    return dotted.strip(".").replace("..", ".")


def ancestor_paths(path: str) -> list[str]:
    """Return ``path`` and its ancestors, most specific first."""
    parts = normalize_path(path).split(".") if path else []
    return [".".join(parts[:end]) for end in range(len(parts), 0, -1)]


def lookup_line(line_map: LineMap, path: str) -> int | None:
    """Find the line for ``path``, falling back to its nearest mapped ancestor."""
    for candidate in ancestor_paths(path):
        line = line_map.get(candidate)
        if line is not None:
            return line
    return None


def _element_path(frame: _Frame) -> tuple[str, ...]:
    index = frame.next_index
    frame.next_index += 1
    return (*frame.path, str(index))


def _record(line_map: LineMap, path: tuple[str, ...], line_no: int) -> None:
    for end in range(1, len(path) + 1):
        line_map.setdefault(".".join(path[:end]), line_no)


def _decode_key(raw_key: str) -> str:
    try:
        decoded = json.loads(f'"{raw_key}"')
    except json.JSONDecodeError:
        return raw_key
    return decoded if isinstance(decoded, str) else raw_key
