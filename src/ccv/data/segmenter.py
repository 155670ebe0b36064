"""Split assistant message text into text, thinking, code and artifact segments.

Scanning is split into a tokenizer (``scan_spans``) that carves the input into
gapless, ordered spans, and a parser (``parse_segments``) that turns those
spans into typed segments. All scan state is a local cursor; the compiled
patterns are only ever used through ``pattern.search(text, pos)``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from ccv.models.segments import (
    ArtifactSegment,
    CodeSegment,
    Segment,
    TextSegment,
    ThinkingSegment,
)

type SpanKind = Literal["text", "thinking", "code", "artifact"]

_THINKING_PATTERN = re.compile(r"<antThinking>(.*?)</antThinking>", re.DOTALL)
_ARTIFACT_PATTERN = re.compile(
    r'<antArtifact\s+identifier="([^"]+)"\s+type="([^"]+)"\s+title="([^"]+)">'
    r"(.*?)</antArtifact>",
    re.DOTALL,
)
_CODE_PATTERN = re.compile(r"```([\w-]*)(?::([^\n]+))?\n?(.*?)```", re.DOTALL)

# Order doubles as the tie-break when two constructs start at the same offset.
_CONSTRUCTS: tuple[tuple[SpanKind, re.Pattern[str]], ...] = (
    ("thinking", _THINKING_PATTERN),
    ("code", _CODE_PATTERN),
    ("artifact", _ARTIFACT_PATTERN),
)

DEFAULT_CODE_LANGUAGE = "text"


@dataclass(frozen=True, slots=True)
class Span:
    """A contiguous region of the input and the construct it holds."""

    kind: SpanKind
    start: int
    end: int
    match: re.Match[str] | None = None

    def source(self, text: str) -> str:
        return text[self.start : self.end]


def scan_spans(text: str) -> list[Span]:
    """Carve ``text`` into ordered spans covering every character exactly once.

    At each step the construct starting leftmost at or after the cursor wins.
    A pattern is only searched again once the cursor has moved past its last
    match, so each pattern restarts at most once per recognized construct.
    """
    spans: list[Span] = []
    cursor = 0
    pending: dict[SpanKind, re.Match[str] | None] = {}

    while cursor < len(text):
        best_kind: SpanKind | None = None
        best: re.Match[str] | None = None
        for kind, pattern in _CONSTRUCTS:
            match = pending.get(kind)
            if kind not in pending or (match is not None and match.start() < cursor):
                match = pattern.search(text, cursor)
                pending[kind] = match
            if match is not None and (best is None or match.start() < best.start()):
                best_kind, best = kind, match

        if best is None or best_kind is None:
            spans.append(Span("text", cursor, len(text)))
            break

        if best.start() > cursor:
            spans.append(Span("text", cursor, best.start()))
        spans.append(Span(best_kind, best.start(), best.end(), best))
        cursor = best.end()

    return spans


def parse_segments(text: str) -> list[Segment]:
    """Parse one assistant message's text into typed segments.

    Text between constructs is trimmed and dropped when blank. Unbalanced or
    incomplete tags never match a construct and therefore stay in the text.
    """
    segments: list[Segment] = []
    for span in scan_spans(text):
        segment = _span_to_segment(span, text)
        if segment is not None:
            segments.append(segment)
    return segments


def _span_to_segment(span: Span, text: str) -> Segment | None:
    found = span.match
    if span.kind == "text" or found is None:
        content = span.source(text).strip()
        return TextSegment(content=content) if content else None

    match span.kind:
        case "thinking":
            return ThinkingSegment(content=found.group(1).strip())
        case "code":
            return CodeSegment(
                language=found.group(1) or DEFAULT_CODE_LANGUAGE,
                path=found.group(2),
                content=found.group(3).strip(),
            )
        case _:
            return ArtifactSegment(
                identifier=found.group(1),
                artifact_type=found.group(2),
                title=found.group(3),
                content=found.group(4).strip(),
            )
