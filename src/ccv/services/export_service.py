"""Export service — plain text, Markdown and HTML export."""

from __future__ import annotations

import html
import os
import re
from typing import TYPE_CHECKING, Literal

import markdown
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound
from result import Err, Ok, Result

from ccv.data.adapter import ArtifactNumbering, conversation_segments, number_artifacts
from ccv.models.conversation import TextContent
from ccv.models.segments import ArtifactSegment, CodeSegment, Segment, ThinkingSegment

if TYPE_CHECKING:
    from ccv.models.conversation import Conversation, Message

type ExportFormat = Literal["text", "markdown", "html"]

EXPORT_FORMATS: tuple[ExportFormat, ...] = ("text", "markdown", "html")

# File extension to Pygments lexer name
_EXT_LANG_MAP: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".sh": "bash",
    ".json": "json",
    ".md": "markdown",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".rb": "ruby",
    ".c": "c",
    ".cpp": "cpp",
    ".svg": "xml",
}

# Artifact MIME-like type to fence/lexer language
_ARTIFACT_LANG_MAP: dict[str, str] = {
    "application/vnd.ant.react": "jsx",
    "text/html": "html",
    "image/svg+xml": "xml",
    "text/markdown": "markdown",
    "application/vnd.ant.mermaid": "text",
}

_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_EMPHASIS = re.compile(r"[*_~`]")
_HEADING_OR_BULLET = re.compile(r"^\s*[#-]\s+", re.MULTILINE)

_FORMATTER = HtmlFormatter(style="default", noclasses=True, nowrap=False)


class ExportService:
    """Service for exporting a validated conversation."""

    def export(self, conversation: Conversation, fmt: str) -> Result[str, str]:
        """Export ``conversation`` in one of ``EXPORT_FORMATS``."""
        match fmt:
            case "text":
                return Ok(self.to_text(conversation))
            case "markdown":
                return Ok(self.to_markdown(conversation))
            case "html":
                return Ok(self.to_html(conversation))
            case _:
                return Err(f"Unsupported export format: {fmt}")

    def to_text(self, conversation: Conversation) -> str:
        """Plain text: sender headers and text content with Markdown stripped."""
        blocks: list[str] = []
        for message in conversation.chat_messages:
            content = "\n".join(
                strip_markdown(item.text) if isinstance(item, TextContent) else ""
                for item in message.content
            )
            blocks.append(f"{_sender_label(message)}:\n{content}\n")
        return "\n".join(blocks)

    def to_markdown(self, conversation: Conversation) -> str:
        """Markdown with inline artifact references and an artifact appendix."""
        segmented = conversation_segments(conversation)
        numbering = number_artifacts(conversation, segmented)

        lines: list[str] = [f"# {conversation.name or 'Untitled Conversation'}", ""]
        if conversation.summary:
            lines.extend([f"**Summary:** {conversation.summary}", ""])
        lines.extend([f"**Created:** {conversation.created_at}", "", "---", ""])

        for message, segments in segmented:
            lines.extend([f"## {_sender_label(message)}", ""])
            for segment in segments:
                lines.append(_segment_markdown(segment, message, numbering))
                lines.append("")

        appendix = _appendix_entries(segmented, numbering)
        if appendix:
            lines.extend(["---", "", "## Appendix: Artifacts", ""])
            for number, artifact in appendix:
                lines.append(f"### Artifact {number}: {artifact.title}")
                lines.append("")
                lines.append(f"`{artifact.identifier}` ({artifact.artifact_type or 'unknown type'})")
                lines.append("")
                lines.append(_fence(artifact.content, _artifact_language(artifact)))
                lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def to_html(self, conversation: Conversation) -> str:
        """Standalone HTML document with highlighted code and artifacts."""
        segmented = conversation_segments(conversation)
        numbering = number_artifacts(conversation, segmented)
        md = _markdown_without_raw_html()

        parts: list[str] = []
        for message, segments in segmented:
            body = "\n".join(
                _segment_html(segment, message, numbering, md) for segment in segments
            )
            parts.append(
                f'<section class="message {message.sender}">'
                f"<h2>{_sender_label(message)}</h2>\n{body}</section>"
            )

        title = html.escape(conversation.name or "Untitled Conversation")
        return (
            "<!DOCTYPE html>\n"
            f'<html><head><meta charset="utf-8"><title>{title}</title></head>'
            f"<body><h1>{title}</h1>\n" + "\n".join(parts) + "</body></html>"
        )


def _markdown_without_raw_html() -> markdown.Markdown:
    # Raw HTML in message text is rendered as literal, escaped text.
    md = markdown.Markdown(extensions=["fenced_code", "tables", "nl2br"])
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md


def strip_markdown(text: str) -> str:
    """Remove links, emphasis markers, headings and bullets."""
    text = _LINK.sub(r"\1", text)
    text = _EMPHASIS.sub("", text)
    return _HEADING_OR_BULLET.sub("", text)


def detect_language(file_path: str) -> str:
    """Detect syntax highlighting language from file extension."""
    _, ext = os.path.splitext(file_path)
    return _EXT_LANG_MAP.get(ext.lower(), "text")


def highlight_code(code: str, language: str = "text") -> str:
    """Return HTML with syntax-highlighted code."""
    try:
        lexer = get_lexer_by_name(language, stripall=True)
    except ClassNotFound:
        try:
            lexer = guess_lexer(code)
        except ClassNotFound:
            lexer = get_lexer_by_name("text", stripall=True)
    return highlight(code, lexer, _FORMATTER)


def _sender_label(message: Message) -> str:
    return "Human" if message.is_human else "Claude"


def _code_language(segment: CodeSegment) -> str:
    if segment.language == "text" and segment.path:
        return detect_language(segment.path)
    return segment.language


def _artifact_language(artifact: ArtifactSegment) -> str:
    if artifact.language:
        return artifact.language
    return _ARTIFACT_LANG_MAP.get(artifact.artifact_type, "text")


def _artifact_label(artifact: ArtifactSegment, message: Message, numbering: ArtifactNumbering) -> str:
    number = numbering.number_for(message.uuid, artifact.identifier)
    if number is None:
        return artifact.title
    return f"Artifact {number}: {artifact.title}"


def _fence(content: str, language: str, path: str | None = None) -> str:
    info = f"{language}:{path}" if path else language
    return f"```{info}\n{content}\n```"


def _segment_markdown(segment: Segment, message: Message, numbering: ArtifactNumbering) -> str:
    match segment:
        case ThinkingSegment():
            quoted = "\n".join(f"> {line}" if line else ">" for line in segment.content.split("\n"))
            return "> **Thinking**\n>\n" + quoted
        case CodeSegment():
            return _fence(segment.content, segment.language, segment.path)
        case ArtifactSegment():
            return f"**{_artifact_label(segment, message, numbering)}** (see appendix)"
        case _:
            return segment.content


def _segment_html(
    segment: Segment,
    message: Message,
    numbering: ArtifactNumbering,
    md: markdown.Markdown,
) -> str:
    match segment:
        case ThinkingSegment():
            return (
                "<details class=\"thinking\"><summary>Thinking</summary>"
                f"<p>{html.escape(segment.content)}</p></details>"
            )
        case CodeSegment():
            header = f'<div class="path">{html.escape(segment.path)}</div>' if segment.path else ""
            return header + highlight_code(segment.content, _code_language(segment))
        case ArtifactSegment():
            label = html.escape(_artifact_label(segment, message, numbering))
            return (
                f'<div class="artifact" id="{html.escape(segment.identifier, quote=True)}">'
                f"<h3>{label}</h3>"
                f"{highlight_code(segment.content, _artifact_language(segment))}</div>"
            )
        case _:
            md.reset()
            return md.convert(segment.content)


def _appendix_entries(
    segmented: list[tuple[Message, list[Segment]]], numbering: ArtifactNumbering
) -> list[tuple[int, ArtifactSegment]]:
    first_seen: dict[int, ArtifactSegment] = {}
    for message, segments in segmented:
        for segment in segments:
            if isinstance(segment, ArtifactSegment):
                number = numbering.number_for(message.uuid, segment.identifier)
                if number is not None and number not in first_seen:
                    first_seen[number] = segment
    return sorted(first_seen.items())
