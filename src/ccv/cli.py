"""Typer CLI for CCV — validate, inspect, segment, search and export commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from result import Err

from ccv.config import Config
from ccv.data.adapter import message_segments
from ccv.data.line_index import pretty_json
from ccv.services.conversation_service import ConversationService

if TYPE_CHECKING:
    from ccv.models.conversation import Conversation

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ccv",
    help="Claude Conversation Viewer — validate and render conversation exports.",
    no_args_is_help=True,
)

FileArg = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="Path to a JSON export"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Claude Conversation Viewer."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def validate(
    file: FileArg,
    max_errors: Annotated[
        int, typer.Option("--max-errors", min=1, help="Diagnostic lines to show")
    ] = Config.max_displayed_errors,
    full: Annotated[bool, typer.Option("--full", help="Show every diagnostic")] = False,
    pretty_output: Annotated[
        Path | None,
        typer.Option("--pretty-output", help="Write the re-indented JSON that line numbers refer to"),
    ] = None,
) -> None:
    """Validate an export and report line-annotated errors."""
    config = Config(max_displayed_errors=max_errors)
    if pretty_output is not None:
        _write_pretty(file, pretty_output, config.json_indent)

    result = ConversationService(config).load_file(file)
    if isinstance(result, Err):
        failure = result.err_value
        _echo_diagnostics(failure.detail if full and failure.detail else failure.summary, config)
        raise typer.Exit(code=1)

    loaded = result.ok_value
    if loaded.warning:
        _echo_diagnostics(loaded.detail if full else loaded.warning, config)
        raise typer.Exit(code=1)
    typer.echo(f"OK: {len(loaded.conversations)} of {loaded.total} conversation(s) valid")


def _echo_diagnostics(text: str, config: Config) -> None:
    typer.echo(text, err=True)
    if "(line " in text:
        typer.echo(
            f"Line numbers refer to the export re-indented with {config.json_indent} spaces "
            "(write it with --pretty-output PATH).",
            err=True,
        )


def _write_pretty(file: Path, destination: Path, indent: int) -> None:
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Not writing re-indented JSON for %s: %s", file, e)
        return
    destination.write_text(pretty_json(data, indent) + "\n", encoding="utf-8")


@app.command()
def inspect(
    file: FileArg,
    conversation: Annotated[int | None, typer.Argument(help="Conversation index")] = None,
    message: Annotated[int | None, typer.Argument(help="Message index")] = None,
    item: Annotated[int | None, typer.Argument(help="Content item index")] = None,
) -> None:
    """Drill into conversations, messages and content items."""
    conversations = _load_or_exit(file)

    if conversation is None:
        for index, conv in enumerate(conversations):
            typer.echo(
                f"[{index}] {conv.name or 'Untitled Conversation'} "
                f"({len(conv.chat_messages)} messages, updated {conv.updated_at})"
            )
        return

    conv = conversations[_check_index(conversation, len(conversations), "Conversation")]
    if message is None:
        typer.echo(f"{conv.name} [{conv.uuid}]")
        for index, msg in enumerate(conv.chat_messages):
            kinds = ", ".join(part.type for part in msg.content) or "no content"
            typer.echo(f"  [{index}] {msg.sender} {msg.created_at}: {kinds}")
        return

    msg = conv.chat_messages[_check_index(message, len(conv.chat_messages), "Message")]
    if item is None:
        typer.echo(f"{msg.sender} message {msg.uuid}")
        for index, part in enumerate(msg.content):
            typer.echo(f"  [{index}] {part.type}")
        return

    part = msg.content[_check_index(item, len(msg.content), "Content item")]
    typer.echo(part.model_dump_json(indent=2))


@app.command()
def segments(
    file: FileArg,
    conversation: Annotated[int, typer.Option("--conversation", "-c", help="Conversation index")] = 0,
) -> None:
    """Print the parsed segments of every message as JSON."""
    conversations = _load_or_exit(file)
    conv = conversations[_check_index(conversation, len(conversations), "Conversation")]
    payload = [
        {
            "message": msg.uuid,
            "sender": msg.sender,
            "segments": [segment.model_dump(by_alias=True) for segment in message_segments(msg)],
        }
        for msg in conv.chat_messages
    ]
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def search(
    file: FileArg,
    query: Annotated[str, typer.Argument(help="Text or pattern to search for")],
    regex: Annotated[bool, typer.Option("--regex", help="Treat query as a regular expression")] = False,
    case_sensitive: Annotated[bool, typer.Option("--case-sensitive", help="Match case")] = False,
    title_only: Annotated[bool, typer.Option("--title-only", help="Search names only")] = False,
) -> None:
    """Find conversations whose title or text matches a query."""
    from ccv.services.search_service import SearchService

    conversations = _load_or_exit(file)
    result = SearchService(Config()).filter_conversations(
        conversations,
        query,
        mode="title" if title_only else "full",
        use_regex=regex,
        case_sensitive=case_sensitive,
    )
    if isinstance(result, Err):
        typer.echo(result.err_value, err=True)
        raise typer.Exit(code=1)

    found = result.ok_value
    typer.echo(f"{found.total_count} conversation(s) match {query!r}")
    for conv in found.conversations:
        typer.echo(f"- {conv.name or 'Untitled Conversation'} [{conv.uuid}]")
        for match in found.matches.get(conv.uuid, []):
            typer.echo(
                f"    #{match.message_index} {match.message_sender}: "
                f"{match.before}[{match.match}]{match.after}"
            )


@app.command()
def export(
    file: FileArg,
    fmt: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text, markdown or html")
    ] = "markdown",
    conversation: Annotated[int, typer.Option("--conversation", "-c", help="Conversation index")] = 0,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout")
    ] = None,
) -> None:
    """Export a conversation as plain text, Markdown or HTML."""
    from ccv.services.export_service import ExportService

    conversations = _load_or_exit(file)
    conv = conversations[_check_index(conversation, len(conversations), "Conversation")]
    result = ExportService().export(conv, fmt)
    if isinstance(result, Err):
        typer.echo(result.err_value, err=True)
        raise typer.Exit(code=2)

    if output is None:
        typer.echo(result.ok_value)
        return
    output.write_text(result.ok_value, encoding="utf-8")
    typer.echo(f"Wrote {output}")


def _load_or_exit(file: Path) -> list[Conversation]:
    result = ConversationService(Config()).load_file(file)
    if isinstance(result, Err):
        typer.echo(result.err_value.summary, err=True)
        raise typer.Exit(code=1)
    loaded = result.ok_value
    if loaded.warning:
        typer.echo(loaded.warning, err=True)
    return list(loaded.conversations)


def _check_index(index: int, size: int, label: str) -> int:
    if not 0 <= index < size:
        typer.echo(f"{label} index {index} out of range ({size} available)", err=True)
        raise typer.Exit(code=1)
    return index
