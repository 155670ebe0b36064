"""Human-readable, line-annotated validation diagnostics."""

from __future__ import annotations

from collections.abc import Iterable

from ccv.config import Config
from ccv.data.line_index import LineMap, build_line_map, lookup_line, normalize_path
from ccv.models.validation import BatchValidation, ValidationIssue

_DEFAULTS = Config()


def describe_issue(issue: ValidationIssue, line_map: LineMap) -> str:
    """Render ``<message> at "<path>" (line N)``; the line is omitted if unknown."""
    path = normalize_path(issue.path)
    if not path:
        return issue.message
    line = lookup_line(line_map, path)
    if line is None:
        return f'{issue.message} at "{path}"'
    return f'{issue.message} at "{path}" (line {line})'


def annotate_issues(text: str, issues: Iterable[ValidationIssue]) -> list[str]:
    """Describe each distinct issue against the pretty-printed JSON ``text``."""
    line_map = build_line_map(text)
    distinct = dict.fromkeys((normalize_path(i.path), i.message) for i in issues)
    return [
        describe_issue(ValidationIssue(path=path, message=message), line_map)
        for path, message in distinct
    ]


def format_validation_errors(
    text: str,
    issues: Iterable[ValidationIssue],
    limit: int = _DEFAULTS.max_displayed_errors,
) -> str:
    """Return the on-screen diagnostic: at most ``limit`` lines plus a remainder note."""
    return "\n".join(_truncate(annotate_issues(text, issues), limit, "...and {} more"))


def validation_error_details(text: str, issues: Iterable[ValidationIssue]) -> str:
    """Return every diagnostic line, for copying in full."""
    return "\n".join(annotate_issues(text, issues))


def format_batch_report(
    text: str,
    batch: BatchValidation,
    *,
    max_failures: int | None = _DEFAULTS.max_reported_failures,
    errors_per_failure: int | None = _DEFAULTS.errors_per_failure,
) -> str:
    """Summarize a partially valid batch.

    Args:
        text: The pretty-printed JSON of the whole batch; issue paths are
            prefixed with the conversation index so lines refer to it.
        batch: Result of ``validate_batch``.
        max_failures: Failing conversations to describe, or None for all.
        errors_per_failure: Issues shown per conversation, or None for all.
    """
    if batch.valid_count == 0 and batch.total:
        header = (
            f"No valid conversations found "
            f"(0 of {batch.total} conversations could be loaded)"
        )
    elif batch.failures:
        header = (
            f"Partially loaded: {batch.valid_count} of {batch.total} "
            f"conversations were valid."
        )
    else:
        return f"All {batch.total} conversations are valid."

    lines = [header, f"{batch.invalid_count} conversation(s) had validation errors:"]
    line_map = build_line_map(text)
    shown = batch.failures if max_failures is None else batch.failures[:max_failures]
    for failure in shown:
        lines.append("")
        lines.append(f"• [{failure.index}] {failure.name}:")
        described = [
            "  - " + describe_issue(_prefixed(failure.index, issue), line_map)
            for issue in dict.fromkeys(failure.issues)
        ]
        lines.extend(_truncate(described, errors_per_failure, "  - ...and {} more errors"))

    hidden = batch.invalid_count - len(shown)
    if hidden > 0:
        lines.append("")
        lines.append(f"...and {hidden} more conversations with errors")
    return "\n".join(lines)


def _prefixed(index: int, issue: ValidationIssue) -> ValidationIssue:
    path = f"{index}.{issue.path}" if issue.path else str(index)
    return ValidationIssue(path=path, message=issue.message)


def _truncate(lines: list[str], limit: int | None, remainder: str) -> list[str]:
    if limit is None or len(lines) <= limit:
        return lines
    return [*lines[:limit], remainder.format(len(lines) - limit)]
