"""Configuration for CCV."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    max_displayed_errors: int = 10
    max_reported_failures: int = 3
    errors_per_failure: int = 3
    json_indent: int = 2
    search_context_chars: int = 50
    max_search_matches: int = 3
