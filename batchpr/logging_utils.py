"""
logging_utils.py

Responsibility: one-time logging setup for the CLI plus a structured
`log_event` helper used by every module.

Log lines look like `event=job.step step="build_tree" repository="acme/api"`.
Anything resembling a GitHub token is redacted before it reaches a handler.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

_TOKEN_PATTERNS = (
    re.compile(r"(x-access-token:)[^@\s]+", re.IGNORECASE),
    re.compile(r"(Bearer\s+)[A-Za-z0-9_\-.]+", re.IGNORECASE),
    re.compile(r"\bgh[pousr]_[A-Za-z0-9_]+\b"),
    re.compile(r"\bgithub_pat_[A-Za-z0-9_]+\b"),
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def redact_secrets(text: str, *secrets: str) -> str:
    """
    Mask token-shaped substrings, plus any literal `secrets` the caller holds.
    """
    redacted = text
    for value in secrets:
        if value:
            redacted = redacted.replace(value, "[REDACTED]")
    for pattern in _TOKEN_PATTERNS:
        if pattern.groups > 0:
            redacted = pattern.sub(r"\1[REDACTED]", redacted)
        else:
            redacted = pattern.sub("[REDACTED]", redacted)
    return redacted


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Send log records to stderr so stdout only carries pull request URLs.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


def _format_field_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_secrets(value)
    return redact_secrets(repr(value))


def structured_message(event: str, **fields: Any) -> str:
    parts = [f"event={event}"]
    for key, value in fields.items():
        if value is None:
            continue
        formatted = _format_field_value(value).replace('"', '\\"')
        parts.append(f'{key}="{formatted}"')
    return " ".join(parts)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    if logger.isEnabledFor(level):
        logger.log(level, structured_message(event, **fields))
