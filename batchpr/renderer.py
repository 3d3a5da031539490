"""
renderer.py

Responsibility: Render the per-destination commit message and pull request text.

Rules:
- Text without Jinja2 markers is returned exactly as written.
- Text with markers is rendered with the destination context
  (`repository`, `owner`, `repo`, `base`, `head`).
- Unknown variables are errors, not empty strings.

This module intentionally does NOT know about GitHub or the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from batchpr.errors import RenderError

_ENV = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


@dataclass(frozen=True)
class RenderedText:
    commit_message: str
    subject: str
    body: str


def _has_markers(text: str) -> bool:
    return ("{{" in text) or ("{%" in text) or ("{#" in text)


def render_text(text: str, context: dict[str, Any], *, field_name: str = "text") -> str:
    if not _has_markers(text):
        return text
    try:
        return _ENV.from_string(text).render(**context)
    except TemplateError as e:
        raise RenderError(f"Failed rendering {field_name}: {e}") from e


def build_context(*, owner: str, repo: str, base: str, head: str) -> dict[str, Any]:
    return {
        "repository": f"{owner}/{repo}",
        "owner": owner,
        "repo": repo,
        "base": base,
        "head": head,
    }


def render_change_text(
    *,
    commit_message: str,
    subject: str,
    body: str,
    context: dict[str, Any],
) -> RenderedText:
    return RenderedText(
        commit_message=render_text(commit_message, context, field_name="commit_message"),
        subject=render_text(subject, context, field_name="subject"),
        body=render_text(body, context, field_name="body"),
    )
