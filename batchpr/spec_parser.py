"""
spec_parser.py

Responsibility: Load a batch description file into a typed, immutable `ChangeSpec`.

Accepted inputs:
- A plain YAML document (the usual `config.yml`).
- A markdown file whose YAML frontmatter holds the same keys.

Structural problems (wrong types, malformed file entries) raise `ValidationError`
here; the cross-field rules (head vs. base) live in `batch.validate`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from batchpr.errors import ValidationError
from batchpr.files import FileMapping, parse_file_mapping


@dataclass(frozen=True)
class Destination:
    """One repository the change is applied to, and the branch the PR targets."""

    repository: str
    base: str

    def split_repository(self, default_owner: str | None) -> tuple[str, str]:
        """
        Return `(owner, name)` for `owner/name`, or `(default_owner, name)` for a
        bare name.
        """
        owner, sep, name = self.repository.partition("/")
        if sep:
            if not owner or not name or "/" in name:
                raise ValidationError(f"repository {self.repository!r} must look like 'owner/name'")
            return owner, name
        if not default_owner:
            raise ValidationError(f"repository {self.repository!r} has no owner and no default owner is set")
        return default_owner, self.repository


@dataclass(frozen=True)
class ChangeSpec:
    """A logical change: the same files, commit and PR text for every destination."""

    head: str
    commit_message: str = ""
    subject: str = ""
    body: str = ""
    files: tuple[FileMapping, ...] = ()
    destinations: tuple[Destination, ...] = ()
    owner: str | None = None


def _parse_yaml_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """
    If the markdown begins with YAML frontmatter delimited by '---', parse it.
    Returns (frontmatter_dict_or_none, remaining_markdown_text).
    """
    if not text.startswith("---\n"):
        return None, text

    end = text.find("\n---\n", 4)
    if end == -1:
        raise ValidationError("YAML frontmatter starts with '---' but no closing '---' was found.")

    try:
        data = yaml.safe_load(text[4:end]) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"YAML frontmatter is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("YAML frontmatter must be a mapping at the top level.")
    return data, text[end + len("\n---\n") :]


def _load_mapping(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"Unable to read batch description {path}: {e}") from e
    if path.suffix.lower() in (".md", ".markdown"):
        frontmatter, _rest = _parse_yaml_frontmatter(text)
        if frontmatter is None:
            raise ValidationError(f"{path} has no YAML frontmatter.")
        return frontmatter

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValidationError(f"{path} is not valid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must contain a mapping at the top level.")
    return data


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValidationError(f"`{key}` must be a string.")
    return str(value)


def _parse_destinations(raw: Any) -> tuple[Destination, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError("`destinations` must be a list.")

    out: list[Destination] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"destinations[{i}] must be a mapping with `repository` and `base`.")
        out.append(
            Destination(
                repository=str(item.get("repository") or "").strip(),
                base=str(item.get("base") or "").strip(),
            )
        )
    return tuple(out)


def _parse_files(raw: Any) -> tuple[FileMapping, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        # Allow the comma separated shorthand: "README.md,main.go:cmd/main.go".
        raw = [part for part in raw.split(",") if part.strip()]
    if not isinstance(raw, list):
        raise ValidationError("`files` must be a list of 'local' or 'local:target' strings.")
    return tuple(parse_file_mapping(entry) for entry in raw)


def build_change_spec(data: dict[str, Any]) -> ChangeSpec:
    owner = data.get("owner")
    if owner is not None:
        owner = str(owner).strip() or None

    return ChangeSpec(
        head=_text(data, "head").strip(),
        commit_message=_text(data, "commit_message"),
        subject=_text(data, "subject"),
        body=_text(data, "body"),
        files=_parse_files(data.get("files")),
        destinations=_parse_destinations(data.get("destinations")),
        owner=owner,
    )


def parse_change_spec(path: str | Path) -> ChangeSpec:
    """
    Parse a batch description file into a `ChangeSpec`.

    Keys:
    - head: str (required) branch the change is committed to
    - commit_message, subject, body: str
    - files: list of 'local' or 'local:target'
    - destinations: list of {repository, base}
    - owner: str (optional) owner for bare repository names
    """
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Batch description does not exist: {path}")
    return build_change_spec(_load_mapping(path))
