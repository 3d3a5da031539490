"""
config.py

Responsibility: build the explicit run configuration from CLI arguments and
the environment. Nothing else in the package reads `os.environ`.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from batchpr.errors import AuthError
from batchpr.github_client import DEFAULT_API_BASE, DEFAULT_TIMEOUT

TOKEN_ENV_VARS = ("GITHUB_AUTH_TOKEN", "GITHUB_TOKEN")
DEFAULT_CONFIG_PATH = "config.yml"


@dataclass(frozen=True)
class RunConfig:
    config_path: Path
    token: str = ""
    owner: str | None = None
    api_base: str = DEFAULT_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"


def resolve_token(explicit: str | None, environ: Mapping[str, str]) -> str:
    if explicit:
        return explicit
    for name in TOKEN_ENV_VARS:
        value = environ.get(name, "").strip()
        if value:
            return value
    raise AuthError(f"GitHub token is required (use --github-token or set {' or '.join(TOKEN_ENV_VARS)})")


def load_run_config(args: argparse.Namespace, environ: Mapping[str, str], *, require_token: bool = True) -> RunConfig:
    token = resolve_token(args.github_token, environ) if require_token else ""
    return RunConfig(
        config_path=Path(args.config),
        token=token,
        owner=args.owner or None,
        api_base=args.api_url or environ.get("GITHUB_API_URL") or DEFAULT_API_BASE,
        timeout=float(args.timeout),
        log_level=args.log_level,
    )
