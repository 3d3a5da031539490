"""
cli.py

Responsibility: CLI entrypoint for batchpr.

Commands:
- `run`: load the batch description, open one pull request per destination,
  print the created URLs (one per line, in destination order)
- `validate`: load and check the batch description without any remote call

This module should orchestrate behavior but keep concerns isolated:
- Batch description: `spec_parser.py`
- Job sequencing: `batch.py`
- GitHub API: `github_client.py`
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from typing import TextIO

from batchpr import __version__
from batchpr.batch import BatchPullRequestCommand, validate
from batchpr.config import DEFAULT_CONFIG_PATH, RunConfig, load_run_config
from batchpr.errors import BatchPullRequestError
from batchpr.github_client import DEFAULT_TIMEOUT, GitHubClient
from batchpr.logging_utils import configure_logging, redact_secrets
from batchpr.spec_parser import ChangeSpec, parse_change_spec


def _load_spec(config: RunConfig) -> ChangeSpec:
    spec = parse_change_spec(config.config_path)
    if config.owner:
        spec = dataclasses.replace(spec, owner=config.owner)
    return spec


def run(config: RunConfig, *, out: TextIO | None = None, err: TextIO | None = None) -> int:
    """
    Run a batch. URLs already created are printed even when a later
    destination fails; the error follows them and the exit status is 1.
    """
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    try:
        spec = _load_spec(config)
        client = GitHubClient(config.token, config.api_base, timeout=config.timeout)
        result = BatchPullRequestCommand(client, spec).run()
    except BatchPullRequestError as e:
        print(f"error: {redact_secrets(str(e), config.token)}", file=err)
        return 1

    for url in result.urls:
        print(url, file=out)

    if result.error is not None:
        print(f"error: {redact_secrets(str(result.error), config.token)}", file=err)
        return 1
    return 0


def run_cmd(args: argparse.Namespace) -> int:
    try:
        config = load_run_config(args, os.environ)
    except BatchPullRequestError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    configure_logging(config.log_level)
    return run(config)


def validate_cmd(args: argparse.Namespace) -> int:
    config = load_run_config(args, os.environ, require_token=False)
    configure_logging(config.log_level)
    try:
        spec = _load_spec(config)
        validate(spec)
    except BatchPullRequestError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"{config.config_path}: {len(spec.destinations)} destination(s), {len(spec.files)} file(s), head {spec.head}")
    return 0


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("-c", "--config", default=DEFAULT_CONFIG_PATH, help=f"Batch description file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--owner", default=None, help="Owner (user or org) for bare repository names")
    p.add_argument("--api-url", default=None, help="GitHub API base URL (or set env GITHUB_API_URL)")
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help=f"HTTP timeout in seconds (default: {DEFAULT_TIMEOUT:g})")
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr output (default: INFO)",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="batchpr", description="batchpr - open the same change as pull requests across many repositories")
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("run", help="Commit the files to every destination and open the pull requests")
    _add_common_arguments(r)
    r.add_argument("--github-token", default=None, help="GitHub token (or set env GITHUB_AUTH_TOKEN / GITHUB_TOKEN)")
    r.set_defaults(func=run_cmd)

    v = sub.add_parser("validate", help="Check the batch description without calling GitHub")
    _add_common_arguments(v)
    v.set_defaults(func=validate_cmd, github_token=None)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
