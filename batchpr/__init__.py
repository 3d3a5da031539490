"""
batchpr package

This package opens the same file change as pull requests across many GitHub
repositories, driven by one batch description.

Key responsibilities are split across modules:
- `spec_parser.py`: parse the YAML batch description into a `ChangeSpec`
- `files.py`: map `local[:target]` entries and load local file contents
- `renderer.py`: per-destination rendering of commit and pull request text
- `github_client.py`: isolated GitHub REST API interactions (refs, trees, commits, PRs)
- `pull_request.py`: one destination job (resolve ref -> tree -> commit -> PR)
- `batch.py`: validation, expansion into jobs, sequential execution
- `cli.py`: CLI entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
