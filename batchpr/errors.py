"""
errors.py

Responsibility: the error taxonomy shared by every stage of a batch run.

- `ValidationError` / `RenderError`: the batch description is unusable; raised
  before any remote call is made.
- `AuthError`: the credential is missing or rejected.
- `JobError` subclasses: one per step of a destination job. Each carries the
  `step` it failed in, and chains the underlying `GitHubError` / `OSError`.
"""

from __future__ import annotations


class BatchPullRequestError(RuntimeError):
    pass


class ValidationError(BatchPullRequestError, ValueError):
    pass


class RenderError(ValidationError):
    pass


class AuthError(BatchPullRequestError):
    pass


class GitHubError(BatchPullRequestError):
    """A failed hosting API call (transport failure or HTTP status >= 400)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class JobError(BatchPullRequestError):
    step = "job"


class BaseNotFound(JobError):
    step = "resolve_ref"


class RefCreationError(JobError):
    step = "resolve_ref"


class FileReadError(JobError):
    step = "build_tree"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"unable to read local file {path}: {reason}")
        self.path = path


class TreeCreationError(JobError):
    step = "build_tree"


class ParentLookupError(JobError):
    step = "publish_commit"


class CommitCreationError(JobError):
    step = "publish_commit"


class RefUpdateError(JobError):
    step = "publish_commit"


class PRCreationError(JobError):
    step = "open_pull_request"
