"""
pull_request.py

Responsibility: run one destination job against the hosting API.

A job walks four steps in order and stops at the first failure:
1) `resolve_ref`: find the head branch, or create it from the base branch
2) `build_tree`: upload the local files as a tree on top of the branch commit
3) `publish_commit`: commit that tree and advance the branch (never forced)
4) `open_pull_request`: open the PR from the head branch into the base branch

Nothing here is rolled back: a branch created before a later failure stays.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from batchpr.errors import (
    BaseNotFound,
    CommitCreationError,
    GitHubError,
    JobError,
    ParentLookupError,
    PRCreationError,
    RefCreationError,
    RefUpdateError,
    TreeCreationError,
)
from batchpr.files import FileMapping, load_file
from batchpr.github_client import GitHubClient, RemoteCommit, RemoteRef, RemoteTree
from batchpr.logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobOptions:
    """Everything one destination job needs; built by `batch.expand`."""

    owner: str
    repo: str
    base_branch: str
    commit_branch: str
    commit_message: str
    subject: str
    body: str
    files: tuple[FileMapping, ...]
    author_name: str
    author_email: str

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


class JobState(enum.Enum):
    INIT = "init"
    REF_RESOLVED = "ref_resolved"
    TREE_BUILT = "tree_built"
    COMMIT_PUBLISHED = "commit_published"
    PR_CREATED = "pr_created"
    FAILED = "failed"


@dataclass(frozen=True)
class JobOutcome:
    repository: str
    state: JobState
    url: str | None = None
    error: JobError | None = None

    @property
    def failed_step(self) -> str | None:
        return self.error.step if self.error is not None else None


def resolve_ref(client: GitHubClient, owner: str, repo: str, branch: str, base: str) -> RemoteRef:
    """
    Return the reference for `branch`, creating it at `base`'s commit when the
    lookup fails. Any lookup failure counts as "missing", including transient
    ones; the warning below is the only trace of that.
    """
    try:
        ref = client.get_ref(owner, repo, branch)
    except GitHubError as e:
        log_event(logger, logging.WARNING, "ref.lookup_failed", repository=f"{owner}/{repo}", branch=branch, error=str(e))
    else:
        log_event(logger, logging.INFO, "ref.reused", repository=f"{owner}/{repo}", branch=branch, sha=ref.sha)
        return ref

    try:
        base_ref = client.get_ref(owner, repo, base)
    except GitHubError as e:
        raise BaseNotFound(f"unable to get base ref {base} in {owner}/{repo}: {e}") from e

    try:
        ref = client.create_ref(owner, repo, branch, base_ref.sha)
    except GitHubError as e:
        raise RefCreationError(f"unable to create branch {branch} in {owner}/{repo}: {e}") from e
    log_event(logger, logging.INFO, "ref.created", repository=f"{owner}/{repo}", branch=branch, sha=base_ref.sha)
    return ref


def build_tree(client: GitHubClient, options: JobOptions, ref: RemoteRef) -> RemoteTree:
    entries = []
    for mapping in options.files:
        loaded = load_file(mapping)
        entries.append({"path": loaded.target, "mode": loaded.mode, "type": "blob", "content": loaded.content})

    try:
        return client.create_tree(options.owner, options.repo, ref.sha, entries)
    except GitHubError as e:
        raise TreeCreationError(f"unable to create the tree based on the provided files: {e}") from e


def publish_commit(
    client: GitHubClient,
    options: JobOptions,
    ref: RemoteRef,
    tree: RemoteTree,
) -> tuple[RemoteCommit, RemoteRef]:
    """
    Commit `tree` on top of the branch head and move the branch to it.

    The update is sent with `force: false`, so a branch that moved since it
    was resolved makes this fail with `RefUpdateError` instead of dropping the
    other commits.
    """
    try:
        parent = client.get_commit(options.owner, options.repo, ref.sha)
    except GitHubError as e:
        raise ParentLookupError(f"unable to get parent commit {ref.sha}: {e}") from e

    try:
        commit = client.create_commit(
            options.owner,
            options.repo,
            message=options.commit_message,
            tree=tree.sha,
            parents=[parent.sha],
            author_name=options.author_name,
            author_email=options.author_email,
            date=datetime.now(timezone.utc),
        )
    except GitHubError as e:
        raise CommitCreationError(f"unable to commit: {e}") from e

    try:
        client.update_ref(options.owner, options.repo, options.commit_branch, commit.sha, force=False)
    except GitHubError as e:
        raise RefUpdateError(f"unable to move {options.commit_branch} to {commit.sha}: {e}") from e
    return commit, ref.with_sha(commit.sha)


def open_pull_request(client: GitHubClient, options: JobOptions) -> str:
    try:
        pr = client.create_pull_request(
            options.owner,
            options.repo,
            title=options.subject,
            head=options.commit_branch,
            base=options.base_branch,
            body=options.body,
            maintainer_can_modify=True,
        )
    except GitHubError as e:
        raise PRCreationError(f"unable to create PR: {e}") from e
    return pr.html_url


class PullRequestJob:
    """One destination's resolve -> tree -> commit -> PR sequence."""

    def __init__(self, client: GitHubClient, options: JobOptions) -> None:
        self.client = client
        self.options = options
        self.state = JobState.INIT

    def _advance(self, state: JobState) -> None:
        self.state = state
        log_event(logger, logging.DEBUG, "job.step", repository=self.options.repository, state=state.value)

    def run(self) -> JobOutcome:
        o = self.options
        log_event(logger, logging.INFO, "job.start", repository=o.repository, head=o.commit_branch, base=o.base_branch)
        try:
            ref = resolve_ref(self.client, o.owner, o.repo, o.commit_branch, o.base_branch)
            self._advance(JobState.REF_RESOLVED)

            tree = build_tree(self.client, o, ref)
            self._advance(JobState.TREE_BUILT)

            publish_commit(self.client, o, ref, tree)
            self._advance(JobState.COMMIT_PUBLISHED)

            url = open_pull_request(self.client, o)
            self._advance(JobState.PR_CREATED)
        except JobError as e:
            self.state = JobState.FAILED
            log_event(logger, logging.ERROR, "job.failed", repository=o.repository, step=e.step, error=str(e))
            return JobOutcome(repository=o.repository, state=JobState.FAILED, error=e)

        log_event(logger, logging.INFO, "job.done", repository=o.repository, url=url)
        return JobOutcome(repository=o.repository, state=JobState.PR_CREATED, url=url)
