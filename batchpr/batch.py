"""
batch.py

Responsibility: turn one `ChangeSpec` into per-destination jobs and run them.

- `validate`: reject a description before any remote call is made
- `expand`: one `JobOptions` per destination, text rendered per destination
- `run_all`: run jobs one at a time, in order, stopping at the first failure

Jobs are sequential on purpose: output order matches the destination list and
the batch never competes with itself for the token's rate limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from batchpr.errors import AuthError, BatchPullRequestError, GitHubError, ValidationError
from batchpr.github_client import AuthenticatedUser, GitHubClient
from batchpr.logging_utils import log_event
from batchpr.pull_request import JobOptions, JobOutcome, PullRequestJob
from batchpr.renderer import build_context, render_change_text
from batchpr.spec_parser import ChangeSpec

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    urls: list[str] = field(default_factory=list)
    error: BatchPullRequestError | None = None
    outcomes: list[JobOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def validate(spec: ChangeSpec) -> None:
    if not spec.head:
        raise ValidationError("head branch cannot be empty")

    for d in spec.destinations:
        if not d.repository:
            raise ValidationError("destination repository cannot be empty")
        if not d.base:
            raise ValidationError(f"base branch of destination repository {d.repository} is empty")
        if d.base == spec.head:
            raise ValidationError(f"base branch cannot be the same as head at repository {d.repository}")

        # A bare name without a default owner gets the user's login later;
        # an empty placeholder is enough to catch template errors up front.
        if spec.owner or "/" in d.repository:
            owner, repo = d.split_repository(spec.owner)
        else:
            owner, repo = "", d.repository
        context = build_context(owner=owner, repo=repo, base=d.base, head=spec.head)
        render_change_text(commit_message=spec.commit_message, subject=spec.subject, body=spec.body, context=context)


def expand(spec: ChangeSpec, author: AuthenticatedUser) -> list[JobOptions]:
    jobs: list[JobOptions] = []
    for d in spec.destinations:
        owner, repo = d.split_repository(spec.owner or author.login)
        text = render_change_text(
            commit_message=spec.commit_message,
            subject=spec.subject,
            body=spec.body,
            context=build_context(owner=owner, repo=repo, base=d.base, head=spec.head),
        )
        jobs.append(
            JobOptions(
                owner=owner,
                repo=repo,
                base_branch=d.base,
                commit_branch=spec.head,
                commit_message=text.commit_message,
                subject=text.subject,
                body=text.body,
                files=spec.files,
                author_name=author.author_name,
                author_email=author.author_email,
            )
        )
    return jobs


def run_all(client: GitHubClient, jobs: list[JobOptions]) -> BatchResult:
    """
    Run `jobs` in order. The first failing job ends the batch; URLs from the
    jobs before it are kept in the result.
    """
    result = BatchResult()
    for options in jobs:
        outcome = PullRequestJob(client, options).run()
        result.outcomes.append(outcome)
        if outcome.url:
            result.urls.append(outcome.url)
        if outcome.error is not None:
            result.error = outcome.error
            break
    return result


class BatchPullRequestCommand:
    def __init__(self, client: GitHubClient, spec: ChangeSpec) -> None:
        validate(spec)
        self.client = client
        self.spec = spec

    def resolve_author(self) -> AuthenticatedUser:
        try:
            user = self.client.get_authenticated_user()
        except GitHubError as e:
            raise AuthError(f"unable to look up the authenticated user: {e}") from e
        log_event(logger, logging.INFO, "batch.author", login=user.login, name=user.author_name)
        return user

    def run(self) -> BatchResult:
        log_event(logger, logging.INFO, "batch.start", head=self.spec.head, destinations=len(self.spec.destinations))
        try:
            jobs = expand(self.spec, self.resolve_author())
        except (AuthError, ValidationError) as e:
            return BatchResult(error=e)

        result = run_all(self.client, jobs)
        log_event(
            logger,
            logging.INFO if result.ok else logging.ERROR,
            "batch.done",
            created=len(result.urls),
            attempted=len(result.outcomes),
            total=len(jobs),
        )
        return result
