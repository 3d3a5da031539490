"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com
- Interprets GitHub API responses / error payloads

It exposes exactly the calls a batch run needs: reference read/create/update,
tree create, commit read/create, pull request create, and the authenticated
user lookup. Every failure, transport errors included, surfaces as `GitHubError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Sequence, TypeVar

import requests

from batchpr.errors import AuthError, GitHubError
from batchpr.logging_utils import log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class AuthenticatedUser:
    login: str
    id: int
    name: str | None = None
    email: str | None = None

    @property
    def author_name(self) -> str:
        return self.name or self.login

    @property
    def author_email(self) -> str:
        # GitHub's noreply address stands in for a private email.
        return self.email or f"{self.id}+{self.login}@users.noreply.github.com"


@dataclass(frozen=True)
class RemoteRef:
    ref: str
    sha: str

    @property
    def branch(self) -> str:
        return self.ref.removeprefix("refs/heads/")

    def with_sha(self, sha: str) -> "RemoteRef":
        return RemoteRef(ref=self.ref, sha=sha)


@dataclass(frozen=True)
class RemoteTree:
    sha: str


@dataclass(frozen=True)
class RemoteCommit:
    sha: str
    tree_sha: str
    parents: tuple[str, ...] = ()


@dataclass(frozen=True)
class PullRequestInfo:
    number: int
    html_url: str


def _ref_from(data: dict[str, Any]) -> RemoteRef:
    return RemoteRef(ref=data["ref"], sha=data["object"]["sha"])


def _commit_from(data: dict[str, Any]) -> RemoteCommit:
    return RemoteCommit(
        sha=data["sha"],
        tree_sha=data["tree"]["sha"],
        parents=tuple(p["sha"] for p in data.get("parents") or ()),
    )


def _tree_from(data: dict[str, Any]) -> RemoteTree:
    return RemoteTree(sha=data["sha"])


def _pull_request_from(data: dict[str, Any]) -> PullRequestInfo:
    return PullRequestInfo(number=int(data.get("number") or 0), html_url=data["html_url"])


def _user_from(data: dict[str, Any]) -> AuthenticatedUser:
    return AuthenticatedUser(
        login=str(data.get("login") or ""),
        id=int(data.get("id") or 0),
        name=data.get("name") or None,
        email=data.get("email") or None,
    )


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not token.strip():
            raise AuthError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "batchpr",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        parse: Callable[[dict[str, Any]], T],
    ) -> T:
        """
        Send one API call and build the result with `parse`. A 2xx reply that is
        not a JSON object, or lacks what `parse` reads, is a `GitHubError` too.
        """
        url = f"{self._api_base}{path}"
        log_event(logger, logging.DEBUG, "github.request", method=method, path=path)
        try:
            r = requests.request(method, url, headers=self._headers(), json=json_body, timeout=self._timeout)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e

        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            details = payload.get("errors") if isinstance(payload, dict) else None
            if details:
                message = f"{message} | errors={details}"
            raise GitHubError(
                f"GitHub API error {r.status_code} {method} {path}: {message}",
                status_code=r.status_code,
            )
        try:
            data = r.json()
        except ValueError as e:
            raise GitHubError(
                f"GitHub API returned a non-JSON body {r.status_code} {method} {path}: {r.text[:200]}",
                status_code=r.status_code,
            ) from e
        if not isinstance(data, dict):
            raise GitHubError(f"GitHub API returned an unexpected payload {method} {path}", status_code=r.status_code)
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubError(
                f"GitHub API returned an unexpected payload {method} {path}: missing or invalid {e}",
                status_code=r.status_code,
            ) from e

    def get_authenticated_user(self) -> AuthenticatedUser:
        return self._request("GET", "/user", parse=_user_from)

    def get_ref(self, owner: str, repo: str, branch: str) -> RemoteRef:
        """
        Return the `refs/heads/<branch>` reference. The singular `git/ref`
        endpoint matches exactly, never by prefix.
        """
        return self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{branch}", parse=_ref_from)

    def create_ref(self, owner: str, repo: str, branch: str, sha: str) -> RemoteRef:
        body = {"ref": f"refs/heads/{branch}", "sha": sha}
        return self._request("POST", f"/repos/{owner}/{repo}/git/refs", json_body=body, parse=_ref_from)

    def update_ref(self, owner: str, repo: str, branch: str, sha: str, *, force: bool = False) -> RemoteRef:
        body = {"sha": sha, "force": force}
        return self._request("PATCH", f"/repos/{owner}/{repo}/git/refs/heads/{branch}", json_body=body, parse=_ref_from)

    def create_tree(self, owner: str, repo: str, base_tree: str, entries: Sequence[dict[str, str]]) -> RemoteTree:
        body = {"base_tree": base_tree, "tree": list(entries)}
        return self._request("POST", f"/repos/{owner}/{repo}/git/trees", json_body=body, parse=_tree_from)

    def get_commit(self, owner: str, repo: str, sha: str) -> RemoteCommit:
        return self._request("GET", f"/repos/{owner}/{repo}/git/commits/{sha}", parse=_commit_from)

    def create_commit(
        self,
        owner: str,
        repo: str,
        *,
        message: str,
        tree: str,
        parents: Sequence[str],
        author_name: str,
        author_email: str,
        date: datetime,
    ) -> RemoteCommit:
        identity = {"name": author_name, "email": author_email, "date": date.isoformat()}
        body = {
            "message": message,
            "tree": tree,
            "parents": list(parents),
            "author": identity,
            "committer": identity,
        }
        return self._request("POST", f"/repos/{owner}/{repo}/git/commits", json_body=body, parse=_commit_from)

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str,
        maintainer_can_modify: bool = True,
    ) -> PullRequestInfo:
        payload = {
            "title": title,
            "head": head,
            "base": base,
            "body": body,
            "maintainer_can_modify": maintainer_can_modify,
        }
        return self._request("POST", f"/repos/{owner}/{repo}/pulls", json_body=payload, parse=_pull_request_from)
