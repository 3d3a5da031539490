from __future__ import annotations

from typing import Any

import pytest

from batchpr.errors import GitHubError
from batchpr.github_client import AuthenticatedUser, PullRequestInfo, RemoteCommit, RemoteRef, RemoteTree


class FakeGitHub:
    """
    In-memory stand-in for `GitHubClient`.

    `branches` maps "owner/repo" -> {branch: sha}. `failures` maps a method name,
    or (method name, "owner/repo"), to the `GitHubError` that call should raise.
    Every call is appended to `calls` as (method, "owner/repo", details).
    """

    def __init__(
        self,
        branches: dict[str, dict[str, str]] | None = None,
        failures: dict[Any, GitHubError] | None = None,
        user: AuthenticatedUser | None = None,
    ) -> None:
        self.branches = {repo: dict(refs) for repo, refs in (branches or {}).items()}
        self.failures = dict(failures or {})
        self.user = user or AuthenticatedUser(login="octocat", id=583231, name="The Octocat", email="octocat@github.com")
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._counter = 0

    def _call(self, method: str, repository: str, **details: Any) -> None:
        self.calls.append((method, repository, details))
        for key in ((method, repository), method):
            if key in self.failures:
                raise self.failures[key]

    def _next(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    def calls_for(self, method: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [c for c in self.calls if c[0] == method]

    def repositories_touched(self) -> set[str]:
        return {repository for _, repository, _ in self.calls if repository}

    def get_authenticated_user(self) -> AuthenticatedUser:
        self._call("get_authenticated_user", "")
        return self.user

    def get_ref(self, owner: str, repo: str, branch: str) -> RemoteRef:
        full = f"{owner}/{repo}"
        self._call("get_ref", full, branch=branch)
        sha = self.branches.get(full, {}).get(branch)
        if sha is None:
            raise GitHubError(f"GitHub API error 404 GET /repos/{full}/git/ref/heads/{branch}: Not Found", status_code=404)
        return RemoteRef(ref=f"refs/heads/{branch}", sha=sha)

    def create_ref(self, owner: str, repo: str, branch: str, sha: str) -> RemoteRef:
        full = f"{owner}/{repo}"
        self._call("create_ref", full, branch=branch, sha=sha)
        self.branches.setdefault(full, {})[branch] = sha
        return RemoteRef(ref=f"refs/heads/{branch}", sha=sha)

    def update_ref(self, owner: str, repo: str, branch: str, sha: str, *, force: bool = False) -> RemoteRef:
        full = f"{owner}/{repo}"
        self._call("update_ref", full, branch=branch, sha=sha, force=force)
        self.branches.setdefault(full, {})[branch] = sha
        return RemoteRef(ref=f"refs/heads/{branch}", sha=sha)

    def create_tree(self, owner: str, repo: str, base_tree: str, entries: list[dict[str, str]]) -> RemoteTree:
        self._call("create_tree", f"{owner}/{repo}", base_tree=base_tree, entries=list(entries))
        return RemoteTree(sha=self._next("tree"))

    def get_commit(self, owner: str, repo: str, sha: str) -> RemoteCommit:
        self._call("get_commit", f"{owner}/{repo}", sha=sha)
        return RemoteCommit(sha=sha, tree_sha=f"tree-of-{sha}")

    def create_commit(self, owner: str, repo: str, **kwargs: Any) -> RemoteCommit:
        self._call("create_commit", f"{owner}/{repo}", **kwargs)
        return RemoteCommit(sha=self._next("commit"), tree_sha=kwargs["tree"], parents=tuple(kwargs["parents"]))

    def create_pull_request(self, owner: str, repo: str, **kwargs: Any) -> PullRequestInfo:
        self._call("create_pull_request", f"{owner}/{repo}", **kwargs)
        self._counter += 1
        return PullRequestInfo(number=self._counter, html_url=f"https://github.com/{owner}/{repo}/pull/{self._counter}")


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub(branches={"acme/r1": {"main": "base-sha"}})


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run the test from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
