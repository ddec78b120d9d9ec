"""Thin PyGithub wrapper exposing exactly what the Reviewer needs.

Every method takes owner/repo explicitly so a single client can serve any
number of evaluations; no per-pull-request state is cached here.
"""

from __future__ import annotations

import logging

from github import Github, UnknownObjectException

from further_review_core.models import Comment, PullRequest

logger = logging.getLogger(__name__)


def _to_pull_request(owner: str, repo: str, pr) -> PullRequest:
    return PullRequest(owner=owner, repo=repo, number=pr.number, sha=pr.head.sha, title=pr.title or "")


class GitHubClient:
    def __init__(self, token: str | None = None, github: Github | None = None):
        self._github = github if github is not None else Github(token)

    def _repo(self, owner: str, repo: str):
        return self._github.get_repo(f"{owner}/{repo}")

    def get_current_user(self) -> str:
        return self._github.get_user().login

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return _to_pull_request(owner, repo, self._repo(owner, repo).get_pull(number))

    def get_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        return [_to_pull_request(owner, repo, pr) for pr in self._repo(owner, repo).get_pulls(state="open")]

    def get_pull_request_files(self, owner: str, repo: str, number: int) -> list[str]:
        return [f.filename for f in self._repo(owner, repo).get_pull(number).get_files()]

    def get_issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        issue = self._repo(owner, repo).get_issue(number)
        return [Comment(author=c.user.login, text=c.body or "") for c in issue.get_comments()]

    def create_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        description: str,
        context: str,
        target_url: str | None = None,
    ) -> None:
        kwargs = {
            "state": state,
            "description": description,
            "context": context,
        }
        # PyGithub only accepts a str here; omit the field entirely when unset.
        if target_url:
            kwargs["target_url"] = target_url
        self._repo(owner, repo).get_commit(sha).create_status(**kwargs)
        logger.debug("Status %s posted on %s/%s@%s", state, owner, repo, sha[:7])

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> None:
        self._repo(owner, repo).get_issue(number).create_comment(body)

    def get_file_contents(self, owner: str, repo: str, sha: str, path: str) -> str | None:
        """Return the decoded file at ``sha``, or None when it does not exist."""
        try:
            contents = self._repo(owner, repo).get_contents(path, ref=sha)
        except UnknownObjectException:
            return None
        if isinstance(contents, list):
            # A directory, not a rules file.
            return None
        return contents.decoded_content.decode("utf-8", errors="replace")
