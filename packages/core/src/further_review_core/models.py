"""Value types shared across one evaluation.

Everything here is built fresh for each pull request event and discarded once
the status has been reported; nothing is persisted between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_GLOB = "**"
DEFAULT_REQUIRED = 1


@dataclass(frozen=True)
class ReviewRule:
    """Require ``required`` distinct sign-offs from ``logins`` when ``glob`` matches a changed file."""

    name: str
    logins: tuple[str, ...]
    glob: str = DEFAULT_GLOB
    required: int = DEFAULT_REQUIRED


@dataclass(frozen=True)
class Comment:
    author: str
    text: str


@dataclass(frozen=True)
class PullRequest:
    owner: str
    repo: str
    number: int
    sha: str
    title: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RuleResult:
    rule: ReviewRule
    matched: bool
    satisfied: bool
    signed_off: tuple[str, ...] = ()
    outstanding: tuple[str, ...] = ()  # listed logins that have not signed off
    missing_count: int = 0


@dataclass
class ReviewOutcome:
    """Result returned by Reviewer.process_reviews."""

    pull_request: PullRequest
    state: str  # "success" | "failure"
    description: str
    results: list[RuleResult] = field(default_factory=list)
    mentioned: list[str] = field(default_factory=list)
    comment_body: str | None = None

    @property
    def failed(self) -> list[RuleResult]:
        return [r for r in self.results if r.matched and not r.satisfied]
