"""Review evaluation: load rules, match them to the changed files, count sign-offs, report.

One call to ``Reviewer.process_reviews`` is one evaluation:

    fetch login/files/comments ─┐
    post "pending" status       │ (reads run concurrently)
    load rules from providers   │
    join ◄──────────────────────┘
    evaluate rules → post "success"/"failure" → mention outstanding reviewers

Nothing is cached between evaluations. Re-running against the same GitHub
state yields the same status, and the mention comment is only posted for
logins the bot has not already called out.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from rich.console import Console
from rich.markup import escape

from further_review_core.comments import get_mentions, get_sign_offs
from further_review_core.config import DEFAULT_CONFIG, default_config
from further_review_core.models import PullRequest, ReviewOutcome, ReviewRule, RuleResult
from further_review_core.providers.further_review_file import FurtherReviewFileProvider
from further_review_core.utils.glob_match import is_glob_match

console = Console()
logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type] = {
    "further_review_file": FurtherReviewFileProvider,
}

MAX_DESCRIPTION_LENGTH = 140


def evaluate_rules(rules: Iterable[ReviewRule], files: Iterable[str], sign_offs: Iterable[str]) -> list[RuleResult]:
    """Decide each rule against the changed files and the current sign-offs.

    Only sign-offs from logins listed on a rule count toward it. A rule whose
    glob matches no changed file is reported as unmatched and satisfied.
    """
    files = list(files)
    approved = set(sign_offs)
    results = []
    for rule in rules:
        matched = is_glob_match(files, rule.glob)
        signed_off = tuple(login for login in rule.logins if login in approved)
        outstanding = tuple(login for login in rule.logins if login not in approved)
        satisfied = not matched or len(signed_off) >= rule.required
        missing = max(rule.required - len(signed_off), 0) if matched else 0
        logger.debug(
            "Rule %r: matched=%s signed_off=%s required=%d satisfied=%s",
            rule.name,
            matched,
            list(signed_off),
            rule.required,
            satisfied,
        )
        results.append(
            RuleResult(
                rule=rule,
                matched=matched,
                satisfied=satisfied,
                signed_off=signed_off,
                outstanding=outstanding,
                missing_count=missing,
            )
        )
    return results


def describe_results(results: Sequence[RuleResult]) -> str:
    matched = [r for r in results if r.matched]
    failed = [r for r in matched if not r.satisfied]
    if not matched:
        return "No additional reviews required"
    if not failed:
        return f"All {len(matched)} required review(s) signed off"
    waiting = ", ".join(f"{r.rule.name} ({r.missing_count} more)" for r in failed)
    return f"Awaiting sign-off: {waiting}"


def build_mention_comment(
    failed: Sequence[RuleResult],
    already_mentioned: Iterable[str],
    sign_off_phrase: str = "LGTM",
) -> str | None:
    """Compose the failure comment, or None when there is nobody new to mention.

    Logins the bot mentioned in an earlier comment are listed in backticks
    instead of with ``@`` so they are not notified again.
    """
    mentioned = set(already_mentioned)
    new_logins: list[str] = []
    for result in failed:
        for login in result.outstanding:
            if login not in mentioned and login not in new_logins:
                new_logins.append(login)

    if not new_logins:
        return None

    lines = ["Further review is required before this pull request can be merged.", ""]
    for result in failed:
        who = ", ".join(f"@{login}" if login in new_logins else f"`{login}`" for login in result.outstanding)
        lines.append(f"- **{result.rule.name}**: {result.missing_count} more sign-off(s) needed from {who}")
    lines.append("")
    lines.append(f"Comment `{sign_off_phrase}` once you have reviewed the changes.")
    return "\n".join(lines)


class Reviewer:
    def __init__(self, github, config: dict | None = None, providers: dict[str, type] | None = None, shadow=False):
        self.github = github
        self.config = config if config is not None else default_config()
        self.provider_classes = providers if providers is not None else PROVIDERS
        self.shadow = shadow

    @property
    def status_context(self) -> str:
        return self.config.get("status_context") or DEFAULT_CONFIG["status_context"]

    @property
    def sign_off_phrases(self) -> list[str]:
        return list(self.config.get("sign_off_phrases") or DEFAULT_CONFIG["sign_off_phrases"])

    def update_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        description: str,
        target_url: str | None = None,
    ) -> None:
        if len(description) > MAX_DESCRIPTION_LENGTH:
            description = description[: MAX_DESCRIPTION_LENGTH - 3] + "..."

        if self.shadow:
            console.print(f"[dim]Shadow mode: would set status [bold]{state}[/bold]: {escape(description)}[/dim]")
            return

        self.github.create_status(
            owner=owner,
            repo=repo,
            sha=sha,
            state=state,
            description=description,
            context=self.status_context,
            target_url=target_url,
        )
        logger.info("%s/%s@%s: %s (%s)", owner, repo, sha[:7], state, description)

    def get_providers(self) -> list:
        """Instantiate the providers enabled in the ``review`` config section, in config order."""
        providers = []
        for name, options in (self.config.get("review") or {}).items():
            if options is None or options is False:
                continue
            provider_cls = self.provider_classes.get(name)
            if provider_cls is None:
                known = ", ".join(sorted(self.provider_classes))
                raise ValueError(f"Unknown review provider: {name!r}. Choose from: {known}.")
            if options is True:
                options = {}
            elif not isinstance(options, dict):
                raise ValueError(f"Options for review provider {name!r} must be true or a mapping.")
            providers.append(provider_cls(self.github, options))
        return providers

    def load_rules(self, owner: str, repo: str, sha: str) -> list[ReviewRule]:
        providers = self.get_providers()
        if not providers:
            return []

        max_workers = min(len(providers), self.config.get("max_workers") or 1)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            # map() keeps provider order and re-raises the first provider failure.
            per_provider = list(pool.map(lambda p: p.get_reviews(owner, repo, sha), providers))

        rules = [rule for provider_rules in per_provider for rule in provider_rules]
        logger.debug("Loaded %d rule(s) from %d provider(s)", len(rules), len(providers))
        return rules

    def process_reviews(self, pr: PullRequest) -> ReviewOutcome:
        """Run one evaluation for ``pr`` and report it to GitHub.

        Any exception (GitHub I/O, malformed rules) propagates and leaves the
        pending status in place; the next event re-runs from scratch.
        """
        owner, repo, sha = pr.owner, pr.repo, pr.sha
        target_url = self.config.get("target_url")

        with ThreadPoolExecutor(max_workers=3) as pool:
            bot_login = self.config.get("bot_login")
            user_future = None if bot_login else pool.submit(self.github.get_current_user)
            files_future = pool.submit(self.github.get_pull_request_files, owner, repo, pr.number)
            comments_future = pool.submit(self.github.get_issue_comments, owner, repo, pr.number)

            self.update_status(owner, repo, sha, "pending", "Checking required reviews", target_url)

            rules = self.load_rules(owner, repo, sha)

            self_login = bot_login or user_future.result()
            files = files_future.result()
            comments = comments_future.result()

        sign_offs = get_sign_offs(comments, self_login, self.sign_off_phrases)
        results = evaluate_rules(rules, files, sign_offs)
        failed = [r for r in results if r.matched and not r.satisfied]

        state = "failure" if failed else "success"
        description = describe_results(results)
        self.update_status(owner, repo, sha, state, description, target_url)

        outcome = ReviewOutcome(pull_request=pr, state=state, description=description, results=results)
        if not failed:
            return outcome

        outcome.mentioned = get_mentions(comments, self_login)
        outcome.comment_body = build_mention_comment(failed, outcome.mentioned, self.sign_off_phrases[0].upper())
        if outcome.comment_body is None:
            logger.info("All outstanding reviewers on %s#%d were already mentioned", pr.full_name, pr.number)
        elif self.shadow:
            console.print(f"[dim]Shadow mode: would comment on #{pr.number}:[/dim]\n{escape(outcome.comment_body)}")
        else:
            self.github.create_comment(owner=owner, repo=repo, number=pr.number, body=outcome.comment_body)
        return outcome
