"""Helpers shared by the CLI commands."""

from __future__ import annotations

from typing import Iterable

import click
from rich.markup import escape
from rich.table import Table

from further_review_core.models import ReviewRule, RuleResult


def split_repo(repo: str) -> tuple[str, str]:
    owner, _, name = repo.strip().partition("/")
    if not owner or not name or "/" in name:
        raise click.BadParameter(f"expected owner/name, got {repo!r}", param_hint="--repo")
    return owner, name


def require_token(config: dict) -> None:
    if not config.get("github_token"):
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )


def rules_table(rules: Iterable[ReviewRule], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="bold")
    table.add_column("Glob")
    table.add_column("Required", justify="right", width=8)
    table.add_column("Logins")
    for rule in rules:
        table.add_row(escape(rule.name), escape(rule.glob), str(rule.required), ", ".join(rule.logins))
    return table


def results_table(results: Iterable[RuleResult], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="bold")
    table.add_column("Glob")
    table.add_column("Signed off", justify="right", width=10)
    table.add_column("Result", width=10)
    table.add_column("Waiting on")
    for r in results:
        if not r.matched:
            continue
        verdict = "[green]ok[/green]" if r.satisfied else f"[red]{r.missing_count} more[/red]"
        waiting = "" if r.satisfied else ", ".join(r.outstanding)
        signed = f"{len(r.signed_off)}/{r.rule.required}"
        table.add_row(escape(r.rule.name), escape(r.rule.glob), signed, verdict, waiting)
    return table
