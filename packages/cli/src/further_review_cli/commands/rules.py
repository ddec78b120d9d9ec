"""rules command — show the review rules the configured providers load."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from further_review_cli.utils import require_token, rules_table, split_repo
from further_review_core.errors import FurtherReviewError
from further_review_core.reviewer import Reviewer

console = Console()


@click.command("rules")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--ref", default="HEAD", show_default=True, help="Branch, tag, or commit SHA to read rules from.")
@click.pass_context
def rules_cmd(ctx, repo: str, ref: str):
    """List the review rules defined for a repository.

    Useful for checking a rules file before merging it: logins are shown
    normalized, and an invalid rule is reported as an error.
    """
    config = ctx.obj["config"]
    require_token(config)
    owner, name = split_repo(repo)

    try:
        rules = Reviewer(ctx.obj["github"], config=config).load_rules(owner, name, ref)
    except (FurtherReviewError, GithubException, ValueError) as e:
        raise click.ClickException(str(e))

    if not rules:
        console.print("[yellow]No review rules found.[/yellow]")
        return

    console.print(rules_table(rules, title=f"Review rules — {repo}@{ref}"))
