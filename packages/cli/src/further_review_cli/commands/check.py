"""check command — evaluate review rules for one pull request."""

from __future__ import annotations

import logging

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape

from further_review_cli.utils import require_token, results_table, split_repo
from further_review_core.errors import FurtherReviewError
from further_review_core.reviewer import Reviewer

console = Console()
logger = logging.getLogger(__name__)


@click.command("check")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to pick from open PRs interactively.",
)
@click.option("--bot-login", default=None, help="Login the bot comments as. Overrides config file.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: evaluate and print the result without posting to GitHub.",
)
@click.option("--strict", is_flag=True, help="Exit with status 1 when required reviews are missing.")
@click.pass_context
def check_cmd(ctx, repo: str, pr_number: int | None, bot_login: str | None, shadow: bool, strict: bool):
    """Check required sign-offs on a pull request and report a commit status.

    Loads the review rules, matches them against the changed files, counts
    sign-off comments from the listed reviewers, posts a "Further Review"
    status, and mentions reviewers who still need to sign off.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
    """
    config = ctx.obj["config"]
    github = ctx.obj["github"]
    require_token(config)
    if bot_login:
        config["bot_login"] = bot_login

    owner, name = split_repo(repo)

    try:
        if pr_number is None:
            prs = github.get_open_pull_requests(owner, name)
            if not prs:
                console.print("[yellow]No open pull requests found.[/yellow]")
                return
            console.print("\nOpen pull requests:")
            for pr in prs:
                console.print(f"  [bold]#{pr.number}[/bold]  {escape(pr.title)}")
            pr_number = click.prompt("\nEnter the pull request number", type=int)

        pull_request = github.get_pull_request(owner, name, pr_number)
        outcome = Reviewer(github, config=config, shadow=shadow).process_reviews(pull_request)
    except (FurtherReviewError, GithubException, ValueError) as e:
        logger.debug("Evaluation of %s#%s aborted", repo, pr_number, exc_info=True)
        raise click.ClickException(str(e))

    if any(r.matched for r in outcome.results):
        console.print(results_table(outcome.results, title=f"Required reviews — {repo}#{pr_number}"))

    color = "green" if outcome.state == "success" else "red"
    console.print(f"\n[{color}]{outcome.state}[/{color}]: {escape(outcome.description)}")
    if outcome.state == "failure" and outcome.comment_body is None:
        console.print("[dim]Outstanding reviewers were already mentioned; no new comment.[/dim]")

    if strict and outcome.state == "failure":
        ctx.exit(1)
