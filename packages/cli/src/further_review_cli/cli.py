"""CLI entry point for further-review.

Commands:
  check  — evaluate review rules for a pull request and post the commit status
  rules  — show the review rules loaded at a git ref
  init   — write a starter rules file and GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from further_review_cli.commands.check import check_cmd
from further_review_cli.commands.init import init_cmd
from further_review_cli.commands.rules import rules_cmd

console = Console()


def _build_client(config: dict):
    """Create the GitHub client shared by all subcommands."""
    from further_review_core.gh.client import GitHubClient

    return GitHubClient(token=config.get("github_token"))


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("further-review"),
    prog_name="further-review",
)
@click.option(
    "--config",
    "config_path",
    default=".further-review-bot.yml",
    show_default=True,
    help="Path to the bot configuration file.",
    envvar="FURTHER_REVIEW_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Gate pull requests on sign-offs from the right reviewers."""
    from further_review_core.config import load_config
    from further_review_cli.auth import resolve_github_token

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config
    ctx.obj["github"] = _build_client(config)


main.add_command(check_cmd)
main.add_command(rules_cmd)
main.add_command(init_cmd)
