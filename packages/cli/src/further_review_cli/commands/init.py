"""init command — write a starter rules file and a GitHub Actions workflow."""

from __future__ import annotations

import subprocess
from pathlib import Path

import click
import yaml
from rich.console import Console

from further_review_core.errors import LoginParseError
from further_review_core.login import parse_login
from further_review_core.providers.further_review_file import DEFAULT_FILES

console = Console()

_WORKFLOW_TEMPLATE = """\
name: Further Review

on:
  pull_request:
    types: [opened, synchronize, reopened]
  issue_comment:
    types: [created, edited, deleted]

jobs:
  further-review:
    if: github.event_name == 'pull_request' || github.event.issue.pull_request
    runs-on: ubuntu-latest
    permissions:
      contents: read
      issues: write
      pull-requests: write
      statuses: write

    steps:
      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install further-review
        run: pip install "further-review=={version}"

      - name: Check required reviews
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
        run: |
          further-review check \\
            --repo ${{{{ github.repository }}}} \\
            --pr ${{{{ github.event.pull_request.number || github.event.issue.number }}}} \\
            --bot-login "github-actions[bot]"
"""


@click.command("init")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Auto-detected from git remote.")
def init_cmd(repo: str | None):
    """Set up further-review for a repository.

    Writes a starter .further-review.yml with one review rule and optionally
    a GitHub Actions workflow that re-checks sign-offs on every push and comment.
    """
    console.print("\n[bold cyan]further-review init[/bold cyan]\n")

    if repo is None:
        repo = _detect_repo_from_git()
        if repo:
            console.print(f"[dim]Detected repository: {repo}[/dim]")
        else:
            repo = click.prompt("GitHub repository (owner/name)")

    rules_path = Path(DEFAULT_FILES.split(",")[0])
    if rules_path.exists() and not click.confirm(f"{rules_path} already exists. Add a rule to it?", default=True):
        console.print("[yellow]Leaving existing rules file unchanged.[/yellow]")
    else:
        rule = _prompt_rule()
        _write_rules(rules_path, rule)
        console.print(f"[green]Wrote rule {rule['name']!r} to {rules_path}[/green]")

    setup_ci = click.confirm("\nGenerate .github/workflows/further-review.yml for GitHub Actions?", default=True)
    if setup_ci:
        _write_workflow()
        console.print("[green]Created .github/workflows/further-review.yml[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print(f"Check a pull request with: [bold]further-review check --repo {repo} --pr <number>[/bold]")


def _prompt_rule() -> dict:
    name = click.prompt("Rule name", default="Code owners")
    while True:
        raw = click.prompt("Reviewer logins (comma-separated)")
        try:
            logins = [parse_login(part) for part in raw.split(",") if part.strip()]
        except LoginParseError as e:
            console.print(f"[red]{e}[/red]")
            continue
        if logins:
            break
    glob = click.prompt("Files this rule applies to (glob)", default="**")
    required = click.prompt("Sign-offs required", type=click.IntRange(0, len(logins)), default=1)
    return {"name": name, "logins": logins, "glob": glob, "required": required}


def _detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    url = result.stdout.strip()
    # https://github.com/owner/repo.git and git@github.com:owner/repo.git
    if "github.com" not in url:
        return None
    slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
    return slug if "/" in slug else None


def _write_rules(path: Path, rule: dict) -> None:
    """Append a rule to the rules file, preserving existing rules and keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    reviews = existing.get("reviews")
    if not isinstance(reviews, list):
        reviews = []
    reviews.append(rule)
    existing["reviews"] = reviews
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("further-review")
    except PackageNotFoundError:
        return "0.1.0"


def _write_workflow() -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    (workflow_dir / "further-review.yml").write_text(_WORKFLOW_TEMPLATE.format(version=_get_version()))
