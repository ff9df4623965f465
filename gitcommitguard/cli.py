#!/usr/bin/env python3
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import DEFAULT_CONFIG_FILENAME, RuleConfig
from .core import PolicyValidator
from .errors import GuardError
from .models import Commit, RefInfo
from .observers import ConsoleLogObserver, FileLogObserver, GitHubActionsObserver
from .sources import CommitSource, GitHubClient, GitHubEventSource, LocalRepositorySource
from .sources.github import DEFAULT_API_URL

EXIT_VIOLATIONS = 1
EXIT_FATAL = 2

console = Console()
error_console = Console(stderr=True)


async def collect(source: CommitSource) -> Tuple[Optional[RefInfo], List[Commit]]:
    """Fetch the ref and commits of a source before the engine runs."""
    ref = await source.fetch_ref()
    commits = await source.fetch_commits()
    return ref, commits


async def collect_from_github(
    event_name: str, event_path: Path, token: Optional[str], api_url: str
) -> Tuple[Optional[RefInfo], List[Commit]]:
    async with GitHubClient(token, api_url=api_url) as client:
        source = GitHubEventSource.from_event_file(event_name, event_path, client, error_console)
        return await collect(source)


def print_config(config: RuleConfig, config_path: Path) -> None:
    console.print("\n[bold]Current Configuration Settings:[/bold]")
    if config_path.exists():
        console.print(f"[dim]Config file: {str(config_path).replace(os.sep, '/')}[/dim]")
    else:
        console.print("[dim]Using default values (no config file found)[/dim]")

    console.print(f"\n{'Setting':<36} {'Value':<30}")
    console.print("-" * 66)
    for name, value in config.settings():
        console.print(f"{name:<36} {escape(str(value)):<30}")


@click.command()
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    help="Triggering event (pull_request or push). Defaults to $GITHUB_EVENT_NAME",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the event payload JSON. Defaults to $GITHUB_EVENT_PATH",
)
@click.option(
    "--token",
    envvar=["INPUT_GITHUB-TOKEN", "GITHUB_TOKEN"],
    help="Token used to read commits from the GitHub API",
)
@click.option(
    "--api-url",
    envvar="GITHUB_API_URL",
    default=DEFAULT_API_URL,
    show_default=True,
    help="Base URL of the GitHub REST API",
)
@click.option(
    "--local",
    "rev_range",
    metavar="REV_RANGE",
    help="Check a revision range of a local repository instead of a GitHub event (e.g. origin/main..HEAD)",
)
@click.option(
    "-p",
    "--path",
    default=".",
    help="Path to git repository (defaults to current directory)",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Config file to read (defaults to {DEFAULT_CONFIG_FILENAME} in the repository)",
)
@click.option(
    "-l",
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Optional file to write the diagnostic log to",
)
@click.option("--config-list", is_flag=True, help="Display current configuration settings")
@click.option("--init-config", is_flag=True, help="Write a config file with default values")
@click.version_option(__version__, "--version", prog_name="git-commit-guard")
def main(
    event_name: Optional[str],
    event_path: Optional[Path],
    token: Optional[str],
    api_url: str,
    rev_range: Optional[str],
    path: Path,
    config_file: Optional[Path],
    log_file: Optional[Path],
    config_list: bool,
    init_config: bool,
):
    """
    Validate pull request, branch, tag and commit metadata against policy rules.

    Rules come from the action inputs (INPUT_* environment variables), which
    override the [gitcommitguard] table of .gitcommitguard.toml. Every
    violation is reported; the exit status is 1 when any rule is violated
    and 2 when the run cannot complete.
    """
    repo_path = path.absolute()

    if init_config:
        config_path = repo_path / DEFAULT_CONFIG_FILENAME
        if config_path.exists():
            console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
        else:
            RuleConfig().save(repo_path)
            console.print(f"[green]Created config file with default values:[/green] {config_path}")
        return

    try:
        config = RuleConfig.resolve(repo_path, os.environ, config_file)

        if config_list:
            print_config(config, config_file or repo_path / DEFAULT_CONFIG_FILENAME)
            return

        if rev_range:
            ref, commits = asyncio.run(collect(LocalRepositorySource(repo_path, rev_range)))
        else:
            if not event_name or not event_path:
                raise click.UsageError(
                    "--event-name and --event-path are required unless --local is given"
                )
            ref, commits = asyncio.run(collect_from_github(event_name, event_path, token, api_url))

        validator = PolicyValidator(config)
        if os.environ.get("GITHUB_ACTIONS") == "true":
            validator.add_observer(GitHubActionsObserver())
        else:
            validator.add_observer(ConsoleLogObserver(console))
        if log_file is not None:
            validator.add_observer(FileLogObserver(str(log_file)))

        report = validator.validate(ref, commits)
    except GuardError as e:
        error_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(EXIT_FATAL)
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(EXIT_FATAL)

    if report.failed():
        error_console.print("[red]Commit policy violations:[/red]")
        for message in report.messages():
            error_console.print(f"[red]  - {escape(message)}[/red]")
        sys.exit(EXIT_VIOLATIONS)


if __name__ == "__main__":
    main()
