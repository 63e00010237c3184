"""CLI entrypoint for org-pulse."""

from __future__ import annotations

import asyncio
import logging
import re
import sys
from datetime import datetime, timedelta, timezone

import click
import httpx
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from . import __version__

DEFAULT_SINCE = "7d"


def _parse_relative_date(value: str, now: datetime | None = None) -> datetime | None:
    """Parse relative date like 7d, 2w, 3m, 1y into a UTC datetime."""
    match = re.match(r"^(\d+)([dwmy])$", value)
    if not match:
        return None
    amount = int(match.group(1))
    unit = match.group(2)
    if unit == "d":
        delta = timedelta(days=amount)
    elif unit == "w":
        delta = timedelta(weeks=amount)
    elif unit == "m":
        delta = timedelta(days=amount * 30)
    else:  # unit == "y"
        delta = timedelta(days=amount * 365)
    return (now or datetime.now(timezone.utc)) - delta


def _resolve_since(value: str) -> datetime:
    """Resolve a relative (7d, 2w, 3m, 1y) or absolute (YYYY-MM-DD) start date."""
    parsed = _parse_relative_date(value)
    if parsed is not None:
        return parsed
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        raise click.BadParameter(
            f"'{value}' is neither YYYY-MM-DD nor a relative date like 7d",
            param_hint="--since",
        ) from None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.command()
@click.argument("org", envvar="GITHUB_ORG_NAME")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    required=True,
    show_envvar=True,
    help="GitHub personal access token",
)
@click.option(
    "--since",
    default=DEFAULT_SINCE,
    show_default=True,
    help="Start date (YYYY-MM-DD or relative: 7d, 2w, 3m, 1y)",
)
@click.option(
    "--exclude-repo",
    multiple=True,
    help="Exclude repo by name (repeatable)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format (csv exports contributor data only)",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="Save output to file instead of stdout",
)
@click.option(
    "--top-n", default=10, show_default=True, help="Number of top contributors to show"
)
@click.option(
    "--sort-by",
    type=click.Choice(["opened", "merged", "comments", "lines"], case_sensitive=False),
    default="opened",
    show_default=True,
    help="Sort contributors by this metric",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log progress to stderr")
@click.version_option(version=__version__)
def main(
    org: str,
    token: str,
    since: str,
    exclude_repo: tuple[str, ...],
    output_format: str,
    output_file: str | None,
    top_n: int,
    sort_by: str,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: bool,
) -> None:
    """Summarize recent GitHub activity for an organization.

    \b
    ORG defaults to $GITHUB_ORG_NAME. A .env file in the working
    directory is loaded before options are read.

    \b
    Examples:
      org-pulse myorg
      org-pulse myorg --since 30d --format json --output pulse.json
      org-pulse myorg --since 2024-01-01 --sort-by lines --top-n 20
    """
    _configure_logging(verbose)
    since_dt = _resolve_since(since)

    from .orchestrator import run

    try:
        asyncio.run(
            run(
                org=org,
                token=token,
                since=since_dt,
                top_n=top_n,
                output_format=output_format,
                exclude_repos=list(exclude_repo),
                sort_by=sort_by,
                output_file=output_file,
                api_url=api_url,
                verify_ssl=not no_ssl_verify,
            )
        )
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 404:
            click.echo(f"Error: '{org}' not found. Check the organization name.", err=True)
        elif status in (401, 403):
            click.echo("Error: Authentication failed. Check your --token or $GITHUB_TOKEN.", err=True)
        else:
            click.echo(f"Error: GitHub API returned {status}.", err=True)
        sys.exit(1)
    except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
        click.echo(f"Error: Could not connect to GitHub API. {exc}", err=True)
        sys.exit(1)
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def cli() -> None:
    """Console script entry point: load .env, then run the click command."""
    load_dotenv()
    main()


if __name__ == "__main__":  # pragma: no cover
    cli()
