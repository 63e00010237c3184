"""Orchestrator: wires together client, aggregator, and renderer."""

from __future__ import annotations

from datetime import datetime

from .aggregator import aggregate_org_report
from .github.client import GitHubClient
from .renderer import render_csv, render_json, render_report


async def run(
    org: str,
    token: str,
    since: datetime,
    top_n: int = 10,
    output_format: str = "table",
    exclude_repos: list[str] | None = None,
    sort_by: str = "opened",
    output_file: str | None = None,
    api_url: str | None = None,
    verify_ssl: bool = True,
) -> None:
    """Main pipeline: fetch data, aggregate, render."""
    async with GitHubClient(
        token=token, base_url=api_url, verify_ssl=verify_ssl
    ) as client:
        result = await aggregate_org_report(
            client,
            org,
            since,
            exclude_repos=exclude_repos,
        )

    if output_format == "json":
        render_json(result, output_file=output_file)
    elif output_format == "csv":
        render_csv(result, output_file=output_file, sort_by=sort_by)
    else:
        render_report(result, top_n=top_n, sort_by=sort_by, output_file=output_file)
