"""Data aggregation: walk an organization's active repos into an AggregateResult."""

from __future__ import annotations

import logging
from datetime import datetime

import httpx
from pydantic import ValidationError
from rich.progress import Progress, SpinnerColumn, TextColumn

from .contributors import fold_contributors
from .github.client import GitHubClient, GraphQLError
from .models import (
    AggregateResult,
    CollaboratorSummary,
    ContributionRecord,
    IssueMetrics,
    PRMetrics,
    Repository,
)
from .reducers import (
    fold_issues,
    fold_pull_requests,
    summarize_issues,
    summarize_pull_requests,
)

logger = logging.getLogger(__name__)

# A bad or expired token fails every repo the same way; abort instead.
FATAL_STATUSES = frozenset({401, 403})


def build_result(
    org: str,
    since: datetime | None,
    repo_count: int,
    active_repos: list[Repository],
    issue_metrics: IssueMetrics,
    pr_metrics: PRMetrics,
    locations: dict[str, int],
    contributors: dict[str, ContributionRecord],
    failed_repos: list[str] | None = None,
) -> AggregateResult:
    """Derive averages and freeze the run's totals into one snapshot."""
    return AggregateResult(
        org=org,
        period_start=since.isoformat() if since else None,
        total_stars=sum(r.stargazer_count for r in active_repos),
        total_forks=sum(r.fork_count for r in active_repos),
        repo_count=repo_count,
        active_repos=list(active_repos),
        failed_repos=list(failed_repos or []),
        issues=summarize_issues(issue_metrics),
        pull_requests=summarize_pull_requests(pr_metrics),
        collaborators=CollaboratorSummary(
            locations=locations,
            contributors=contributors,
            unique_contributor_count=len(contributors),
        ),
    )


async def aggregate_org_report(
    client: GitHubClient,
    org: str,
    since: datetime,
    exclude_repos: list[str] | None = None,
) -> AggregateResult:
    """Aggregate issue, pull request and contributor stats for an organization.

    Repositories are processed one after another; a repo whose issues or
    pull requests cannot be fetched is logged and listed in ``failed_repos``;
    its stars and forks still count, its issues and pull requests do not.
    """
    repo_count, active_repos = await client.fetch_organization_repos(org, since)

    if exclude_repos:
        excluded = set(exclude_repos)
        active_repos = [r for r in active_repos if r.name not in excluded]

    issue_metrics = IssueMetrics()
    pr_metrics = PRMetrics()
    locations: dict[str, int] = {}
    contributors: dict[str, ContributionRecord] = {}
    failed_repos: list[str] = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        task = progress.add_task(
            f"Collecting stats for {len(active_repos)} repos...",
            total=len(active_repos),
        )
        for repo in active_repos:
            try:
                issues = await client.fetch_repo_issues(org, repo.name, since)
                pull_requests = await client.fetch_repo_pull_requests(
                    org, repo.name, since
                )
            except (httpx.HTTPError, GraphQLError, ValidationError) as exc:
                if (
                    isinstance(exc, httpx.HTTPStatusError)
                    and exc.response.status_code in FATAL_STATUSES
                ):
                    raise
                logger.warning("Failed to collect stats for %s/%s: %s", org, repo.name, exc)
                failed_repos.append(repo.name)
                continue
            finally:
                progress.advance(task)

            issue_metrics = fold_issues(issues, issue_metrics)
            pr_metrics = fold_pull_requests(pull_requests, pr_metrics)
            locations, contributors = fold_contributors(
                pull_requests, locations, contributors
            )

    return build_result(
        org,
        since,
        repo_count,
        active_repos,
        issue_metrics,
        pr_metrics,
        locations,
        contributors,
        failed_repos=failed_repos,
    )
