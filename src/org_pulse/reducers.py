"""Issue and pull request metric reducers.

Each fold takes a page of records plus the accumulator returned by the
previous call and returns a new accumulator, so a repository's pages can be
folded one at a time or all at once with the same result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from .models import (
    MERGED,
    OPEN,
    Issue,
    IssueMetrics,
    IssueSummary,
    PRMetrics,
    PRSummary,
    PullRequest,
)

MS_PER_DAY = 86_400_000


def _partition_issues(issues: Iterable[Issue]) -> tuple[list[Issue], list[Issue]]:
    """Split issues into (open, closed); any non-open state counts as closed."""
    open_issues: list[Issue] = []
    closed_issues: list[Issue] = []
    for issue in issues:
        if issue.state == OPEN:
            open_issues.append(issue)
        else:
            closed_issues.append(issue)
    return open_issues, closed_issues


def _partition_pull_requests(
    prs: Iterable[PullRequest],
) -> tuple[list[PullRequest], list[PullRequest]]:
    """Split PRs into (open, merged). Closed-unmerged PRs are dropped."""
    open_prs: list[PullRequest] = []
    merged_prs: list[PullRequest] = []
    for pr in prs:
        if pr.state == OPEN:
            open_prs.append(pr)
        elif pr.state == MERGED:
            merged_prs.append(pr)
    return open_prs, merged_prs


def _elapsed_ms(start: datetime, end: datetime | None) -> int:
    if end is None:
        return 0
    return (end - start) // timedelta(milliseconds=1)


def fold_issues(issues: Sequence[Issue], acc: IssueMetrics) -> IssueMetrics:
    """Fold a page of issues into the running issue metrics."""
    open_issues, closed_issues = _partition_issues(issues)
    total_time = acc.total_time_to_close_ms
    total_comments = acc.total_comments
    for issue in closed_issues:
        total_time += _elapsed_ms(issue.created_at, issue.closed_at)
        total_comments += issue.comment_count

    return IssueMetrics(
        open_count=acc.open_count + len(open_issues),
        closed_count=acc.closed_count + len(closed_issues),
        total_time_to_close_ms=total_time,
        total_comments=total_comments,
    )


def fold_pull_requests(prs: Sequence[PullRequest], acc: PRMetrics) -> PRMetrics:
    """Fold a page of pull requests into the running PR metrics."""
    open_prs, merged_prs = _partition_pull_requests(prs)
    total_time = acc.total_time_to_merge_ms
    total_comments = acc.total_comments
    for pr in merged_prs:
        total_time += _elapsed_ms(pr.created_at, pr.merged_at)
        total_comments += pr.comment_count

    return PRMetrics(
        open_count=acc.open_count + len(open_prs),
        merged_count=acc.merged_count + len(merged_prs),
        total_time_to_merge_ms=total_time,
        total_comments=total_comments,
    )


def calculate_average(total: float, count: int) -> float:
    if total == 0 or count == 0:
        return 0
    return total / count


def milliseconds_to_days(ms: float) -> float:
    return ms / MS_PER_DAY


def summarize_issues(metrics: IssueMetrics) -> IssueSummary:
    return IssueSummary(
        open=metrics.open_count,
        closed=metrics.closed_count,
        average_time_to_close=milliseconds_to_days(
            calculate_average(metrics.total_time_to_close_ms, metrics.closed_count)
        ),
        average_comments_per_issue=calculate_average(
            metrics.total_comments, metrics.closed_count
        ),
    )


def summarize_pull_requests(metrics: PRMetrics) -> PRSummary:
    return PRSummary(
        open=metrics.open_count,
        merged=metrics.merged_count,
        average_time_to_merge=milliseconds_to_days(
            calculate_average(metrics.total_time_to_merge_ms, metrics.merged_count)
        ),
        average_comments_per_pr=calculate_average(
            metrics.total_comments, metrics.merged_count
        ),
    )
