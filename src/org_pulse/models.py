"""Data models for org-pulse."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

OPEN = "OPEN"
MERGED = "MERGED"
UNKNOWN_LOCATION = "Unknown"


@dataclass
class Repository:
    name: str
    url: str
    stargazer_count: int
    fork_count: int
    pushed_at: datetime
    description: str | None = None


@dataclass
class Issue:
    state: str
    created_at: datetime
    closed_at: datetime | None
    comment_count: int
    number: int = 0
    title: str = ""
    url: str = ""
    updated_at: datetime | None = None


@dataclass
class Participant:
    login: str
    location: str | None = None


@dataclass
class ChangedFile:
    additions: int
    deletions: int


@dataclass
class PullRequest:
    """A pull request as seen by the reducers.

    ``state`` decides which bucket the PR is counted in, ``merged`` decides
    whether its changed lines are attributed to the author.
    """

    state: str
    created_at: datetime
    merged_at: datetime | None
    merged: bool
    comment_count: int
    author: str | None = None
    participants: tuple[Participant, ...] = ()
    changed_files: tuple[ChangedFile, ...] = ()
    number: int = 0
    title: str = ""
    url: str = ""
    updated_at: datetime | None = None


@dataclass(frozen=True)
class IssueMetrics:
    """Running issue totals threaded through successive folds."""

    open_count: int = 0
    closed_count: int = 0
    total_time_to_close_ms: int = 0
    total_comments: int = 0


@dataclass(frozen=True)
class PRMetrics:
    """Running pull request totals threaded through successive folds."""

    open_count: int = 0
    merged_count: int = 0
    total_time_to_merge_ms: int = 0
    total_comments: int = 0


@dataclass
class ContributionRecord:
    pull_requests_opened: int = 0
    pull_requests_merged: int = 0
    pull_request_comments: int = 0
    lines_added: int = 0
    lines_removed: int = 0


@dataclass(frozen=True)
class IssueSummary:
    open: int = 0
    closed: int = 0
    average_time_to_close: float = 0  # days
    average_comments_per_issue: float = 0


@dataclass(frozen=True)
class PRSummary:
    open: int = 0
    merged: int = 0
    average_time_to_merge: float = 0  # days
    average_comments_per_pr: float = 0


@dataclass(frozen=True)
class CollaboratorSummary:
    locations: dict[str, int] = field(default_factory=dict)
    contributors: dict[str, ContributionRecord] = field(default_factory=dict)
    unique_contributor_count: int = 0


@dataclass(frozen=True)
class AggregateResult:
    org: str
    period_start: str | None
    total_stars: int = 0
    total_forks: int = 0
    repo_count: int = 0
    active_repos: list[Repository] = field(default_factory=list)
    failed_repos: list[str] = field(default_factory=list)
    issues: IssueSummary = field(default_factory=IssueSummary)
    pull_requests: PRSummary = field(default_factory=PRSummary)
    collaborators: CollaboratorSummary = field(default_factory=CollaboratorSummary)
