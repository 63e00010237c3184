"""Pydantic models mirroring the GitHub GraphQL responses we request.

Raw pages are validated here and then converted into the plain dataclasses
from :mod:`org_pulse.models`.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import ChangedFile, Issue, Participant, PullRequest, Repository


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PageInfo(_Node):
    has_next_page: bool = Field(alias="hasNextPage")
    end_cursor: str | None = Field(alias="endCursor")


class TotalCount(_Node):
    total_count: int = Field(alias="totalCount", ge=0)


class RepositoryNode(_Node):
    name: str
    description: str | None
    url: str
    stargazer_count: int = Field(alias="stargazerCount", ge=0)
    fork_count: int = Field(alias="forkCount", ge=0)
    pushed_at: datetime = Field(alias="pushedAt")

    def to_model(self) -> Repository:
        return Repository(
            name=self.name,
            description=self.description,
            url=self.url,
            stargazer_count=self.stargazer_count,
            fork_count=self.fork_count,
            pushed_at=self.pushed_at,
        )


class RepositoryEdge(_Node):
    node: RepositoryNode
    cursor: str


class RepositoryConnection(_Node):
    edges: list[RepositoryEdge]
    page_info: PageInfo = Field(alias="pageInfo")


class Organization(_Node):
    repositories: RepositoryConnection


class OrganizationReposResponse(_Node):
    organization: Organization


class IssueNode(_Node):
    title: str
    url: str
    number: int
    state: str
    comments: TotalCount
    created_at: datetime = Field(alias="createdAt")
    closed_at: datetime | None = Field(alias="closedAt")
    updated_at: datetime = Field(alias="updatedAt")

    def to_model(self) -> Issue:
        return Issue(
            state=self.state,
            created_at=self.created_at,
            closed_at=self.closed_at,
            comment_count=self.comments.total_count,
            number=self.number,
            title=self.title,
            url=self.url,
            updated_at=self.updated_at,
        )


class IssueConnection(_Node):
    nodes: list[IssueNode]
    page_info: PageInfo = Field(alias="pageInfo")


class IssuesRepository(_Node):
    issues: IssueConnection


class RepositoryIssuesResponse(_Node):
    repository: IssuesRepository


class Actor(_Node):
    login: str


class ParticipantNode(_Node):
    login: str
    location: str | None = None


class ParticipantConnection(_Node):
    nodes: list[ParticipantNode]


class PullRequestNode(_Node):
    title: str
    url: str
    number: int
    state: str
    merged: bool
    comments: TotalCount
    created_at: datetime = Field(alias="createdAt")
    merged_at: datetime | None = Field(alias="mergedAt")
    closed_at: datetime | None = Field(alias="closedAt")
    updated_at: datetime = Field(alias="updatedAt")
    author: Actor | None
    participants: ParticipantConnection
    # PR-wide totals; the files connection is capped per page
    additions: int = Field(ge=0)
    deletions: int = Field(ge=0)

    def to_model(self) -> PullRequest:
        return PullRequest(
            state=self.state,
            created_at=self.created_at,
            merged_at=self.merged_at,
            merged=self.merged,
            comment_count=self.comments.total_count,
            author=self.author.login if self.author else None,
            participants=tuple(
                Participant(login=p.login, location=p.location)
                for p in self.participants.nodes
            ),
            changed_files=(
                ChangedFile(additions=self.additions, deletions=self.deletions),
            ),
            number=self.number,
            title=self.title,
            url=self.url,
            updated_at=self.updated_at,
        )


class PullRequestConnection(_Node):
    nodes: list[PullRequestNode]
    page_info: PageInfo = Field(alias="pageInfo")


class PullRequestsRepository(_Node):
    pull_requests: PullRequestConnection = Field(alias="pullRequests")


class RepositoryPullRequestsResponse(_Node):
    repository: PullRequestsRepository
