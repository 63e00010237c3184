"""GitHub GraphQL API client."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

import httpx

from ..models import Issue, PullRequest, Repository
from .schema import (
    OrganizationReposResponse,
    PageInfo,
    RepositoryIssuesResponse,
    RepositoryPullRequestsResponse,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"

T = TypeVar("T")

ORG_REPOS_QUERY = """
query ($org: String!, $cursor: String) {
  organization(login: $org) {
    repositories(first: 10, after: $cursor) {
      edges {
        node {
          name
          description
          url
          stargazerCount
          forkCount
          pushedAt
        }
        cursor
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""

REPO_ISSUES_QUERY = """
query ($org: String!, $repoName: String!, $since: DateTime!, $cursor: String) {
  repository(owner: $org, name: $repoName) {
    issues(first: 100, after: $cursor, orderBy: {field: UPDATED_AT, direction: DESC}, filterBy: {since: $since}) {
      nodes {
        title
        url
        number
        state
        comments {
          totalCount
        }
        createdAt
        closedAt
        updatedAt
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""

REPO_PULL_REQUESTS_QUERY = """
query ($org: String!, $repoName: String!, $cursor: String) {
  repository(owner: $org, name: $repoName) {
    pullRequests(first: 100, after: $cursor, orderBy: {field: UPDATED_AT, direction: DESC}) {
      nodes {
        title
        url
        number
        state
        merged
        comments {
          totalCount
        }
        createdAt
        mergedAt
        closedAt
        updatedAt
        author {
          login
        }
        participants(first: 100) {
          nodes {
            login
            location
          }
        }
        additions
        deletions
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""


class GraphQLError(RuntimeError):
    """Raised when a GraphQL response carries an ``errors`` array."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = "; ".join(err.get("message", str(err)) for err in errors)
        super().__init__(f"GraphQL errors: {messages}")


class GitHubClient:
    """Async GitHub GraphQL client with cursor pagination."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=30.0,
            verify=verify_ssl,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _query(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post(
            "/graphql", json={"query": query, "variables": variables}
        )
        response.raise_for_status()
        payload = response.json()
        errors = payload.get("errors")
        if errors:
            raise GraphQLError(errors)
        return payload.get("data") or {}

    async def _paginate(
        self,
        query: str,
        variables: dict[str, Any],
        parse: Callable[[dict[str, Any]], tuple[list[T], PageInfo]],
        stop: Callable[[list[T]], bool] | None = None,
    ) -> list[T]:
        """Follow ``pageInfo.endCursor`` until ``hasNextPage`` is false.

        ``stop`` is called with each non-empty page and ends the walk early
        when it returns true.
        """
        results: list[T] = []
        cursor: str | None = None
        while True:
            data = await self._query(query, {**variables, "cursor": cursor})
            items, page_info = parse(data)
            results.extend(items)
            if not page_info.has_next_page:
                break
            if stop is not None and items and stop(items):
                break
            cursor = page_info.end_cursor
        return results

    async def fetch_organization_repos(
        self, org: str, since: datetime
    ) -> tuple[int, list[Repository]]:
        """Return the total repo count and the repos pushed to since ``since``."""
        logger.info("Fetching repos for %s", org)

        def parse(data: dict[str, Any]) -> tuple[list[Repository], PageInfo]:
            conn = OrganizationReposResponse.model_validate(data).organization.repositories
            return [edge.node.to_model() for edge in conn.edges], conn.page_info

        repos = await self._paginate(ORG_REPOS_QUERY, {"org": org}, parse)
        active = [r for r in repos if r.pushed_at >= since]
        logger.info("Fetched %d active repos (of %d) for %s", len(active), len(repos), org)
        return len(repos), active

    async def fetch_repo_issues(
        self, org: str, repo: str, since: datetime
    ) -> list[Issue]:
        """List issues updated since ``since`` (filtered server-side)."""
        logger.info("Fetching issues for %s", repo)

        def parse(data: dict[str, Any]) -> tuple[list[Issue], PageInfo]:
            conn = RepositoryIssuesResponse.model_validate(data).repository.issues
            return [node.to_model() for node in conn.nodes], conn.page_info

        issues = await self._paginate(
            REPO_ISSUES_QUERY,
            {"org": org, "repoName": repo, "since": since.isoformat()},
            parse,
        )
        logger.info("Fetched %d issues for %s", len(issues), repo)
        return issues

    async def fetch_repo_pull_requests(
        self, org: str, repo: str, since: datetime
    ) -> list[PullRequest]:
        """List pull requests created or updated since ``since``."""
        logger.info("Fetching pull requests for %s", repo)

        def parse(data: dict[str, Any]) -> tuple[list[PullRequest], PageInfo]:
            conn = RepositoryPullRequestsResponse.model_validate(data).repository.pull_requests
            return [node.to_model() for node in conn.nodes], conn.page_info

        def past_window(page: list[PullRequest]) -> bool:
            # pages are ordered by updatedAt descending
            last = page[-1].updated_at
            return last is not None and last < since

        prs = await self._paginate(
            REPO_PULL_REQUESTS_QUERY,
            {"org": org, "repoName": repo},
            parse,
            stop=past_window,
        )
        filtered = [
            pr
            for pr in prs
            if pr.created_at >= since
            or (pr.updated_at is not None and pr.updated_at >= since)
        ]
        logger.info("Fetched %d pull requests for %s", len(filtered), repo)
        return filtered
