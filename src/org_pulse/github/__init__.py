from .client import GitHubClient, GraphQLError

__all__ = ["GitHubClient", "GraphQLError"]
