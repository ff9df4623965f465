"""Commit sources feeding the rule engine.

Example:
    ```python
    from gitcommitguard.sources import GitHubClient, GitHubEventSource

    async with GitHubClient(token) as client:
        source = GitHubEventSource.from_event_file("push", event_path, client)
        ref = await source.fetch_ref()
        commits = await source.fetch_commits()
    ```
"""

from .base import CommitSource
from .github import GitHubClient, GitHubEventSource, commit_from_api
from .local import LocalRepositorySource

__all__ = [
    "CommitSource",
    "GitHubClient",
    "GitHubEventSource",
    "commit_from_api",
    "LocalRepositorySource",
]
