"""GitHub REST API commit source."""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError
from rich.console import Console

from ..errors import RetrievalError
from ..models import Commit, Identity, RefInfo
from .base import CommitSource

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100


def commit_from_api(data: Dict[str, Any]) -> Commit:
    """Convert a REST API commit object into a Commit.

    The top-level author/committer objects are the linked GitHub accounts
    and are null when the git identity matches no account.
    """
    try:
        git_commit = data["commit"]
        author_account = data.get("author")
        committer_account = data.get("committer")
        verification = git_commit.get("verification") or {}

        return Commit(
            sha=data["sha"],
            parent_count=len(data.get("parents") or []),
            author=Identity(
                email=git_commit["author"].get("email") or "",
                name=git_commit["author"].get("name") or "",
                account=author_account.get("login") if author_account else None,
            ),
            committer=Identity(
                email=git_commit["committer"].get("email") or "",
                name=git_commit["committer"].get("name") or "",
                account=committer_account.get("login") if committer_account else None,
            ),
            author_account_linked=bool(author_account),
            committer_account_linked=bool(committer_account),
            signature_verified=bool(verification.get("verified")),
            message=git_commit["message"],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise RetrievalError(f"Unexpected commit object in GitHub API response: {e!r}") from e


class GitHubClient:
    """Minimal async client for the GitHub REST endpoints used here."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=api_url,
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    async def __aenter__(self) -> 'GitHubClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                detail = e.response.json().get("message", e.response.text)
            except ValueError:
                detail = e.response.text
            raise RetrievalError(
                f"GitHub API request to {path} failed with status {e.response.status_code}: {detail}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise RetrievalError(f"GitHub API request to {path} failed: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise RetrievalError(f"GitHub API response from {path} is not valid JSON: {e}") from e

    async def list_pull_request_commits(self, repository: str, number: int) -> List[Dict[str, Any]]:
        """List every commit of a pull request, following pagination."""
        commits: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = await self._get(
                f"/repos/{repository}/pulls/{number}/commits",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            commits.extend(batch)
            if len(batch) < PAGE_SIZE:
                return commits
            page += 1

    async def get_commit(self, repository: str, sha: str) -> Dict[str, Any]:
        return await self._get(f"/repos/{repository}/commits/{sha}")


class GitHubEventSource(CommitSource):
    """Commit source for pull_request and push workflow events.

    Other events carry nothing to check: no ref and no commits.
    """

    def __init__(
        self,
        event_name: str,
        payload: Dict[str, Any],
        client: GitHubClient,
        console: Optional[Console] = None,
    ):
        self.event_name = event_name
        self.payload = payload
        self.client = client
        self.console = console or Console(stderr=True)
        if event_name not in ("pull_request", "push"):
            self.console.print(f"[yellow]Warning: event '{event_name}' has nothing to check[/yellow]")

    @classmethod
    def from_event_file(
        cls,
        event_name: str,
        event_path: Path,
        client: GitHubClient,
        console: Optional[Console] = None,
    ) -> 'GitHubEventSource':
        """Create a source from the event payload file written by the runner."""
        try:
            with Path(event_path).open(encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise RetrievalError(f"Error reading event payload {event_path}: {e}") from e
        if not isinstance(payload, dict):
            raise RetrievalError(f"Event payload {event_path} is not a JSON object")
        return cls(event_name, payload, client, console)

    @property
    def repository(self) -> str:
        repository = self.payload.get("repository") or {}
        if repository.get("full_name"):
            return repository["full_name"]
        try:
            return f"{repository['owner']['login']}/{repository['name']}"
        except (KeyError, TypeError):
            raise RetrievalError("Event payload does not identify a repository")

    def _payload_value(self, *keys: Any) -> Any:
        value: Any = self.payload
        try:
            for key in keys:
                value = value[key]
        except (KeyError, TypeError, IndexError):
            raise RetrievalError(
                f"Event payload for '{self.event_name}' is missing {'.'.join(map(str, keys))}"
            )
        return value

    async def fetch_ref(self) -> Optional[RefInfo]:
        if self.event_name == "pull_request":
            return RefInfo(
                pull_request_title=self._payload_value("pull_request", "title"),
                branch_name=self._payload_value("pull_request", "head", "ref"),
            )
        if self.event_name == "push":
            return RefInfo.from_git_ref(self.payload.get("ref"))
        return None

    async def fetch_commits(self) -> List[Commit]:
        if self.event_name == "pull_request":
            number = self._payload_value("pull_request", "number")
            data = await self.client.list_pull_request_commits(self.repository, number)
        elif self.event_name == "push":
            shas = [
                self._payload_value("commits", index, "id")
                for index in range(len(self.payload.get("commits") or []))
            ]
            # gather returns results in argument order, not completion order
            data = await asyncio.gather(
                *(self.client.get_commit(self.repository, sha) for sha in shas)
            )
        else:
            return []
        return [commit_from_api(item) for item in data]
