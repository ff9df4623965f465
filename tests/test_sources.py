"""Tests for GitHub and local commit sources."""
import asyncio
import json

import httpx
import pytest
from git import Repo

from gitcommitguard.errors import RetrievalError
from gitcommitguard.models import RefInfo
from gitcommitguard.sources import GitHubClient, GitHubEventSource, LocalRepositorySource, commit_from_api


def api_commit(sha, message="feat: change", parents=1, author_login="jane", verified=True):
    return {
        "sha": sha,
        "parents": [{"sha": f"{i}" * 40} for i in range(parents)],
        "author": {"login": author_login} if author_login else None,
        "committer": {"login": "web-flow"},
        "commit": {
            "message": message,
            "author": {"name": "Jane Doe", "email": "jane@example.com"},
            "committer": {"name": "GitHub", "email": "noreply@github.com"},
            "verification": {"verified": verified},
        },
    }


PUSH_PAYLOAD = {
    "ref": "refs/heads/feature/login",
    "repository": {"full_name": "octo/repo"},
    "commits": [{"id": "a" * 40}, {"id": "b" * 40}, {"id": "c" * 40}],
}

PULL_REQUEST_PAYLOAD = {
    "repository": {"owner": {"login": "octo"}, "name": "repo"},
    "pull_request": {"number": 7, "title": "feat: login", "head": {"ref": "feature/login"}},
}


def test_commit_from_api():
    commit = commit_from_api(api_commit("a" * 40, parents=2, author_login=None, verified=False))

    assert commit.sha == "a" * 40
    assert commit.parent_count == 2
    assert commit.author.email == "jane@example.com"
    assert commit.author.account is None
    assert commit.author_account_linked is False
    assert commit.committer.account == "web-flow"
    assert commit.committer_account_linked is True
    assert commit.signature_verified is False
    assert commit.message == "feat: change"


def test_ref_from_git_ref():
    assert RefInfo.from_git_ref("refs/heads/feature/x").branch_name == "feature/x"
    assert RefInfo.from_git_ref("refs/tags/v1.0.0").tag_name == "v1.0.0"
    assert RefInfo.from_git_ref("refs/pull/1/merge") == RefInfo()


@pytest.mark.asyncio
async def test_push_commits_keep_payload_order():
    delays = {"a": 0.03, "b": 0.0, "c": 0.01}
    requested = []

    async def handler(request):
        sha = request.url.path.rsplit("/", 1)[-1]
        requested.append(request.url.path)
        await asyncio.sleep(delays[sha[0]])
        return httpx.Response(200, json=api_commit(sha))

    async with GitHubClient("secret", transport=httpx.MockTransport(handler)) as client:
        source = GitHubEventSource("push", PUSH_PAYLOAD, client)
        ref = await source.fetch_ref()
        commits = await source.fetch_commits()

    assert ref == RefInfo(branch_name="feature/login")
    assert [c.sha[0] for c in commits] == ["a", "b", "c"]
    assert all(path.startswith("/repos/octo/repo/commits/") for path in requested)


@pytest.mark.asyncio
async def test_push_tag_ref():
    async with GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        source = GitHubEventSource("push", {**PUSH_PAYLOAD, "ref": "refs/tags/v2.0.0", "commits": []}, client)
        assert await source.fetch_ref() == RefInfo(tag_name="v2.0.0")
        assert await source.fetch_commits() == []


@pytest.mark.asyncio
async def test_pull_request_commits_are_paginated():
    pages = {
        "1": [api_commit(f"{i:040x}") for i in range(100)],
        "2": [api_commit(f"{i + 100:040x}") for i in range(5)],
    }
    seen = []

    def handler(request):
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.url.path == "/repos/octo/repo/pulls/7/commits"
        assert request.url.params["per_page"] == "100"
        seen.append(request.url.params["page"])
        return httpx.Response(200, json=pages[request.url.params["page"]])

    async with GitHubClient("secret", transport=httpx.MockTransport(handler)) as client:
        source = GitHubEventSource("pull_request", PULL_REQUEST_PAYLOAD, client)
        ref = await source.fetch_ref()
        commits = await source.fetch_commits()

    assert ref == RefInfo(pull_request_title="feat: login", branch_name="feature/login")
    assert len(commits) == 105
    assert seen == ["1", "2"]


@pytest.mark.asyncio
async def test_api_error_becomes_retrieval_error():
    def handler(request):
        return httpx.Response(401, json={"message": "Bad credentials"})

    async with GitHubClient("wrong", transport=httpx.MockTransport(handler)) as client:
        source = GitHubEventSource("pull_request", PULL_REQUEST_PAYLOAD, client)
        with pytest.raises(RetrievalError) as exc_info:
            await source.fetch_commits()

    assert exc_info.value.status_code == 401
    assert "Bad credentials" in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_becomes_retrieval_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with GitHubClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RetrievalError):
            await client.get_commit("octo/repo", "a" * 40)


@pytest.mark.asyncio
async def test_unsupported_event_has_nothing_to_check():
    async with GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        source = GitHubEventSource("workflow_dispatch", {}, client)
        assert await source.fetch_ref() is None
        assert await source.fetch_commits() == []


def test_from_event_file(tmp_path):
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps(PUSH_PAYLOAD))
    client = GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))

    source = GitHubEventSource.from_event_file("push", event_path, client)
    assert source.repository == "octo/repo"

    with pytest.raises(RetrievalError):
        GitHubEventSource.from_event_file("push", tmp_path / "missing.json", client)


@pytest.mark.asyncio
async def test_local_source_reads_range_oldest_first(temp_git_repo_with_history):
    source = LocalRepositorySource(temp_git_repo_with_history, "HEAD~2..HEAD")
    commits = await source.fetch_commits()

    assert [c.message for c in commits] == [
        "feat: second commit",
        "fix: third commit\n\nBody line one\nBody line two",
    ]
    assert commits[0].author.email == "jane@example.com"
    assert commits[0].author_account_linked is True
    assert commits[0].signature_verified is False
    assert commits[0].parent_count == 1


@pytest.mark.asyncio
async def test_local_source_ref(temp_git_repo):
    repo = Repo(temp_git_repo)
    source = LocalRepositorySource(temp_git_repo)

    assert await source.fetch_ref() == RefInfo(branch_name=repo.active_branch.name)

    repo.create_tag("v1.0.0")
    repo.head.reference = repo.head.commit
    assert await source.fetch_ref() == RefInfo(tag_name="v1.0.0")


@pytest.mark.asyncio
async def test_local_source_bad_range(temp_git_repo):
    source = LocalRepositorySource(temp_git_repo, "does-not-exist..HEAD")
    with pytest.raises(RetrievalError):
        await source.fetch_commits()


def test_local_source_not_a_repository(tmp_path):
    with pytest.raises(RetrievalError):
        LocalRepositorySource(tmp_path)


@pytest.mark.asyncio
async def test_pull_request_payload_without_pull_request():
    async with GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        source = GitHubEventSource("pull_request", {"repository": {"full_name": "octo/repo"}}, client)
        with pytest.raises(RetrievalError, match="missing pull_request.title"):
            await source.fetch_ref()
        with pytest.raises(RetrievalError, match="missing pull_request.number"):
            await source.fetch_commits()


@pytest.mark.asyncio
async def test_push_payload_commit_without_id():
    payload = {**PUSH_PAYLOAD, "commits": [{"id": "a" * 40}, {"message": "no id"}]}
    async with GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
        source = GitHubEventSource("push", payload, client)
        with pytest.raises(RetrievalError, match="missing commits.1.id"):
            await source.fetch_commits()


@pytest.mark.asyncio
async def test_non_json_response_becomes_retrieval_error():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with GitHubClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RetrievalError, match="not valid JSON"):
            await client.get_commit("octo/repo", "a" * 40)


def test_malformed_api_commit_becomes_retrieval_error():
    incomplete = api_commit("a" * 40)
    del incomplete["commit"]

    with pytest.raises(RetrievalError):
        commit_from_api(incomplete)
    with pytest.raises(RetrievalError):
        commit_from_api({**api_commit("a" * 40), "sha": "abc"})


def test_event_file_must_hold_an_object(tmp_path):
    event_path = tmp_path / "event.json"
    event_path.write_text("[]")
    client = GitHubClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))

    with pytest.raises(RetrievalError, match="not a JSON object"):
        GitHubEventSource.from_event_file("push", event_path, client)
