"""Unit tests for the GitHub client, using httpx's mock transport."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from repograph.services.github_client import GitHubClient
from repograph.utils.exceptions import GitHubAPIError, RateLimitError, RepositoryNotFoundError


def _client(settings, handler) -> GitHubClient:
    return GitHubClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_commits_maps_payload(settings, commit_payload):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[
            commit_payload("c2", "c1", message="Merge pull request #1\n\nbody"),
            commit_payload("c1", name=None),
        ])

    client = _client(settings, handler)
    commits = await client.list_commits("acme", "widgets", limit=10)
    await client.close()

    assert [c.sha for c in commits] == ["c2", "c1"]
    assert commits[0].parents == ("c1",)
    assert commits[0].message.startswith("Merge pull request #1")
    assert commits[0].author.avatar_url == "https://avatars.example/ada.png"
    assert commits[0].url.endswith("/commit/c2")
    assert commits[1].author.name == "Unknown"
    assert commits[1].parents == ()

    request = seen[0]
    assert request.url.path == "/repos/acme/widgets/commits"
    assert request.url.params["per_page"] == "10"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert "Authorization" not in request.headers


@pytest.mark.asyncio
async def test_list_commits_paginates_large_windows(settings, commit_payload):
    pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        pages.append(request.url.params["page"])
        return httpx.Response(200, json=[
            commit_payload(f"p{page}-{i}") for i in range(int(request.url.params["per_page"]))
        ])

    client = _client(settings, handler)
    commits = await client.list_commits("acme", "widgets", limit=150)
    await client.close()

    assert len(commits) == 150
    assert pages == ["1", "2"]
    assert commits[0].sha == "p1-0"
    assert commits[-1].sha == "p2-49"


@pytest.mark.asyncio
async def test_list_commits_stops_on_short_page_and_dedupes(settings, commit_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[commit_payload("a"), commit_payload("a"), commit_payload("b")])

    client = _client(settings, handler)
    commits = await client.list_commits("acme", "widgets", limit=100)
    await client.close()

    assert [c.sha for c in commits] == ["a", "b"]


@pytest.mark.asyncio
async def test_list_commits_keeps_paging_past_shifted_history(settings, commit_payload):
    # Two new pushes between requests repeat the last two SHAs of page 1 on page 2.
    def handler(request: httpx.Request) -> httpx.Response:
        start = 0 if request.url.params["page"] == "1" else 98
        return httpx.Response(200, json=[commit_payload(f"c{i}") for i in range(start, start + 100)])

    client = _client(settings, handler)
    commits = await client.list_commits("acme", "widgets", limit=150)
    await client.close()

    assert len(commits) == 150
    assert len({c.sha for c in commits}) == 150
    assert commits[-1].sha == "c149"


@pytest.mark.asyncio
async def test_token_is_sent_as_bearer(settings, commit_payload):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = _client(settings.model_copy(update={"GITHUB_TOKEN": "ghp_test"}), handler)
    await client.list_commits("acme", "widgets")
    await client.close()

    assert seen[0].headers["Authorization"] == "Bearer ghp_test"


@pytest.mark.asyncio
async def test_get_repository(settings, repository_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/acme/widgets"
        return httpx.Response(200, json=repository_payload)

    client = _client(settings, handler)
    repo = await client.get_repository("acme", "widgets")
    await client.close()

    assert repo.full_name == "acme/widgets"
    assert repo.description is None
    assert repo.owner.login == "acme"
    assert repo.default_branch == "main"


@pytest.mark.asyncio
async def test_not_found_maps_to_domain_error(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    client = _client(settings, handler)
    with pytest.raises(RepositoryNotFoundError, match="acme/missing") as exc_info:
        await client.get_repository("acme", "missing")
    await client.close()

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_exhausted_quota_maps_to_rate_limit_error(settings):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(
            403,
            json={"message": "API rate limit exceeded"},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1704467040"},
        )

    client = _client(settings, handler)
    with pytest.raises(RateLimitError) as exc_info:
        await client.list_branches("acme", "widgets")
    await client.close()

    assert calls == 1
    assert exc_info.value.reset_at == datetime(2024, 1, 5, 15, 4, tzinfo=timezone.utc)
    assert "15:04 UTC" in str(exc_info.value)


@pytest.mark.asyncio
async def test_other_client_errors_carry_github_message(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Git Repository is empty."})

    client = _client(settings, handler)
    with pytest.raises(GitHubAPIError, match="Git Repository is empty") as exc_info:
        await client.list_commits("acme", "empty")
    await client.close()

    assert exc_info.value.status_code == 409
    assert not isinstance(exc_info.value, RepositoryNotFoundError)


@pytest.mark.asyncio
async def test_server_errors_are_retried(settings, commit_payload):
    responses = iter([
        httpx.Response(502),
        httpx.Response(200, json=[commit_payload("a")]),
    ])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    client = _client(settings, handler)
    with patch("repograph.utils.retry.asyncio.sleep", new_callable=AsyncMock):
        commits = await client.list_commits("acme", "widgets")
    await client.close()

    assert [c.sha for c in commits] == ["a"]


@pytest.mark.asyncio
async def test_transport_errors_surface_as_github_error(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(settings, handler)
    with patch("repograph.utils.retry.asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(GitHubAPIError, match="Could not reach GitHub"):
            await client.list_commits("acme", "widgets")
    await client.close()


@pytest.mark.asyncio
async def test_commit_activity_pending_returns_empty(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/acme/widgets/stats/commit_activity"
        return httpx.Response(202)

    client = _client(settings, handler)
    assert await client.get_commit_activity("acme", "widgets") == []
    await client.close()


@pytest.mark.asyncio
async def test_commit_activity_maps_weeks(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"week": 1704067200, "total": 3, "days": [0, 1, 2, 0, 0, 0, 0]}])

    client = _client(settings, handler)
    activity = await client.get_commit_activity("acme", "widgets")
    await client.close()

    assert activity[0].total == 3
    assert activity[0].days == (0, 1, 2, 0, 0, 0, 0)


@pytest.mark.asyncio
async def test_contributors_skip_anonymous(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[
            {"login": "ada", "avatar_url": "a.png", "contributions": 40, "html_url": "https://github.com/ada"},
            {"type": "Anonymous", "name": "someone", "contributions": 2},
        ])

    client = _client(settings, handler)
    contributors = await client.list_contributors("acme", "widgets", limit=20)
    await client.close()

    assert [c.login for c in contributors] == ["ada"]
    assert contributors[0].contributions == 40


@pytest.mark.asyncio
async def test_malformed_payload_raises_github_error(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"no_sha": True}])

    client = _client(settings, handler)
    with pytest.raises(GitHubAPIError, match="Unexpected commit payload"):
        await client.list_commits("acme", "widgets")
    await client.close()


@pytest.mark.asyncio
async def test_rate_limit_quota(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "resources": {"core": {"limit": 60, "remaining": 59, "reset": 1704467040}},
        })

    client = _client(settings, handler)
    quota = await client.get_rate_limit()
    await client.close()

    assert quota == {"limit": 60, "remaining": 59, "reset": 1704467040}
