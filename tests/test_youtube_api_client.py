"""
Unit Tests for YouTubeApiClient

Uses httpx.MockTransport to stand in for the Data API:
- Single video lookups
- Playlist paging and dropped items
- HTTP and payload failures
"""

import httpx
import pytest
from pydantic import SecretStr

from discord_jukebox.config.settings import YouTubeSettings
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.infrastructure.youtube.api_client import Snippet, YouTubeApiClient


def _playlist_item(video_id: str | None, title: str = "") -> dict:
    snippet: dict = {"title": title or f"Video {video_id}", "playlistId": "PL1"}
    if video_id is not None:
        snippet["resourceId"] = {"kind": "youtube#video", "videoId": video_id}
    return {"snippet": snippet}


def _client(handler, **settings) -> YouTubeApiClient:
    return YouTubeApiClient(
        YouTubeSettings(api_key=SecretStr("test-key"), **settings),
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# Videos
# =============================================================================


class TestFetchVideo:
    """Tests for single-video metadata."""

    @pytest.mark.asyncio
    async def test_builds_canonical_record(self):
        """Should map the snippet onto a record pointing at the watch URL."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": "vid1",
                            "snippet": {
                                "title": "A Song",
                                "thumbnails": {
                                    "default": {"url": "https://i/default.jpg"},
                                    "high": {"url": "https://i/high.jpg"},
                                },
                                "liveBroadcastContent": "none",
                            },
                        }
                    ]
                },
            )

        client = _client(handler)
        try:
            (record,) = await client.fetch_video("vid1")
        finally:
            await client.aclose()

        assert record.id == "vid1"
        assert record.title == "A Song"
        assert record.source_url == "https://www.youtube.com/watch?v=vid1"
        assert record.webpage_url == record.source_url
        assert record.extractor == "youtube"
        assert record.thumbnail == "https://i/high.jpg"
        assert record.is_live is False

        request = seen[0]
        assert request.url.path.endswith("/videos")
        assert request.url.params["id"] == "vid1"
        assert request.url.params["key"] == "test-key"

    @pytest.mark.asyncio
    async def test_unknown_video_is_empty(self):
        """Should return no records when the API has no such video."""
        client = _client(lambda request: httpx.Response(200, json={"items": []}))
        try:
            assert await client.fetch_video("missing") == []
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_missing_title_falls_back_to_id(self):
        """Should use the id when the snippet has no title."""
        client = _client(
            lambda request: httpx.Response(200, json={"items": [{"id": "v9", "snippet": {}}]})
        )
        try:
            (record,) = await client.fetch_video("v9")
        finally:
            await client.aclose()

        assert record.title == "v9"
        assert record.is_live is None


# =============================================================================
# Playlists
# =============================================================================


class TestFetchPlaylist:
    """Tests for playlist paging."""

    @pytest.mark.asyncio
    async def test_follows_page_tokens_in_order(self):
        """Should collect every page in playlist order."""
        pages = {
            None: {"items": [_playlist_item("v1"), _playlist_item("v2")], "nextPageToken": "p2"},
            "p2": {"items": [_playlist_item("v3")]},
        }

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["playlistId"] == "PL1"
            assert request.url.params["maxResults"] == "50"
            return httpx.Response(200, json=pages[request.url.params.get("pageToken")])

        client = _client(handler)
        try:
            records = await client.fetch_playlist("PL1")
        finally:
            await client.aclose()

        assert [r.id for r in records] == ["v1", "v2", "v3"]
        assert all(r.playlist_id == "PL1" for r in records)

    @pytest.mark.asyncio
    async def test_drops_items_without_video_id(self):
        """Should skip deleted or private entries."""
        payload = {"items": [_playlist_item("v1"), _playlist_item(None), _playlist_item("v2")]}
        client = _client(lambda request: httpx.Response(200, json=payload))
        try:
            records = await client.fetch_playlist("PL1")
        finally:
            await client.aclose()

        assert [r.id for r in records] == ["v1", "v2"]

    @pytest.mark.asyncio
    async def test_stops_at_page_limit(self):
        """Should stop following tokens after max_pages."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(
                200, json={"items": [_playlist_item(f"v{calls}")], "nextPageToken": "more"}
            )

        client = _client(handler, max_pages=2)
        try:
            records = await client.fetch_playlist("PL1")
        finally:
            await client.aclose()

        assert calls == 2
        assert [r.id for r in records] == ["v1", "v2"]


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Tests for API error mapping."""

    @pytest.mark.asyncio
    async def test_http_error_raises_resolution_error(self):
        """Should map HTTP failures to ResolutionError."""
        client = _client(lambda request: httpx.Response(403, json={"error": "quota"}))
        try:
            with pytest.raises(ResolutionError):
                await client.fetch_video("v1")
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_raises_resolution_error(self):
        """Should map connection failures to ResolutionError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        client = _client(handler)
        try:
            with pytest.raises(ResolutionError):
                await client.fetch_playlist("PL1")
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_non_json_raises_resolution_error(self):
        """Should reject a body that is not JSON."""
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        try:
            with pytest.raises(ResolutionError):
                await client.fetch_video("v1")
        finally:
            await client.aclose()


def test_enabled_tracks_api_key():
    """Should only be enabled with a key configured."""
    assert YouTubeApiClient(YouTubeSettings()).enabled is False
    assert YouTubeApiClient(YouTubeSettings(api_key=SecretStr("k"))).enabled is True


def test_best_thumbnail_preference():
    """Should prefer the largest available thumbnail."""
    snippet = Snippet.model_validate(
        {"thumbnails": {"medium": {"url": "m"}, "maxres": {"url": "x"}}}
    )
    assert snippet.best_thumbnail == "x"
    assert Snippet().best_thumbnail is None
