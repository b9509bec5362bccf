"""Async YouTube Data API v3 client for video and playlist metadata."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from discord_jukebox.config.settings import YouTubeSettings
from discord_jukebox.domain.music.entities import TrackRecord
from discord_jukebox.domain.music.value_objects import youtube_watch_url
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

EXTRACTOR_NAME: Final[str] = "youtube"
PAGE_SIZE: Final[int] = 50
THUMBNAIL_PREFERENCE: Final[tuple[str, ...]] = ("maxres", "standard", "high", "medium", "default")


# ── Response models ────────────────────────────────────────────────────


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True
    )


class Thumbnail(_ApiModel):
    url: str


class ResourceId(_ApiModel):
    video_id: str | None = None


class Snippet(_ApiModel):
    title: str = ""
    thumbnails: dict[str, Thumbnail] = Field(default_factory=dict)
    playlist_id: str | None = None
    resource_id: ResourceId | None = None
    live_broadcast_content: str | None = None

    @property
    def best_thumbnail(self) -> str | None:
        for key in THUMBNAIL_PREFERENCE:
            if key in self.thumbnails:
                return self.thumbnails[key].url
        return None


class VideoItem(_ApiModel):
    id: str
    snippet: Snippet | None = None


class PlaylistItem(_ApiModel):
    snippet: Snippet | None = None


class VideoListResponse(_ApiModel):
    items: list[VideoItem] = Field(default_factory=list)


class PlaylistItemListResponse(_ApiModel):
    items: list[PlaylistItem] = Field(default_factory=list)
    next_page_token: str | None = None


# ── Client ─────────────────────────────────────────────────────────────


class YouTubeApiClient:
    """Resolves native YouTube links through the Data API.

    Every record produced here points at the canonical watch URL, never at
    the link the user pasted.
    """

    def __init__(
        self,
        settings: YouTubeSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or YouTubeSettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {**params, "key": self._settings.api_key.get_secret_value()}
        logger.debug(LogTemplates.API_REQUEST, path, params)
        try:
            response = await self._get_client().get(path, params=query)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ResolutionError(
                path, ErrorMessages.METADATA_API_FAILED.format(error=exc)
            ) from exc

        if not isinstance(payload, dict):
            raise ResolutionError(
                path, ErrorMessages.METADATA_API_FAILED.format(error="response is not an object")
            )
        return payload

    async def fetch_video(self, video_id: str) -> list[TrackRecord]:
        """One record for *video_id*, or an empty list when the API knows no such video."""
        payload = await self._get("videos", {"part": "snippet", "id": video_id})
        try:
            response = VideoListResponse.model_validate(payload)
        except ValidationError as exc:
            raise ResolutionError(
                video_id, ErrorMessages.METADATA_API_FAILED.format(error=exc)
            ) from exc

        for item in response.items:
            return [self._to_record(item.id, item.snippet)]
        return []

    async def fetch_playlist(self, playlist_id: str) -> list[TrackRecord]:
        """All items of *playlist_id* in playlist order, following page tokens."""
        records: list[TrackRecord] = []
        page_token: str | None = None
        pages = 0

        while True:
            params: dict[str, Any] = {
                "part": "snippet",
                "playlistId": playlist_id,
                "maxResults": PAGE_SIZE,
            }
            if page_token:
                params["pageToken"] = page_token

            payload = await self._get("playlistItems", params)
            try:
                response = PlaylistItemListResponse.model_validate(payload)
            except ValidationError as exc:
                raise ResolutionError(
                    playlist_id, ErrorMessages.METADATA_API_FAILED.format(error=exc)
                ) from exc
            pages += 1

            for item in response.items:
                snippet = item.snippet
                video_id = snippet.resource_id.video_id if snippet and snippet.resource_id else None
                if not video_id:
                    logger.debug(LogTemplates.API_ITEM_DROPPED, playlist_id)
                    continue
                records.append(self._to_record(video_id, snippet, playlist_id=playlist_id))

            page_token = response.next_page_token
            if not page_token:
                break
            if pages >= self._settings.max_pages:
                logger.warning(LogTemplates.API_PAGE_LIMIT, playlist_id, pages)
                break

        return records

    @staticmethod
    def _to_record(
        video_id: str, snippet: Snippet | None, *, playlist_id: str | None = None
    ) -> TrackRecord:
        url = youtube_watch_url(video_id)
        title = snippet.title if snippet and snippet.title else video_id
        return TrackRecord(
            id=video_id,
            title=title[:500],
            source_url=url,
            webpage_url=url,
            extractor=EXTRACTOR_NAME,
            thumbnail=snippet.best_thumbnail if snippet else None,
            playlist_id=playlist_id or (snippet.playlist_id if snippet else None),
            is_live=(
                snippet.live_broadcast_content == "live"
                if snippet and snippet.live_broadcast_content
                else None
            ),
        )
