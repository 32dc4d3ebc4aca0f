"""Multi-hashtag live stream aggregation.

Runs one search per hashtag, sequentially, fetches details for the returned
ids, keeps only videos that carry ``liveStreamingDetails`` and drops ids
already seen earlier in the same run. A failing hashtag is logged and
skipped; the run only fails as a whole if the caller decides so from the
per-term results.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

import httpx

from errors import PerTermFetchError
from services.youtube import YouTubeClient

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
DEFAULT_TERM_DELAY = 0.1

# Network failures, non-2xx responses and malformed bodies
TERM_FAILURES = (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError)


class LiveVideoSource(Protocol):
    async def search(self, term: str) -> list[str]: ...

    async def fetch_details(self, video_ids: list[str]) -> list[dict]: ...


@dataclass(frozen=True)
class LiveStream:
    id: str
    title: str
    channel_name: str
    channel_id: str
    thumbnail_url: str
    viewer_count: int
    published_at: str
    watch_url: str
    tags: tuple[str, ...] = ()
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "channelName": self.channel_name,
            "channelId": self.channel_id,
            "thumbnailUrl": self.thumbnail_url,
            "viewerCount": self.viewer_count,
            "publishedAt": self.published_at,
            "watchUrl": self.watch_url,
            "tags": list(self.tags),
            "description": self.description,
        }


@dataclass(frozen=True)
class TermResult:
    term: str
    ok: bool
    stream_count: int = 0
    error: PerTermFetchError | None = None


@dataclass(frozen=True)
class AggregationResult:
    streams: tuple[LiveStream, ...] = ()
    term_results: tuple[TermResult, ...] = ()

    @property
    def failed_terms(self) -> list[str]:
        return [r.term for r in self.term_results if not r.ok]

    @property
    def all_failed(self) -> bool:
        """True when at least one term ran and none of them succeeded."""
        return bool(self.term_results) and all(not r.ok for r in self.term_results)

    @property
    def first_error(self) -> PerTermFetchError | None:
        return next((r.error for r in self.term_results if r.error is not None), None)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_count(value) -> int:
    try:
        return max(int(str(value).strip()), 0)
    except (TypeError, ValueError):
        return 0


def normalize_stream(video: dict) -> LiveStream:
    """Convert a ``videos`` API item into a LiveStream with display fallbacks."""
    live_details = video.get("liveStreamingDetails") or {}
    snippet = video.get("snippet") or {}
    stats = video.get("statistics") or {}
    thumbnails = snippet.get("thumbnails") or {}
    video_id = video["id"]

    thumbnail = (
        (thumbnails.get("high") or {}).get("url")
        or (thumbnails.get("default") or {}).get("url")
        or ""
    )
    viewers = live_details.get("concurrentViewers") or stats.get("viewCount") or "0"

    return LiveStream(
        id=video_id,
        title=snippet.get("title") or "Untitled",
        channel_name=snippet.get("channelTitle") or "Unknown Channel",
        channel_id=snippet.get("channelId") or "",
        thumbnail_url=thumbnail,
        viewer_count=_parse_count(viewers),
        published_at=snippet.get("publishedAt") or utc_now_iso(),
        watch_url=WATCH_URL.format(video_id=video_id),
        tags=tuple(snippet.get("tags") or ()),
        description=snippet.get("description") or "",
    )


class LiveStreamAggregator:
    def __init__(self, source: LiveVideoSource, term_delay: float = DEFAULT_TERM_DELAY):
        self._source = source
        self._term_delay = term_delay

    async def _collect_term(self, term: str) -> list[LiveStream]:
        video_ids = await self._source.search(term)
        if not video_ids:
            return []

        # Search hits that stopped broadcasting have no live details
        return [
            normalize_stream(video)
            for video in await self._source.fetch_details(video_ids)
            if video.get("liveStreamingDetails") is not None and video.get("id")
        ]

    async def aggregate(self, terms: Iterable[str]) -> AggregationResult:
        """Search every term in order and merge the live results."""
        streams: list[LiveStream] = []
        term_results: list[TermResult] = []
        seen: set[str] = set()

        for term in terms:
            try:
                found = await self._collect_term(term)
            except TERM_FAILURES as e:
                error = PerTermFetchError(term, e)
                logger.warning("%s", error)
                term_results.append(TermResult(term=term, ok=False, error=error))
            else:
                added = 0
                for stream in found:
                    if stream.id in seen:
                        continue
                    seen.add(stream.id)
                    streams.append(stream)
                    added += 1
                term_results.append(TermResult(term=term, ok=True, stream_count=added))

            if self._term_delay > 0:
                await asyncio.sleep(self._term_delay)

        logger.info(
            "Aggregated %d live streams from %d terms (%d failed)",
            len(streams),
            len(term_results),
            sum(1 for r in term_results if not r.ok),
        )
        return AggregationResult(streams=tuple(streams), term_results=tuple(term_results))


async def fetch_live_streams(
    api_key: str,
    terms: Iterable[str],
    client: httpx.AsyncClient | None = None,
    term_delay: float = DEFAULT_TERM_DELAY,
) -> list[LiveStream]:
    """Aggregate live streams for ``terms`` using a fresh YouTube client."""
    async with YouTubeClient(api_key, client=client) as youtube:
        result = await LiveStreamAggregator(youtube, term_delay=term_delay).aggregate(terms)
    return list(result.streams)
