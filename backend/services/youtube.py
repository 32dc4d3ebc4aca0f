"""YouTube Data API v3 client for live stream discovery.

Two calls per hashtag: ``search`` finds live video ids, ``videos`` returns
snippet, statistics and live streaming details for the whole id batch.
No retries here; callers decide what a failure means.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
DETAIL_PARTS = "snippet,liveStreamingDetails,statistics"


class YouTubeClient:
    """Thin async wrapper over the ``search`` and ``videos`` endpoints.

    Pass a shared ``httpx.AsyncClient`` to reuse its connection pool, or use
    the client as an async context manager to own one.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        base_url: str = YOUTUBE_API_BASE,
        max_results: int = 50,
        timeout: float = 10,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._max_results = max_results
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "YouTubeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, endpoint: str, params: dict) -> dict:
        resp = await self._client.get(
            f"{self._base_url}/{endpoint}",
            params={**params, "key": self._api_key},
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected {endpoint} response shape: {type(data).__name__}")
        return data

    async def search(self, term: str) -> list[str]:
        """Return ids of videos currently live for ``term``, newest first."""
        data = await self._get(
            "search",
            {
                "part": "snippet",
                "q": term,
                "type": "video",
                "eventType": "live",
                "order": "date",
                "maxResults": self._max_results,
            },
        )
        ids = []
        for item in data.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                ids.append(video_id)
        logger.debug("YouTube search %r returned %d ids", term, len(ids))
        return ids

    async def fetch_details(self, video_ids: list[str]) -> list[dict]:
        """Fetch detail records for a batch of video ids in one call."""
        if not video_ids:
            return []
        data = await self._get("videos", {"part": DETAIL_PARTS, "id": ",".join(video_ids)})
        return list(data.get("items") or [])
