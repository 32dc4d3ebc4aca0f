import httpx
import pytest

from config import Settings


class FakeSource:
    """In-memory stand-in for YouTubeClient.

    ``searches`` maps term -> list of ids, or an exception to raise.
    ``details`` maps id -> videos API item.
    ``detail_failures`` maps id -> exception raised when that id is in a detail batch.
    """

    def __init__(self, searches: dict, details: dict, detail_failures: dict | None = None):
        self.searches = searches
        self.details = details
        self.detail_failures = detail_failures or {}
        self.search_calls: list[str] = []
        self.detail_calls: list[list[str]] = []

    async def search(self, term: str) -> list[str]:
        self.search_calls.append(term)
        result = self.searches.get(term, [])
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def fetch_details(self, video_ids: list[str]) -> list[dict]:
        self.detail_calls.append(list(video_ids))
        for vid in video_ids:
            if vid in self.detail_failures:
                raise self.detail_failures[vid]
        return [self.details[vid] for vid in video_ids if vid in self.details]


def live_video(video_id: str, title: str = "Stream", viewers: str = "10", **snippet) -> dict:
    return {
        "id": video_id,
        "snippet": {"title": title, "channelTitle": "Channel", "channelId": "UC1", **snippet},
        "liveStreamingDetails": {"concurrentViewers": viewers},
        "statistics": {"viewCount": "1000"},
    }


def status_error(status: int, body: dict | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://www.googleapis.com/youtube/v3/search")
    response = httpx.Response(status, json=body or {}, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("YOUTUBE_API_KEY", "test-key")
    monkeypatch.setenv("TERM_DELAY_MS", "0")
    monkeypatch.setenv("HASHTAGS", "#gtarp,#rp")
    monkeypatch.delenv("GIT_SHA", raising=False)
    monkeypatch.delenv("YOUTUBE_API_BASE", raising=False)
    return Settings()
