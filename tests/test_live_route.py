"""API tests for /api/live and the health routes, with YouTube mocked at the transport."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import Settings


class FakeYouTube:
    """MockTransport handler serving canned search and videos responses."""

    def __init__(self, searches: dict | None = None, videos: dict | None = None, status: int = 200):
        self.searches = searches or {}
        self.videos = videos or {}
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"error": {"message": "upstream says no"}})
        params = request.url.params
        if request.url.path.endswith("/search"):
            ids = self.searches.get(params["q"], [])
            return httpx.Response(200, json={"items": [{"id": {"videoId": vid}} for vid in ids]})
        ids = params["id"].split(",")
        return httpx.Response(200, json={"items": [self.videos[vid] for vid in ids if vid in self.videos]})


def video(video_id: str, viewers: str = "5") -> dict:
    return {
        "id": video_id,
        "snippet": {"title": f"Stream {video_id}", "channelTitle": "Chan", "channelId": "UC"},
        "liveStreamingDetails": {"concurrentViewers": viewers},
    }


def make_client(settings: Settings, youtube: FakeYouTube) -> TestClient:
    return TestClient(create_app(settings, transport=httpx.MockTransport(youtube)))


def test_uncached_then_cached(settings):
    youtube = FakeYouTube({"#gtarp": ["a"], "#rp": ["a", "b"]}, {"a": video("a"), "b": video("b")})

    with make_client(settings, youtube) as client:
        first = client.get("/api/live").json()
        calls = len(youtube.requests)
        second = client.get("/api/live", params={"hashtags": "rp, #GTARP"}).json()

    assert first["success"] is True
    assert first["cached"] is False
    assert first["count"] == 2
    assert [s["id"] for s in first["data"]] == ["a", "b"]
    assert first["data"][0]["watchUrl"] == "https://www.youtube.com/watch?v=a"
    assert second["cached"] is True
    assert second["data"] == first["data"]
    assert len(youtube.requests) == calls


def test_empty_result_is_cached(settings):
    youtube = FakeYouTube()

    with make_client(settings, youtube) as client:
        first = client.get("/api/live", params={"hashtags": "#nothing"}).json()
        second = client.get("/api/live", params={"hashtags": "#nothing"}).json()

    assert first["data"] == [] and first["cached"] is False
    assert second["cached"] is True
    assert len(youtube.requests) == 1


def test_missing_api_key_is_configuration_error(settings):
    settings.youtube_api_key = "your_youtube_api_key_here"
    youtube = FakeYouTube()

    with make_client(settings, youtube) as client:
        resp = client.get("/api/live")

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "YouTube API key not configured",
        "message": "Please set YOUTUBE_API_KEY in your .env file",
    }
    assert youtube.requests == []


@pytest.mark.parametrize(
    ("upstream", "expected", "error"),
    [
        (403, 403, "API quota exceeded or invalid API key"),
        (400, 400, "Invalid request"),
        (503, 500, "Unknown error"),
    ],
)
def test_all_terms_failing_reports_classified_error(settings, upstream, expected, error):
    youtube = FakeYouTube(status=upstream)

    with make_client(settings, youtube) as client:
        resp = client.get("/api/live")
        cache_entries = client.get("/health").json()["cache_entries"]

    assert resp.status_code == expected
    assert resp.json()["success"] is False
    assert resp.json()["error"] == error
    assert cache_entries == 0


def test_partial_failure_still_returns_matches(settings):
    youtube = FakeYouTube({"#ok": ["a"]}, {"a": video("a")})
    original = youtube.__call__

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("q") == "#broken":
            return httpx.Response(500)
        return original(request)

    with TestClient(create_app(settings, transport=httpx.MockTransport(handler))) as client:
        body = client.get("/api/live", params={"hashtags": "#broken,#ok"}).json()

    assert [s["id"] for s in body["data"]] == ["a"]
    assert body["failedTerms"] == ["#broken"]


def test_health_and_ready(settings):
    with make_client(settings, FakeYouTube()) as client:
        health = client.get("/health").json()
        ready = client.get("/ready").json()

    assert health["status"] == "ok"
    assert health["api_key_configured"] is True
    assert ready == {"status": "ok", "service": "livestream-tracker-api", "commit": "unknown"}


def test_unknown_route_returns_json_404(settings):
    with make_client(settings, FakeYouTube()) as client:
        resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": "Not Found",
        "message": "Route GET /api/nope not found",
    }


def test_empty_hashtags_setting_searches_builtin_defaults(settings, monkeypatch):
    monkeypatch.setenv("HASHTAGS", "")
    youtube = FakeYouTube()

    with make_client(Settings(), youtube) as client:
        body = client.get("/api/live").json()

    searched = [r.url.params["q"] for r in youtube.requests]
    assert body["success"] is True
    assert searched == ["#gtarp", "#gta", "#roleplay", "#rp"]


def test_cache_hit_reports_failed_terms_of_stored_result(settings):
    youtube = FakeYouTube({"#ok": ["a"]}, {"a": video("a")})
    original = youtube.__call__

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("q") == "#broken":
            return httpx.Response(500)
        return original(request)

    with TestClient(create_app(settings, transport=httpx.MockTransport(handler))) as client:
        first = client.get("/api/live", params={"hashtags": "#broken,#ok"}).json()
        second = client.get("/api/live", params={"hashtags": "#ok,#broken"}).json()

    assert second["cached"] is True
    assert second["failedTerms"] == first["failedTerms"] == ["#broken"]
    assert second["data"] == first["data"]


def test_timestamps_share_utc_z_format(settings):
    with make_client(settings, FakeYouTube()) as client:
        health = client.get("/health").json()
        live = client.get("/api/live").json()

    assert health["timestamp"].endswith("Z")
    assert live["timestamp"].endswith("Z")
