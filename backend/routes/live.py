"""Live stream route — cached multi-hashtag YouTube aggregation."""

import logging

from fastapi import APIRouter, Query, Request

from errors import ConfigurationError, classify_upstream_error
from services.aggregator import AggregationResult, LiveStreamAggregator, utc_now_iso
from services.queries import normalize_query, parse_terms
from services.youtube import YouTubeClient

logger = logging.getLogger(__name__)

router = APIRouter()


def _response(result: AggregationResult, cached: bool) -> dict:
    return {
        "success": True,
        "data": [stream.to_dict() for stream in result.streams],
        "cached": cached,
        "count": len(result.streams),
        "failedTerms": result.failed_terms,
        "timestamp": utc_now_iso(),
    }


@router.get("/api/live")
async def live_streams(request: Request, hashtags: str | None = Query(None)) -> dict:
    """Live streams for the requested (or configured) hashtags, served from cache when fresh."""
    settings = request.app.state.settings
    cache = request.app.state.cache

    query = normalize_query(parse_terms(hashtags), default=parse_terms(settings.hashtags))

    cached = cache.get(query.cache_key)
    if cached is not None:
        return _response(cached, cached=True)

    if not settings.has_api_key:
        raise ConfigurationError()

    youtube = YouTubeClient(
        settings.youtube_api_key,
        client=request.app.state.http_client,
        base_url=settings.youtube_api_base,
        max_results=settings.youtube_max_results,
    )
    aggregator = LiveStreamAggregator(youtube, term_delay=settings.term_delay_ms / 1000)
    result = await aggregator.aggregate(query.terms)

    if result.all_failed:
        upstream = classify_upstream_error(result.first_error)
        logger.error(
            "All %d hashtags failed for %s: %s", len(query.terms), query.cache_key, upstream.message
        )
        raise upstream.to_exception()

    # Whole result, so cache hits keep failedTerms
    cache.set(query.cache_key, result, settings.cache_duration_ms)
    return _response(result, cached=False)
