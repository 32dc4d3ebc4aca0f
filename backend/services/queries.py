"""Hashtag query normalization and cache key derivation."""

from collections.abc import Iterable
from dataclasses import dataclass

from config import DEFAULT_HASHTAGS

CACHE_NAMESPACE = "live_streams"
KEY_SEPARATOR = "_"


@dataclass(frozen=True)
class NormalizedQuery:
    terms: tuple[str, ...]
    cache_key: str


def parse_terms(raw: str | None) -> list[str]:
    """Split a comma-separated hashtag string into terms."""
    if not raw:
        return []
    return [term.strip() for term in raw.split(",")]


def canonical_term(term: str) -> str:
    """Case-folded term with every non-alphanumeric character removed ("#GTA RP" -> "gtarp")."""
    return "".join(ch for ch in term.casefold() if ch.isalnum())


def clean_terms(terms: Iterable[str] | None, default: Iterable[str] | None = None) -> list[str]:
    """Trim, drop empty and duplicate terms, keeping first-seen spelling.

    Falls back to ``default`` (itself cleaned) when nothing usable remains.
    """
    cleaned = []
    seen = set()
    for term in terms or ():
        term = term.strip()
        canonical = canonical_term(term)
        if not canonical or canonical in seen:
            continue
        seen.add(canonical)
        cleaned.append(term)

    if cleaned or default is None:
        return cleaned
    return clean_terms(default)


def cache_key(terms: Iterable[str]) -> str:
    parts = sorted({canonical_term(term) for term in terms} - {""})
    return f"{CACHE_NAMESPACE}{KEY_SEPARATOR}{KEY_SEPARATOR.join(parts)}"


def normalize_query(
    terms: Iterable[str] | None, default: Iterable[str] | None = None
) -> NormalizedQuery:
    """Clean ``terms`` and derive their order-independent cache key.

    Falls back to ``default``, then to the built-in hashtags when ``default``
    has no usable term either.
    """
    cleaned = clean_terms(terms, default) or clean_terms(parse_terms(DEFAULT_HASHTAGS))
    return NormalizedQuery(terms=tuple(cleaned), cache_key=cache_key(cleaned))
