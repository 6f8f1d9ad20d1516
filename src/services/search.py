"""Search projection over the category cache."""

from collections.abc import Iterator

from src.schemas.category import CategoryRecord
from src.services.collection_cache import CollectionCache


def matches(record: CategoryRecord, query: str) -> bool:
    """Case-insensitive substring match on name, slug or description."""
    if not query.strip():
        return True
    needle = query.lower()
    return (
        needle in record.name.lower()
        or needle in record.slug.lower()
        or needle in (record.description or "").lower()
    )


def project(cache: CollectionCache, query: str) -> Iterator[CategoryRecord]:
    """Yield matching records in canonical order without touching the cache."""
    return (record for record in cache.snapshot() if matches(record, query))


class SearchProjection:
    """Filtered view that only remembers the last query string."""

    def __init__(self, cache: CollectionCache, query: str = ""):
        self.cache = cache
        self.query = query

    def results(self) -> Iterator[CategoryRecord]:
        return project(self.cache, self.query)

    def __iter__(self) -> Iterator[CategoryRecord]:
        return self.results()
