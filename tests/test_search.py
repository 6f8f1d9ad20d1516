"""Tests for the search projection."""

from src.schemas.category import CategoryRecord
from src.services.search import SearchProjection, matches, project


def names(records):
    return [record.name for record in records]


def test_empty_query_returns_everything_in_order(cache):
    """Test that an empty or blank query matches all records."""
    assert names(project(cache, "")) == ["Politics", "Sports", "Business", "Culture", "Opinion"]
    assert len(list(project(cache, "   "))) == 5


def test_substring_match_on_name(cache):
    """Test the case-insensitive name match."""
    assert names(project(cache, "ti")) == ["Politics"]
    assert names(project(cache, "SPORT")) == ["Sports"]


def test_match_on_slug_and_description():
    """Test matching falls through to slug and description."""
    record = CategoryRecord(
        id="x", name="World", slug="international", description="Foreign Affairs"
    )

    assert matches(record, "nation")
    assert matches(record, "affairs")
    assert not matches(record, "sports")


def test_missing_description_is_empty():
    """Test that a missing description never matches a non-empty query."""
    record = CategoryRecord(id="x", name="World", slug="world")

    assert not matches(record, "none")


def test_projection_preserves_canonical_order(cache):
    """Test that results follow sort_order, not match quality."""
    cache.upsert(cache.get("e").model_copy(update={"sort_order": 0}))
    cache.upsert(cache.get("a").model_copy(update={"sort_order": 4}))

    assert names(project(cache, "o")) == ["Opinion", "Sports", "Politics"]


def test_projection_is_restartable(cache):
    """Test that iterating the projection twice gives the same result."""
    projection = SearchProjection(cache, "s")

    assert names(projection) == names(projection)


def test_projection_does_not_mutate_cache(cache):
    """Test that searching leaves the cache untouched."""
    version = cache.version

    list(project(cache, "business"))

    assert cache.version == version
    assert len(cache) == 5


def test_new_matching_record_appears_without_requery(cache):
    """Test that records added after the query was set show up in the next projection."""
    projection = SearchProjection(cache, "tech")
    assert names(projection.results()) == []

    cache.upsert(CategoryRecord(id="f", name="Technology", slug="technology", sort_order=5))

    assert names(projection.results()) == ["Technology"]
