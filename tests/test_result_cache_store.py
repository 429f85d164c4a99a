import pytest

from models.normalized_result import AIAnswer, NormalizedResult
from models.search_types import DEFAULT_FILTERS, Category, DeepResearchOptions, Query
from tools.web.result_cache import EMPTY_ENTRY, CachedEntry, ResultCacheStore
from tools.web.session_registry import SessionStoreRegistry


def _result(text="solar power", model="compound-beta"):
    return NormalizedResult(ai=AIAnswer(answer="a", model=model), query_text=text)


@pytest.fixture
def store():
    return ResultCacheStore()


def test_unsearched_category_returns_empty_entry(store):
    assert store.get(Category.VIDEOS) == EMPTY_ENTRY
    assert store.get("videos").result is None


def test_set_then_get_returns_the_same_result(store):
    result = _result()
    store.set(Category.NEWS, result)
    store.mark_searched(Category.NEWS, True)

    entry = store.get("news")
    assert entry.result == result
    assert entry.searched is True
    assert store.get(Category.ALL) == EMPTY_ENTRY


def test_unknown_category_is_rejected(store):
    with pytest.raises(ValueError):
        store.get("podcasts")


def test_filter_change_resets_every_searched_flag(store):
    for category in (Category.ALL, Category.NEWS, Category.IMAGES):
        store.set(category, _result())
        store.mark_searched(category, True)

    store.set_filters({"time_range": "pastMonth"})

    assert not any(store.searched_categories().values())
    # results survive until overwritten
    assert store.get(Category.NEWS).result is not None


def test_nested_merge_keeps_other_toggles(store):
    store.set_filters({"sources": {"news": False}})
    filters = store.set_filters({"sources": {"blogs": False}})

    assert filters.sources.news is False
    assert filters.sources.blogs is False
    assert filters.sources.academic is True
    assert filters.time_range == "any"


def test_invalid_partial_leaves_state_unchanged(store):
    store.mark_searched(Category.ALL, True)
    with pytest.raises(ValueError):
        store.set_filters({"sources": {"rss": True}})
    with pytest.raises(ValueError):
        store.set_filters({"time_range": "lastDecade"})

    assert store.filters == DEFAULT_FILTERS
    assert store.is_searched(Category.ALL) is True


def test_reset_filters_restores_defaults(store):
    store.set_filters({"region": "FR", "ai_preferences": {"model": "fast"}})
    store.mark_searched(Category.AI, True)

    assert store.reset_filters() == DEFAULT_FILTERS
    assert store.is_searched(Category.AI) is False


def test_is_fresh_requires_searched_flag_and_matching_query_key(store):
    key = Query(text="solar power").dedupe_key()
    store.set(Category.ALL, _result(text="solar power"), query_key=key)
    assert store.is_fresh(Category.ALL, key) is False

    store.mark_searched(Category.ALL, True)
    assert store.is_fresh(Category.ALL, Query(text="  solar power ").dedupe_key()) is True
    assert store.is_fresh(Category.ALL, Query(text="wind power").dedupe_key()) is False

    store.set_filters({"region": "US"})
    assert store.is_fresh(Category.ALL, key) is False


def test_is_fresh_distinguishes_follow_up_and_deep_research(store):
    plain = Query(text="solar power")
    store.set(Category.ALL, _result(), query_key=plain.dedupe_key())
    store.mark_searched(Category.ALL, True)

    follow_up = Query(text="solar power", is_follow_up=True)
    deep = Query(text="solar power", deep_research=DeepResearchOptions())
    assert store.is_fresh(Category.ALL, plain.dedupe_key()) is True
    assert store.is_fresh(Category.ALL, follow_up.dedupe_key()) is False
    assert store.is_fresh(Category.ALL, deep.dedupe_key()) is False


def test_result_without_query_key_is_never_fresh(store):
    store.set(Category.ALL, _result())
    store.mark_searched(Category.ALL, True)
    assert store.is_fresh(Category.ALL, Query(text="solar power").dedupe_key()) is False


def test_clear_drops_result_but_keeps_searched_flag(store):
    key = Query(text="solar power").dedupe_key()
    store.set(Category.NEWS, _result(), query_key=key)
    store.mark_searched(Category.NEWS, True)

    store.clear(Category.NEWS)

    assert store.get(Category.NEWS) == CachedEntry(result=None, searched=True)
    assert store.is_fresh(Category.NEWS, key) is False


def test_current_query_and_active_category(store):
    store.set_current_query("tides")
    store.set_active_category("maps")
    assert store.current_query == "tides"
    assert store.active_category == Category.MAPS


class TestSessionStoreRegistry:
    def test_get_or_create_reuses_session_store(self):
        registry = SessionStoreRegistry()
        first = registry.get_or_create("alice")
        assert registry.get_or_create("alice") is first
        assert registry.get_or_create("bob") is not first
        assert len(registry) == 2

    def test_drop_removes_only_that_session(self):
        registry = SessionStoreRegistry()
        registry.get_or_create("alice").set_filters({"region": "US"})
        registry.get_or_create("bob")

        assert registry.drop("alice") is True
        assert registry.drop("alice") is False
        assert registry.get("alice") is None
        assert registry.get("bob") is not None
        assert registry.get_or_create("alice").filters == DEFAULT_FILTERS

    def test_clear_all(self):
        registry = SessionStoreRegistry()
        registry.get_or_create("alice")
        registry.clear_all()
        assert len(registry) == 0
