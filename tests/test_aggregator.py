"""Tests for feed aggregation."""

import pytest

from codewire.core.aggregator import Aggregator, merge_articles
from codewire.core.models import Repository
from codewire.errors import UpstreamError
from codewire.fetchers.trending import FALLBACK_REPOS


def _adapter(value):
    async def run():
        return value
    return run


def _failing(message="boom"):
    async def run():
        raise UpstreamError(message)
    return run


@pytest.fixture
def sources(make_article):
    hn = [make_article("hn_1", "hn", 5), make_article("hn_2", "hn", 20), make_article("hn_3", "hn", 1)]
    devto = [make_article("devto_1", "devto", 3), make_article("devto_2", "devto", 9)]
    rss = [make_article("r1", "rss"), make_article("r2", "rss")]
    return hn, devto, rss


def _aggregator(hn, devto, rss, trending=None, **kwargs):
    return Aggregator(adapters={
        'hn': hn if callable(hn) else _adapter(hn),
        'devto': devto if callable(devto) else _adapter(devto),
        'rss': rss if callable(rss) else _adapter(rss),
        'trending': trending if callable(trending) else _adapter(trending or []),
    }, **kwargs)


def test_merge_articles_orders_groups(sources):
    hn, devto, rss = sources
    merged = merge_articles(hn, devto, rss)
    assert [a.id for a in merged] == ["hn_2", "hn_1", "hn_3", "devto_2", "devto_1", "r1", "r2"]


def test_merge_never_sorts_globally(make_article):
    hn = [make_article("hn_1", "hn", 1)]
    devto = [make_article("devto_1", "devto", 500)]
    merged = merge_articles(hn, devto, [])
    assert [a.id for a in merged] == ["hn_1", "devto_1"]


@pytest.mark.asyncio
async def test_run_merges_all_sources(sources):
    hn, devto, rss = sources
    result = await _aggregator(hn, devto, rss).run()

    assert [a.id for a in result.articles] == ["hn_2", "hn_1", "hn_3", "devto_2", "devto_1", "r1", "r2"]
    assert result.errors == {}


@pytest.mark.asyncio
async def test_failed_source_contributes_nothing(sources):
    hn, devto, _ = sources
    result = await _aggregator(hn, devto, _failing("proxy down")).run()

    assert [a.id for a in result.articles] == ["hn_2", "hn_1", "hn_3", "devto_2", "devto_1"]
    assert "rss" in result.errors


@pytest.mark.asyncio
async def test_all_sources_failing_gives_empty_feed():
    result = await _aggregator(_failing(), _failing(), _failing(), _failing()).run()

    assert result.articles == []
    assert result.ticker == []
    assert result.repos == FALLBACK_REPOS
    assert set(result.errors) == {"hn", "devto", "rss", "trending"}


@pytest.mark.asyncio
async def test_ticker_is_top_hn_stories(make_article):
    hn = [make_article(f"hn_{i}", "hn", i) for i in range(30)]
    result = await _aggregator(hn, [], []).run()

    assert len(result.ticker) == 20
    assert result.ticker[0].id == "hn_29"
    assert all(a.source == "hn" for a in result.ticker)


@pytest.mark.asyncio
async def test_ticker_size_is_configurable(sources):
    hn, devto, rss = sources
    result = await _aggregator(hn, devto, rss, ticker_size=2).run()
    assert [a.id for a in result.ticker] == ["hn_2", "hn_1"]


@pytest.mark.asyncio
async def test_trending_repositories_used_when_available():
    repos = [Repository(name="octo/cat", desc="meow", stars="1k", lang="Go")]
    result = await _aggregator([], [], [], trending=repos).run()
    assert result.repos == repos


@pytest.mark.asyncio
async def test_trending_failure_uses_fallback_list():
    result = await _aggregator([], [], [], trending=_failing("layout changed")).run()
    assert [r.name for r in result.repos] == [r.name for r in FALLBACK_REPOS]


@pytest.mark.asyncio
async def test_progress_is_reported_in_order(sources):
    hn, devto, rss = sources
    seen = []
    await _aggregator(hn, devto, rss).run(progress=lambda percent, phase: seen.append((percent, phase)))

    assert seen == [(5, "started"), (75, "fetched"), (100, "complete")]


@pytest.mark.asyncio
async def test_progress_completes_even_when_sources_fail():
    seen = []
    await _aggregator(_failing(), _failing(), _failing()).run(progress=lambda p, _: seen.append(p))
    assert seen == [5, 75, 100]
