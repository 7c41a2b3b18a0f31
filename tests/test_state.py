"""Tests for the application state."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from codewire.core.aggregator import AggregationResult
from codewire.core.state import AI_ANSWER_PLACEHOLDER, TRANSLATION_PLACEHOLDER, AppState
from codewire.errors import MissingCredentialError, UpstreamError
from codewire.fetchers.trending import FALLBACK_REPOS


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.translate = AsyncMock(return_value={"title": "翻訳", "summary": "要約"})
    mock.ask_ai = AsyncMock(return_value="Use a context manager.")
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def aggregator():
    mock = MagicMock()
    mock.run = AsyncMock()
    return mock


@pytest.fixture
def state(storage, aggregator, llm):
    return AppState(storage, aggregator=aggregator, llm=llm)


def _result(articles, ticker=None, repos=None):
    return AggregationResult(articles=articles, ticker=ticker or [], repos=repos or list(FALLBACK_REPOS))


@pytest.mark.asyncio
async def test_refresh_applies_result(state, aggregator, make_article):
    articles = [make_article("hn_1", "hn", 5), make_article("devto_1", "devto", 2)]
    aggregator.run.return_value = _result(articles, ticker=articles[:1])

    assert await state.refresh() is True

    assert state.articles == articles
    assert state.ticker == articles[:1]
    assert state.stats()["total"] == 2
    assert state.loading is False


@pytest.mark.asyncio
async def test_progress_reaches_100_and_is_forwarded(state, aggregator, make_article):
    async def run(progress=None):
        for percent, phase in ((5, "started"), (75, "fetched"), (100, "complete")):
            progress(percent, phase)
        return _result([make_article("hn_1")])

    aggregator.run.side_effect = run
    seen = []

    await state.refresh(progress=lambda p, _: seen.append(p))

    assert seen == [5, 75, 100]
    assert state.progress == 100


@pytest.mark.asyncio
async def test_stale_refresh_is_discarded(state, aggregator, make_article):
    release_first = asyncio.Event()
    old = _result([make_article("hn_old")])
    new = _result([make_article("hn_new")])
    calls = []

    async def run(progress=None):
        calls.append(None)
        if len(calls) == 1:
            await release_first.wait()
            return old
        return new

    aggregator.run.side_effect = run

    first = asyncio.ensure_future(state.refresh())
    await asyncio.sleep(0)
    assert await state.refresh() is True
    release_first.set()
    assert await first is False

    assert [a.id for a in state.articles] == ["hn_new"]


@pytest.mark.asyncio
async def test_refresh_resets_display_count(state, aggregator, make_article):
    aggregator.run.return_value = _result([make_article(f"hn_{i}") for i in range(40)])
    await state.refresh()
    state.load_more()
    assert len(state.current_page().items) == 30

    await state.refresh()
    assert len(state.current_page().items) == 15


@pytest.mark.asyncio
async def test_filters(state, aggregator, make_article):
    aggregator.run.return_value = _result([
        make_article("hn_1", "hn", title="React compiler"),
        make_article("hn_2", "hn", title="Postgres"),
        make_article("devto_1", "devto", title="React hooks"),
    ])
    await state.refresh()

    state.set_source_filter("hn")
    assert [a.id for a in state.current_page().items] == ["hn_1", "hn_2"]
    assert state.toggle_tag("react") is True
    assert [a.id for a in state.current_page().items] == ["hn_1"]


@pytest.mark.asyncio
async def test_translation_is_cached_and_toggled(state, llm, make_article):
    article = make_article("hn_1", title="Hello")

    shown = await state.translate_article(article)
    assert shown.title == "翻訳"
    assert shown.visible

    hidden = await state.translate_article(article)
    assert hidden.visible is False
    shown_again = await state.translate_article(article)
    assert shown_again.visible is True

    llm.translate.assert_awaited_once_with("Hello", None)


@pytest.mark.asyncio
async def test_translation_failure_caches_placeholder(state, llm, make_article):
    llm.translate.side_effect = MissingCredentialError("ANTHROPIC_API_KEY is not configured")

    translation = await state.translate_article(make_article("hn_1"))

    assert translation.title == TRANSLATION_PLACEHOLDER
    assert "hn_1" in state.translations


@pytest.mark.asyncio
async def test_leaving_feed_clears_translations(state, make_article):
    await state.translate_article(make_article("hn_1"))
    state.navigate("qa")
    assert len(state.translations) == 0


@pytest.mark.asyncio
async def test_staying_on_feed_keeps_translations(state, make_article):
    await state.translate_article(make_article("hn_1"))
    state.navigate("feed")
    assert len(state.translations) == 1


def test_unknown_page(state):
    with pytest.raises(ValueError):
        state.navigate("settings")


@pytest.mark.asyncio
async def test_ask_ai_caches_answer(state, llm):
    question = state.qa.create("How do I close files?", tags_raw="python")

    assert await state.ask_ai(question.id) == "Use a context manager."
    assert await state.ask_ai(question.id) == "Use a context manager."

    llm.ask_ai.assert_awaited_once_with("How do I close files?", "", ["python"])
    assert state.qa.get_ai_answer(question.id) == "Use a context manager."


@pytest.mark.asyncio
async def test_ask_ai_regenerate(state, llm):
    question = state.qa.create("Tabs or spaces?")
    await state.ask_ai(question.id)

    llm.ask_ai.return_value = "Spaces."
    assert await state.ask_ai(question.id, regenerate=True) == "Spaces."
    assert state.qa.get_ai_answer(question.id) == "Spaces."


@pytest.mark.asyncio
async def test_ask_ai_failure_is_not_persisted(state, llm):
    llm.ask_ai.side_effect = UpstreamError("down")
    question = state.qa.create("Anyone there?")

    assert await state.ask_ai(question.id) == AI_ANSWER_PLACEHOLDER
    assert state.qa.get_ai_answer(question.id) is None


@pytest.mark.asyncio
async def test_ask_ai_empty_answer_is_not_persisted(state, llm):
    llm.ask_ai.return_value = ""
    question = state.qa.create("Anyone there?")

    assert await state.ask_ai(question.id) == AI_ANSWER_PLACEHOLDER
    assert state.qa.get_ai_answer(question.id) is None


@pytest.mark.asyncio
async def test_ask_ai_unknown_question(state):
    with pytest.raises(KeyError):
        await state.ask_ai("missing")


@pytest.mark.asyncio
async def test_toggle_bookmark_by_id(state, aggregator, make_article):
    aggregator.run.return_value = _result([make_article("hn_1")])
    await state.refresh()

    assert state.toggle_bookmark("hn_1") is True
    assert state.find_article("hn_1") is not None

    aggregator.run.return_value = _result([])
    await state.refresh()
    # still reachable through the saved copy
    assert state.find_article("hn_1").id == "hn_1"
    assert state.toggle_bookmark("hn_1") is False

    with pytest.raises(KeyError):
        state.toggle_bookmark("hn_1")


@pytest.mark.asyncio
async def test_close(state, llm):
    await state.close()
    llm.close.assert_awaited_once()
