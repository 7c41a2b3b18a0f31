"""Shared fixtures for CodeWire tests."""

import pytest

from codewire.core.models import Article
from codewire.core.storage import KeyValueStore


@pytest.fixture
def storage():
    store = KeyValueStore(":memory:")
    yield store
    store.close()


@pytest.fixture(autouse=True)
def _no_api_key(monkeypatch):
    """Tests never see a real credential unless they set one."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.fixture
def make_article():
    def _factory(id, source="hn", score=0, title=None, tags=None, **kwargs):
        return Article(
            id=id,
            source=source,
            title=title if title is not None else f"Article {id}",
            url=f"https://example.com/{id}",
            score=score,
            tags=tags or [],
            **kwargs,
        )

    return _factory
