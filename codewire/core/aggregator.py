"""
Feed aggregation for CodeWire.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from codewire.config import get_config
from codewire.core.models import Article, Repository
from codewire.fetchers.devto import DevToFetcher
from codewire.fetchers.hackernews import HackerNewsFetcher
from codewire.fetchers.rss import fetch_all_feeds
from codewire.fetchers.trending import FALLBACK_REPOS, default_trending_source
from codewire.utils.http import HttpFetcher

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]
Adapter = Callable[[], Awaitable[Any]]

PROGRESS_STARTED = 5
PROGRESS_FETCHED = 75
PROGRESS_COMPLETE = 100

@dataclass
class AggregationResult:
    """
    Output of one aggregation cycle.
    """
    articles: List[Article]
    ticker: List[Article]
    repos: List[Repository]
    errors: Dict[str, str] = field(default_factory=dict)


def by_score(articles: List[Article]) -> List[Article]:
    return sorted(articles, key=lambda a: a.score, reverse=True)


def merge_articles(hn: List[Article], devto: List[Article], rss: List[Article]) -> List[Article]:
    """
    Concatenate the source groups in fixed order.

    Hacker News and Dev.to are each sorted by score, RSS keeps fetch order.
    The result is never re-sorted as a whole.
    """
    return by_score(hn) + by_score(devto) + list(rss)


class Aggregator:
    """
    Runs every source adapter concurrently and merges the results.

    A failing adapter counts as zero results; GitHub Trending falls back to
    a built-in repository list.
    """
    def __init__(self, adapters: Optional[Dict[str, Adapter]] = None, ticker_size: Optional[int] = None):
        """
        Initialize the Aggregator.

        Args:
            adapters: Zero-argument coroutines keyed by 'hn', 'devto', 'rss' and
                'trending'. Missing keys use the network adapters.
            ticker_size: Number of Hacker News stories in the ticker
        """
        self.adapters = adapters or {}
        self.ticker_size = ticker_size if ticker_size is not None else get_config('feed.ticker_size', 20)

    def _default_adapters(self, http: HttpFetcher) -> Dict[str, Adapter]:
        return {
            'hn': HackerNewsFetcher(http).fetch,
            'devto': DevToFetcher(http).fetch,
            'rss': lambda: fetch_all_feeds(http),
            'trending': default_trending_source(http).fetch,
        }

    async def run(self, progress: Optional[ProgressCallback] = None) -> AggregationResult:
        """
        Run one aggregation cycle.

        Args:
            progress: Called with (percent, phase) as the cycle advances

        Returns:
            The merged feed, ticker and trending repositories
        """
        def report(percent: int, phase: str):
            if progress is not None:
                progress(percent, phase)

        report(PROGRESS_STARTED, "started")

        http = HttpFetcher()
        try:
            adapters = self._default_adapters(http)
            adapters.update(self.adapters)
            names = ['hn', 'devto', 'rss', 'trending']
            results = await asyncio.gather(*(adapters[name]() for name in names), return_exceptions=True)
        finally:
            await http.close()

        report(PROGRESS_FETCHED, "fetched")

        settled = {}
        errors = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning(f"Source {name} failed: {result}")
                errors[name] = str(result) or result.__class__.__name__
                settled[name] = []
            else:
                settled[name] = result or []

        hn = by_score(settled['hn'])
        articles = merge_articles(hn, settled['devto'], settled['rss'])
        repos = settled['trending'] or list(FALLBACK_REPOS)

        logger.info(
            f"Aggregated {len(articles)} articles "
            f"(hn={len(settled['hn'])}, devto={len(settled['devto'])}, rss={len(settled['rss'])})"
        )
        report(PROGRESS_COMPLETE, "complete")

        return AggregationResult(
            articles=articles,
            ticker=hn[:self.ticker_size],
            repos=repos,
            errors=errors,
        )
