"""
Hacker News fetcher for CodeWire.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from codewire.config import get_config
from codewire.core.models import Article
from codewire.utils.http import HttpFetcher
from codewire.utils.tags import extract_tags

# Configure logging
logger = logging.getLogger(__name__)

HN_ITEM_PAGE = "https://news.ycombinator.com/item?id={id}"

class HackerNewsFetcher:
    """
    Fetches top stories from the Hacker News Firebase API.
    """
    name = "hn"

    def __init__(self, http: HttpFetcher, limit: Optional[int] = None):
        """
        Initialize the HackerNewsFetcher.

        Args:
            http: Shared HTTP helper
            limit: Number of top stories to fetch
        """
        self.http = http
        self.limit = limit if limit is not None else get_config('sources.hn_limit', 30)
        self.top_url = get_config('sources.hn_top_url')
        self.item_url = get_config('sources.hn_item_url')

    async def fetch(self) -> List[Article]:
        """
        Fetch the top story list, then each story concurrently.

        Items that fail to load or have no title (deleted stories, some job
        posts) are dropped.

        Returns:
            Articles in top-story order
        """
        ids = await self.http.fetch_json(self.top_url)
        if not isinstance(ids, list):
            logger.warning("Hacker News returned an unexpected top-story payload")
            return []

        ids = ids[:self.limit]
        results = await asyncio.gather(
            *(self.http.fetch_json(self.item_url.format(id=item_id)) for item_id in ids),
            return_exceptions=True
        )

        articles = []
        for item_id, item in zip(ids, results):
            if isinstance(item, BaseException):
                logger.debug(f"Skipping HN item {item_id}: {item}")
                continue
            if not isinstance(item, dict) or not item.get('title'):
                continue
            articles.append(self.to_article(item))

        logger.info(f"Fetched {len(articles)} Hacker News stories")
        return articles

    @staticmethod
    def to_article(item: Dict[str, Any]) -> Article:
        """Map a Hacker News item to an Article."""
        page = HN_ITEM_PAGE.format(id=item['id'])
        return Article(
            id=f"hn_{item['id']}",
            source='hn',
            title=item['title'],
            url=item.get('url') or page,
            hn_url=page,
            score=item.get('score') or 0,
            comments=item.get('descendants') or 0,
            time=item.get('time'),
            by=item.get('by'),
            tags=extract_tags(item['title']),
        )
