"""
Dev.to fetcher for CodeWire.
"""
import logging
from typing import Any, Dict, List, Optional

from codewire.config import get_config
from codewire.core.models import Article
from codewire.utils.http import HttpFetcher

logger = logging.getLogger(__name__)

class DevToFetcher:
    """
    Fetches the week's top articles from the Dev.to API.

    Tags come from the article's own ``tag_list``, not the keyword classifier.
    """
    name = "devto"

    def __init__(self, http: HttpFetcher, per_page: Optional[int] = None):
        self.http = http
        self.url = get_config('sources.devto_url')
        self.top_days = get_config('sources.devto_top_days', 7)
        self.per_page = per_page if per_page is not None else get_config('sources.devto_per_page', 20)

    async def fetch(self) -> List[Article]:
        data = await self.http.fetch_json(self.url, params={'top': self.top_days, 'per_page': self.per_page})
        if not isinstance(data, list):
            logger.warning("Dev.to returned an unexpected payload")
            return []

        articles = [self.to_article(item) for item in data if isinstance(item, dict) and 'id' in item]
        logger.info(f"Fetched {len(articles)} Dev.to articles")
        return articles

    @staticmethod
    def to_article(item: Dict[str, Any]) -> Article:
        """Map a Dev.to article to an Article."""
        tags = item.get('tag_list') or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(',') if t.strip()]
        return Article(
            id=f"devto_{item['id']}",
            source='devto',
            title=item.get('title', ''),
            url=item.get('url', ''),
            score=item.get('positive_reactions_count') or 0,
            comments=item.get('comments_count') or 0,
            time=item.get('published_at'),
            by=(item.get('user') or {}).get('username'),
            tags=list(tags),
            description=item.get('description'),
        )
