"""
Feed filtering and pagination for CodeWire.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from codewire.config import get_config
from codewire.core.models import SOURCES, Article

ALL_SOURCES = 'all'

def matches_tags(article: Article, tags: Iterable[str]) -> bool:
    """
    Loose tag match between an article and the active tag filters.

    An article matches when no tags are active, or when for some active tag
    one of the article's tags is a substring of it (or the other way round),
    or the tag appears in the lower-cased title.
    """
    tags = list(tags)
    if not tags:
        return True
    title = (article.title or '').lower()
    article_tags = article.tags or []
    return any(
        any(at in tag or tag in at for at in article_tags) or tag in title
        for tag in tags
    )


def filter_articles(articles: List[Article], source: str = ALL_SOURCES,
                    tags: Iterable[str] = ()) -> List[Article]:
    """
    Apply the source and tag filters.

    Args:
        articles: The aggregated feed
        source: 'all' or one of 'hn', 'devto', 'rss'
        tags: Active tag filters

    Returns:
        Matching articles in feed order
    """
    tags = list(tags)
    return [
        a for a in articles
        if (source == ALL_SOURCES or a.source == source) and matches_tags(a, tags)
    ]


def feed_stats(articles: List[Article]) -> Dict[str, int]:
    """Count articles per source."""
    stats = {'total': len(articles), 'sources': len(SOURCES)}
    for source in SOURCES:
        stats[source] = sum(1 for a in articles if a.source == source)
    return stats


@dataclass
class FeedPage:
    items: List[Article]
    has_more: bool
    total: int


@dataclass
class FeedView:
    """
    Filter state plus the number of articles currently shown.

    Changing a filter resets the view to its first page.
    """
    source: str = ALL_SOURCES
    tags: Set[str] = field(default_factory=set)
    page_size: int = 0
    display_count: int = 0

    def __post_init__(self):
        if not self.page_size:
            self.page_size = get_config('feed.page_size', 15)
        if not self.display_count:
            self.display_count = self.page_size

    def reset(self):
        self.display_count = self.page_size

    def set_source(self, source: str):
        if source != ALL_SOURCES and source not in SOURCES:
            raise ValueError(f"Unknown source filter: {source}")
        self.source = source
        self.reset()

    def toggle_tag(self, tag: str) -> bool:
        """
        Add or remove an active tag.

        Returns:
            True if the tag is now active
        """
        if tag in self.tags:
            self.tags.discard(tag)
            active = False
        else:
            self.tags.add(tag)
            active = True
        self.reset()
        return active

    def set_tags(self, tags: Optional[Iterable[str]]):
        self.tags = set(tags or ())
        self.reset()

    def load_more(self):
        self.display_count += self.page_size

    def page(self, articles: List[Article]) -> FeedPage:
        filtered = filter_articles(articles, self.source, self.tags)
        return FeedPage(
            items=filtered[:self.display_count],
            has_more=self.display_count < len(filtered),
            total=len(filtered),
        )
