"""
RSS/Atom feed fetcher for CodeWire.
"""
import asyncio
import hashlib
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable, List, Optional

from codewire.config import get_config
from codewire.core.models import Article
from codewire.errors import UpstreamError
from codewire.utils.html import strip_html, truncate
from codewire.utils.http import HttpFetcher
from codewire.utils.tags import extract_tags

# Configure logging
logger = logging.getLogger(__name__)

@dataclass
class FeedSource:
    """A configured feed: display name, short badge and feed URL."""
    name: str
    badge: str
    url: str


def configured_feeds() -> List[FeedSource]:
    return [FeedSource(**feed) for feed in get_config('rss_feeds', [])]


def stable_id(source: FeedSource, link: str, title: str = "") -> str:
    """
    Build an article id that survives refreshes.

    Args:
        source: The feed the entry came from
        link: The entry link
        title: Used in place of the link when the entry has none

    Returns:
        An id of the form ``rss_<badge>_<hash>``
    """
    key = link if link and link != '#' else title
    digest = hashlib.sha1(f"{source.url}|{key}".encode('utf-8')).hexdigest()[:12]
    return f"rss_{source.badge}_{digest}"


def _local(tag: str) -> str:
    """Strip an ``{namespace}`` prefix from an element tag."""
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ''


def _first(element: ET.Element, names: Iterable[str]) -> Optional[ET.Element]:
    wanted = set(names)
    for child in element.iter():
        if child is not element and _local(child.tag) in wanted:
            return child
    return None


def _text(element: Optional[ET.Element]) -> str:
    if element is None:
        return ""
    return "".join(element.itertext())


class RSSFetcher:
    """
    Fetches one RSS or Atom feed through the CORS-bridging proxy.

    The proxy answers with JSON whose ``contents`` field holds the raw feed.
    """
    name = "rss"

    def __init__(self, http: HttpFetcher, source: FeedSource, max_items: Optional[int] = None,
                 description_length: Optional[int] = None):
        """
        Initialize the RSSFetcher.

        Args:
            http: Shared HTTP helper
            source: The feed to fetch
            max_items: Number of entries to keep
            description_length: Maximum description length in characters
        """
        self.http = http
        self.source = source
        self.proxy_url = get_config('sources.proxy_url')
        self.max_items = max_items if max_items is not None else get_config('sources.rss_items', 8)
        self.description_length = (description_length if description_length is not None
                                   else get_config('sources.rss_description_length', 140))

    async def fetch(self) -> List[Article]:
        data = await self.http.fetch_json(self.proxy_url, params={'url': self.source.url})
        contents = data.get('contents') if isinstance(data, dict) else None
        if not contents:
            raise UpstreamError(f"Empty response for feed {self.source.name}")

        articles = self.parse(contents)
        logger.info(f"Fetched {len(articles)} entries from {self.source.name}")
        return articles

    def parse(self, xml_text: str) -> List[Article]:
        """
        Parse feed XML into Articles.

        Args:
            xml_text: RSS 2.0 or Atom document

        Returns:
            The first ``max_items`` entries, in document order
        """
        try:
            root = ET.fromstring(xml_text.strip().encode('utf-8'))
        except ET.ParseError as e:
            raise UpstreamError(f"Malformed feed {self.source.name}: {e}") from e

        entries = [el for el in root.iter() if _local(el.tag) in ('item', 'entry')]
        return [self._to_article(entry) for entry in entries[:self.max_items]]

    def _to_article(self, entry: ET.Element) -> Article:
        title = strip_html(_text(_first(entry, ['title'])))

        link_el = _first(entry, ['link'])
        link = ""
        if link_el is not None:
            link = (link_el.text or "").strip() or (link_el.get('href') or "").strip()
        link = link or '#'

        date = _text(_first(entry, ['pubDate', 'published', 'updated'])).strip()
        description = truncate(
            strip_html(_text(_first(entry, ['description', 'summary']))),
            self.description_length
        )

        return Article(
            id=stable_id(self.source, link, title),
            source='rss',
            source_name=self.source.name,
            source_badge=self.source.badge,
            title=title,
            url=link,
            time=date,
            tags=extract_tags(title),
            description=description,
            score=0,
            comments=0,
            by=self.source.name,
        )


async def fetch_all_feeds(http: HttpFetcher, sources: Optional[List[FeedSource]] = None) -> List[Article]:
    """
    Fetch every configured feed concurrently.

    A failing feed contributes nothing; the others are unaffected.

    Returns:
        Entries grouped by feed, in configuration order
    """
    sources = sources if sources is not None else configured_feeds()
    results = await asyncio.gather(
        *(RSSFetcher(http, source).fetch() for source in sources),
        return_exceptions=True
    )

    articles = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.warning(f"Feed {source.name} failed: {result}")
            continue
        articles.extend(result)
    return articles
