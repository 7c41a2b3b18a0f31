"""
GitHub Trending sources for CodeWire.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional

from bs4 import BeautifulSoup

from codewire.config import get_config
from codewire.core.models import Repository
from codewire.errors import UpstreamError
from codewire.utils.http import HttpFetcher

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_COLOR = '#63b3ed'

FALLBACK_REPOS = [
    Repository(name='anthropics/claude-code', desc='Agentic coding tool', stars='42k+', lang='TypeScript', lc='#3178c6'),
    Repository(name='vercel/next.js', desc='The React Framework for the Web', stars='120k', lang='JavaScript', lc='#f7df1e'),
    Repository(name='microsoft/typescript', desc='TypeScript is JavaScript with syntax for types', stars='98k', lang='TypeScript', lc='#3178c6'),
    Repository(name='rust-lang/rust', desc='Empowering everyone to build reliable and efficient software', stars='96k', lang='Rust', lc='#dea584'),
    Repository(name='deepseek-ai/DeepSeek-V3', desc='DeepSeek-V3 technical report', stars='88k', lang='Python', lc='#3572a5'),
]

class TrendingSource(ABC):
    """
    Anything that can list trending repositories.

    The aggregator only depends on this interface, so the page scraper can
    be replaced by an API client or switched off.
    """
    @abstractmethod
    async def fetch(self) -> List[Repository]:
        """Return trending repositories, raising on failure or empty result."""


class StaticTrendingSource(TrendingSource):
    """Serves a fixed list; used when scraping is disabled."""
    def __init__(self, repos: Optional[List[Repository]] = None):
        self.repos = list(repos if repos is not None else FALLBACK_REPOS)

    async def fetch(self) -> List[Repository]:
        return list(self.repos)


class GitHubTrendingSource(TrendingSource):
    """
    Scrapes https://github.com/trending through the CORS-bridging proxy.

    Layout dependent: each repository is an ``article.Box-row``.
    """
    def __init__(self, http: HttpFetcher, limit: Optional[int] = None):
        self.http = http
        self.proxy_url = get_config('sources.proxy_url')
        self.trending_url = get_config('sources.trending_url')
        self.limit = limit if limit is not None else get_config('sources.trending_limit', 5)

    async def fetch(self) -> List[Repository]:
        data = await self.http.fetch_json(self.proxy_url, params={'url': self.trending_url})
        contents = data.get('contents') if isinstance(data, dict) else None
        if not contents:
            raise UpstreamError("Empty response for GitHub Trending")

        repos = self.parse(contents)
        if not repos:
            raise UpstreamError("No repositories found on GitHub Trending")
        logger.info(f"Fetched {len(repos)} trending repositories")
        return repos

    def parse(self, html: str) -> List[Repository]:
        """
        Extract repository rows from the trending page.

        Args:
            html: The page HTML

        Returns:
            Up to ``limit`` repositories; rows without a name are dropped
        """
        soup = BeautifulSoup(html, 'html.parser')
        repos = []
        for row in soup.select('article.Box-row')[:self.limit]:
            link = row.select_one('h2 a')
            name = (link.get('href') or '').lstrip('/') if link else ''
            if not name:
                continue

            desc = row.find('p')
            stars = row.select_one('a[href$="/stargazers"]')
            lang = row.select_one('[itemprop="programmingLanguage"]')

            repos.append(Repository(
                name=name,
                desc=desc.get_text(strip=True) if desc else '',
                stars=stars.get_text(strip=True) if stars else '',
                lang=lang.get_text(strip=True) if lang else '',
                lc=self._language_color(row),
            ))
        return repos

    @staticmethod
    def _language_color(row) -> str:
        swatch = row.select_one('.repo-language-color')
        if swatch is None:
            return DEFAULT_LANGUAGE_COLOR
        match = re.search(r'background(?:-color)?\s*:\s*([^;]+)', swatch.get('style') or '')
        return match.group(1).strip() if match else DEFAULT_LANGUAGE_COLOR


def default_trending_source(http: HttpFetcher) -> TrendingSource:
    if get_config('sources.trending_enabled', True):
        return GitHubTrendingSource(http)
    return StaticTrendingSource()
