"""
Application state for CodeWire.
"""
import logging
from typing import List, Optional, Union

from codewire.ai.proxy import LanguageModelClient
from codewire.core.aggregator import AggregationResult, Aggregator, ProgressCallback
from codewire.core.bookmarks import BookmarkStore
from codewire.core.feed import FeedPage, FeedView, feed_stats
from codewire.core.models import Article, Question, Repository
from codewire.core.qa import QAStore
from codewire.core.storage import KeyValueStore
from codewire.core.translations import Translation, TranslationCache
from codewire.errors import CodeWireError
from codewire.fetchers.trending import FALLBACK_REPOS

logger = logging.getLogger(__name__)

PAGES = ('feed', 'qa', 'bookmarks')
TRANSLATION_PLACEHOLDER = "Set an API key to enable translation"
AI_ANSWER_PLACEHOLDER = "Set an API key to get an AI answer."

class AppState:
    """
    Single owner of the feed, filters, bookmarks, Q&A board and caches.

    All mutations go through the methods below. Each refresh takes a
    generation number; a cycle that finishes after a newer one has been
    applied is discarded.
    """
    def __init__(self, storage: KeyValueStore, aggregator: Optional[Aggregator] = None,
                 llm: Optional[LanguageModelClient] = None):
        self.storage = storage
        self.aggregator = aggregator or Aggregator()
        self.llm = llm or LanguageModelClient()

        self.page = 'feed'
        self.articles: List[Article] = []
        self.ticker: List[Article] = []
        self.repos: List[Repository] = list(FALLBACK_REPOS)
        self.view = FeedView()
        self.progress = 0
        self.loading = False

        self.bookmarks = BookmarkStore(storage)
        self.qa = QAStore(storage)
        self.translations = TranslationCache()

        self._generation = 0
        self._applied_generation = 0

    async def refresh(self, progress: Optional[ProgressCallback] = None) -> bool:
        """
        Run an aggregation cycle and replace the current feed.

        Args:
            progress: Extra progress callback, e.g. for a progress bar

        Returns:
            True if the result was applied, False if a newer cycle already had been
        """
        self._generation += 1
        generation = self._generation
        self.loading = True

        def on_progress(percent: int, phase: str):
            if generation == self._generation:
                self.progress = max(self.progress, percent)
            if progress is not None:
                progress(percent, phase)

        self.progress = 0
        try:
            result = await self.aggregator.run(progress=on_progress)
        finally:
            if generation == self._generation:
                self.loading = False

        return self._apply(generation, result)

    def _apply(self, generation: int, result: AggregationResult) -> bool:
        if generation <= self._applied_generation:
            logger.info(f"Discarding stale refresh {generation} (applied {self._applied_generation})")
            return False

        self._applied_generation = generation
        self.articles = result.articles
        self.ticker = result.ticker
        self.repos = result.repos
        self.view.reset()
        return True

    def navigate(self, page: str):
        """Switch page; leaving the feed evicts cached translations."""
        if page not in PAGES:
            raise ValueError(f"Unknown page: {page}")
        if self.page == 'feed' and page != 'feed':
            self.translations.clear()
        self.page = page

    # Feed

    def set_source_filter(self, source: str):
        self.view.set_source(source)

    def toggle_tag(self, tag: str) -> bool:
        return self.view.toggle_tag(tag)

    def set_tags(self, tags):
        self.view.set_tags(tags)

    def load_more(self):
        self.view.load_more()

    def current_page(self) -> FeedPage:
        return self.view.page(self.articles)

    def stats(self):
        return feed_stats(self.articles)

    def find_article(self, article_id: str) -> Optional[Article]:
        for article in self.articles:
            if article.id == article_id:
                return article
        for article in self.bookmarks.list():
            if article.id == article_id:
                return article
        return None

    # Bookmarks

    def toggle_bookmark(self, article: Union[Article, str]) -> bool:
        """
        Toggle a bookmark by article or article id.

        Raises:
            KeyError: If an id is given that matches no known article
        """
        if isinstance(article, str):
            found = self.find_article(article)
            if found is None:
                raise KeyError(article)
            article = found
        return self.bookmarks.toggle(article)

    # AI features

    async def translate_article(self, article: Article) -> Translation:
        """
        Show the translation for an article, fetching it on first use.

        A cached translation is toggled between visible and hidden without
        another request. Failures are cached as a placeholder entry.
        """
        cached = self.translations.toggle(article.id)
        if cached is not None:
            return cached

        try:
            result = await self.llm.translate(article.title, article.description)
        except CodeWireError as e:
            logger.warning(f"Translation of {article.id} failed: {e}")
            return self.translations.put(article.id, TRANSLATION_PLACEHOLDER)
        return self.translations.put(article.id, result['title'], result['summary'])

    async def ask_ai(self, question_id: str, regenerate: bool = False) -> str:
        """
        Get the AI answer for a question.

        The cached answer is returned unless ``regenerate`` is set. New
        answers are persisted with the question; placeholders are not.

        Raises:
            KeyError: If the question does not exist
        """
        question: Optional[Question] = self.qa.get(question_id)
        if question is None:
            raise KeyError(question_id)
        if question.ai_answer and not regenerate:
            return question.ai_answer

        try:
            answer = await self.llm.ask_ai(question.title, question.body, question.tags)
        except CodeWireError as e:
            logger.warning(f"AI answer for {question_id} failed: {e}")
            return AI_ANSWER_PLACEHOLDER

        if not answer:
            return AI_ANSWER_PLACEHOLDER
        self.qa.set_ai_answer(question_id, answer)
        return answer

    async def close(self):
        await self.llm.close()
