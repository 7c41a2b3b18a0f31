"""
Bookmark persistence for CodeWire.
"""
import logging
from typing import Dict, List

from codewire.core.models import Article
from codewire.core.storage import KeyValueStore

logger = logging.getLogger(__name__)

BOOKMARKS_KEY = 'codewire_bookmarks'

class BookmarkStore:
    """
    Saved article snapshots keyed by article id.

    Saved copies are independent of later refreshes. Every change writes
    the whole list back to storage.
    """
    def __init__(self, storage: KeyValueStore, key: str = BOOKMARKS_KEY):
        self.storage = storage
        self.key = key
        self._items: Dict[str, Article] = self._load()

    def _load(self) -> Dict[str, Article]:
        data = self.storage.get_json(self.key)
        if data is None:
            return {}
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed bookmark record {self.key!r}")
            return {}

        items = {}
        try:
            for entry in data:
                article = Article.from_dict(entry)
                items[article.id] = article
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring malformed bookmark record {self.key!r}: {e}")
            return {}
        return items

    def _save(self):
        self.storage.set_json(self.key, [a.to_dict() for a in self._items.values()])

    def toggle(self, article: Article) -> bool:
        """
        Save the article, or remove it if already saved.

        Args:
            article: The article to toggle

        Returns:
            True if the article is now bookmarked
        """
        if article.id in self._items:
            del self._items[article.id]
            saved = False
        else:
            self._items[article.id] = article
            saved = True
        self._save()
        logger.debug(f"Bookmark {article.id} {'added' if saved else 'removed'}")
        return saved

    def contains(self, article_id: str) -> bool:
        return article_id in self._items

    def list(self) -> List[Article]:
        return list(self._items.values())

    def clear(self):
        self._items = {}
        self._save()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, article_id: str) -> bool:
        return self.contains(article_id)
