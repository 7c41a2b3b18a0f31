"""
Transient translation cache for CodeWire.
"""
from dataclasses import dataclass
from typing import Dict, Optional

@dataclass
class Translation:
    title: str
    summary: str = ""
    visible: bool = True


class TranslationCache:
    """
    Translations keyed by article id, kept in memory only.

    Once an entry exists, toggling flips its visibility instead of
    translating again. ``clear`` evicts everything.
    """
    def __init__(self):
        self._entries: Dict[str, Translation] = {}

    def get(self, article_id: str) -> Optional[Translation]:
        return self._entries.get(article_id)

    def put(self, article_id: str, title: str, summary: str = "") -> Translation:
        entry = Translation(title=title, summary=summary, visible=True)
        self._entries[article_id] = entry
        return entry

    def toggle(self, article_id: str) -> Optional[Translation]:
        """
        Flip visibility of a cached translation.

        Returns:
            The entry, or None if the article has not been translated
        """
        entry = self._entries.get(article_id)
        if entry is not None:
            entry.visible = not entry.visible
        return entry

    def clear(self):
        self._entries.clear()

    def __contains__(self, article_id: str) -> bool:
        return article_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
