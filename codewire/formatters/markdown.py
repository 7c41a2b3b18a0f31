"""
Markdown formatting utilities for CodeWire.
"""
import logging
import time
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Dict, List, Optional, Union

from codewire.core.feed import FeedPage
from codewire.core.models import Article, Question, Repository
from codewire.core.translations import TranslationCache

# Configure logging
logger = logging.getLogger(__name__)

SOURCE_LABELS = {'hn': 'HN', 'devto': 'DEV.TO', 'rss': 'RSS'}

def time_ago(value: Union[int, float, str, None], now: Optional[float] = None) -> str:
    """
    Render a timestamp as a short relative time.

    Args:
        value: Unix seconds, or an ISO 8601 / RFC 822 date string
        now: Reference time in unix seconds, defaults to the current time

    Returns:
        Text such as "5m ago", or "" if the value cannot be read
    """
    if not value:
        return ""
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        seconds = _parse_date(value)
        if seconds is None:
            return ""

    elapsed = int((now if now is not None else time.time()) - seconds)
    if elapsed < 60:
        return f"{max(elapsed, 0)}s ago"
    if elapsed < 3600:
        return f"{elapsed // 60}m ago"
    if elapsed < 86400:
        return f"{elapsed // 3600}h ago"
    return f"{elapsed // 86400}d ago"


def _parse_date(value: str) -> Optional[float]:
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).timestamp()
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text).timestamp()
    except (TypeError, ValueError):
        return None


class MarkdownFormatter:
    """
    Formats feed, bookmarks and Q&A content as Markdown.
    """
    def __init__(self, translations: Optional[TranslationCache] = None):
        """
        Initialize the MarkdownFormatter.

        Args:
            translations: Cache whose visible entries are shown under article titles
        """
        self.translations = translations

    def format_article(self, article: Article, saved: bool = False) -> str:
        label = SOURCE_LABELS.get(article.source, article.source.upper())
        if article.source == 'rss' and article.source_badge:
            label = article.source_badge

        meta = [f"`{label}`"]
        when = time_ago(article.time)
        if when:
            meta.append(when)
        meta.extend(f"#{t}" for t in article.tags[:3])

        lines = [f"- {'★ ' if saved else ''}[{article.title}]({article.url})", f"  {' · '.join(meta)}"]

        if self.translations is not None:
            translation = self.translations.get(article.id)
            if translation is not None and translation.visible:
                lines.append(f"  > {translation.title}")
                if translation.summary:
                    lines.append(f"  > {translation.summary}")

        if article.source == 'hn':
            stats = f"▲ {article.score} · {article.comments} comments"
            if article.by:
                stats += f" · by {article.by}"
            if article.hn_url:
                stats += f" · [discuss]({article.hn_url})"
        elif article.source == 'devto':
            stats = f"♥ {article.score} · {article.comments} comments"
        else:
            stats = article.source_name or ""
        if stats:
            lines.append(f"  {stats}")
        lines.append(f"  id: `{article.id}`")
        return "\n".join(lines)

    def format_feed(self, page: FeedPage, bookmarked: Optional[set] = None) -> str:
        """
        Format one page of the filtered feed.

        Args:
            page: Filtered, paginated articles
            bookmarked: Ids of saved articles, marked with a star

        Returns:
            Markdown text
        """
        bookmarked = bookmarked or set()
        lines = [f"## Latest articles ({len(page.items)} of {page.total})", ""]
        if not page.items:
            lines.append("_No articles match the current filters._")
        for article in page.items:
            lines.append(self.format_article(article, article.id in bookmarked))
        if page.has_more:
            lines.extend(["", "_More articles available: use --pages to show more._"])
        return "\n".join(lines)

    def format_ticker(self, ticker: List[Article]) -> str:
        if not ticker:
            return ""
        return "**HOT** " + " · ".join(a.title for a in ticker)

    def format_repos(self, repos: List[Repository]) -> str:
        lines = ["## GitHub trending", ""]
        for repo in repos:
            details = " · ".join(part for part in (repo.lang, f"⭐ {repo.stars}" if repo.stars else "") if part)
            lines.append(f"- [{repo.name}]({repo.url}): {repo.desc}" + (f" ({details})" if details else ""))
        return "\n".join(lines)

    def format_stats(self, stats: Dict[str, int]) -> str:
        return (f"**Feed stats**: {stats['total']} total · {stats['sources']} sources · "
                f"HN {stats['hn']} · DEV.TO {stats['devto']} · RSS {stats['rss']}")

    def format_bookmarks(self, articles: List[Article]) -> str:
        lines = [f"## Bookmarks ({len(articles)})", ""]
        if not articles:
            lines.append("_No bookmarks yet._")
        for article in articles:
            lines.append(self.format_article(article, saved=True))
        return "\n".join(lines)

    def format_question(self, question: Question, detail: bool = False) -> str:
        tags = " ".join(f"#{t}" for t in question.tags)
        lines = [
            f"### [{question.votes:+d}] {question.title}",
            f"{tags} · {question.by} · {time_ago(question.time / 1000)} · "
            f"{len(question.answers)} answers · id: `{question.id}`".lstrip(" ·"),
        ]
        if not detail:
            return "\n".join(lines)

        if question.body:
            lines.extend(["", question.body])
        if question.ai_answer:
            lines.extend(["", "**AI answer**", "", question.ai_answer])
        for answer in question.answers:
            badge = " ✓ BEST" if answer.best else ""
            lines.extend([
                "",
                f"- **{answer.by}** · {time_ago(answer.time / 1000)} · ▲ {answer.votes}{badge} · id: `{answer.id}`",
                f"  {answer.text}",
            ])
        return "\n".join(lines)

    def format_questions(self, questions: List[Question], view: str = 'all') -> str:
        lines = [f"## Questions: {view} ({len(questions)})", ""]
        if not questions:
            lines.append("_No questions._")
        for question in questions:
            lines.extend([self.format_question(question), ""])
        return "\n".join(lines).rstrip() + "\n"
