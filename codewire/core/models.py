"""
Data models for CodeWire.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

SOURCES = ('hn', 'devto', 'rss')

@dataclass
class Article:
    """
    Represents an article normalized from one of the feed sources.

    ``time`` is unix seconds for Hacker News items and the source's own
    date string for Dev.to and RSS entries.
    """
    id: str
    source: str
    title: str
    url: str
    score: int = 0
    comments: int = 0
    time: Union[int, str, None] = None
    by: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    hn_url: Optional[str] = None
    description: Optional[str] = None
    source_name: Optional[str] = None
    source_badge: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'source': self.source,
            'title': self.title,
            'url': self.url,
            'score': self.score,
            'comments': self.comments,
            'time': self.time,
            'by': self.by,
            'tags': list(self.tags),
        }
        # Optional keys are omitted when unset, matching the stored format
        if self.hn_url is not None:
            data['hnUrl'] = self.hn_url
        if self.description is not None:
            data['description'] = self.description
        if self.source_name is not None:
            data['sourceName'] = self.source_name
        if self.source_badge is not None:
            data['sourceBadge'] = self.source_badge
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        return cls(
            id=str(data['id']),
            source=data.get('source', 'rss'),
            title=data.get('title', ''),
            url=data.get('url', ''),
            score=int(data.get('score') or 0),
            comments=int(data.get('comments') or 0),
            time=data.get('time'),
            by=data.get('by'),
            tags=list(data.get('tags') or []),
            hn_url=data.get('hnUrl'),
            description=data.get('description'),
            source_name=data.get('sourceName'),
            source_badge=data.get('sourceBadge'),
        )


@dataclass
class Answer:
    """A reply to a question. Times are unix milliseconds."""
    id: str
    text: str
    by: str
    time: int
    votes: int = 0
    best: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'text': self.text,
            'votes': self.votes,
            'best': self.best,
            'by': self.by,
            'time': self.time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Answer":
        return cls(
            id=str(data['id']),
            text=data.get('text', ''),
            by=data.get('by', ''),
            time=int(data.get('time') or 0),
            votes=int(data.get('votes') or 0),
            best=bool(data.get('best', False)),
        )


@dataclass
class Question:
    """A Q&A board question with its answers and cached AI answer."""
    id: str
    title: str
    body: str
    by: str
    time: int
    tags: List[str] = field(default_factory=list)
    votes: int = 0
    answers: List[Answer] = field(default_factory=list)
    ai_answer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'body': self.body,
            'tags': list(self.tags),
            'votes': self.votes,
            'by': self.by,
            'time': self.time,
            'answers': [a.to_dict() for a in self.answers],
            'aiAnswer': self.ai_answer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            body=data.get('body', ''),
            by=data.get('by', ''),
            time=int(data.get('time') or 0),
            tags=list(data.get('tags') or []),
            votes=int(data.get('votes') or 0),
            answers=[Answer.from_dict(a) for a in data.get('answers') or []],
            ai_answer=data.get('aiAnswer'),
        )


@dataclass
class Repository:
    """A GitHub Trending row."""
    name: str
    desc: str = ""
    stars: str = ""
    lang: str = ""
    lc: str = "#63b3ed"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'desc': self.desc,
            'stars': self.stars,
            'lang': self.lang,
            'lc': self.lc,
        }
