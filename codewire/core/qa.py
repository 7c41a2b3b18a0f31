"""
Q&A board persistence for CodeWire.
"""
import logging
import re
import time
import uuid
from typing import List, Optional

from codewire.core.models import Answer, Question
from codewire.core.storage import KeyValueStore
from codewire.errors import ValidationError

logger = logging.getLogger(__name__)

QA_KEY = 'codewire_qa'
DEFAULT_AUTHOR = 'you'
VIEWS = ('all', 'unanswered', 'hot')

_TAG_SPLIT = re.compile(r'[\s,#]+')

def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{_now_ms()}_{uuid.uuid4().hex[:6]}"


def parse_tags(raw: Optional[str]) -> List[str]:
    """Split tag input such as ``"#react, vue  go"`` into tag names."""
    return [t for t in _TAG_SPLIT.split((raw or '').strip()) if t]


def default_questions() -> List[Question]:
    """Sample questions shown on a fresh board."""
    now = _now_ms()
    return [
        Question(
            id='q1',
            title='React or Vue: which should I pick for a new project in 2025?',
            body=('I am building a B2B SaaS on my own. I would like opinions on ecosystem, '
                  'hiring market, learning curve and long-term outlook.'),
            tags=['javascript', 'react', 'vue'],
            votes=12,
            by='taro_dev',
            time=now - 3600000 * 2,
            answers=[
                Answer(
                    id='a1',
                    text=('As of 2025 React has roughly three times as many job postings as Vue. '
                          'For a SaaS, React with Next.js is the safe choice.'),
                    votes=8,
                    best=True,
                    by='senior_eng',
                    time=now - 3600000,
                ),
            ],
        ),
        Question(
            id='q2',
            title='Is the standard library enough for writing an HTTP server in Go?',
            body='What are the differences between using only net/http and using Gin or Echo?',
            tags=['go', 'web', 'backend'],
            votes=7,
            by='go_beginner',
            time=now - 86400000,
        ),
    ]


class QAStore:
    """
    Questions with nested answers and a cached AI answer.

    The full collection is written back to storage after every mutation.
    """
    def __init__(self, storage: KeyValueStore, key: str = QA_KEY):
        self.storage = storage
        self.key = key
        self._questions: List[Question] = self._load()

    def _load(self) -> List[Question]:
        data = self.storage.get_json(self.key)
        if data is None:
            return default_questions()
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed Q&A record {self.key!r}")
            return default_questions()
        try:
            return [Question.from_dict(q) for q in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring malformed Q&A record {self.key!r}: {e}")
            return default_questions()

    def _save(self):
        self.storage.set_json(self.key, [q.to_dict() for q in self._questions])

    def get(self, question_id: str) -> Optional[Question]:
        for question in self._questions:
            if question.id == question_id:
                return question
        return None

    def list(self, view: str = 'all') -> List[Question]:
        """
        List questions for a board view.

        Args:
            view: 'all' (newest first), 'unanswered' (no answers, newest first)
                or 'hot' (most votes first)

        Returns:
            The questions for the view
        """
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        questions = self._questions
        if view == 'unanswered':
            questions = [q for q in questions if not q.answers]
        if view == 'hot':
            return sorted(questions, key=lambda q: q.votes, reverse=True)
        return sorted(questions, key=lambda q: q.time, reverse=True)

    def create(self, title: str, body: str = '', tags_raw: str = '', by: str = DEFAULT_AUTHOR) -> Question:
        """
        Post a new question at the top of the board.

        Args:
            title: Question title; required
            body: Optional details
            tags_raw: Tags separated by whitespace, commas or '#'
            by: Author name

        Returns:
            The new question

        Raises:
            ValidationError: If the title is empty after trimming
        """
        title = (title or '').strip()
        if not title:
            raise ValidationError("Please enter a title")

        question = Question(
            id=_new_id('q'),
            title=title,
            body=(body or '').strip(),
            tags=parse_tags(tags_raw),
            votes=0,
            by=by,
            time=_now_ms(),
            answers=[],
            ai_answer=None,
        )
        self._questions.insert(0, question)
        self._save()
        logger.info(f"Question {question.id} posted")
        return question

    def vote(self, question_id: str, delta: int) -> Optional[Question]:
        """Adjust a question's votes by ``delta``; there is no floor."""
        question = self.get(question_id)
        if question is None:
            logger.warning(f"Vote for unknown question {question_id}")
            return None
        question.votes += delta
        self._save()
        return question

    def answer(self, question_id: str, text: str, by: str = DEFAULT_AUTHOR) -> Optional[Answer]:
        """
        Append an answer to a question.

        Returns:
            The new answer, or None if the text is blank or the question is unknown
        """
        if not (text or '').strip():
            return None
        question = self.get(question_id)
        if question is None:
            logger.warning(f"Answer for unknown question {question_id}")
            return None

        answer = Answer(id=_new_id('a'), text=text, votes=0, best=False, by=by, time=_now_ms())
        question.answers.append(answer)
        self._save()
        return answer

    def mark_best(self, question_id: str, answer_id: str) -> Optional[Answer]:
        """
        Mark one answer as the best; any previous best answer is unmarked.

        Returns:
            The marked answer, or None if the question or answer is unknown
        """
        question = self.get(question_id)
        if question is None:
            return None
        if not any(a.id == answer_id for a in question.answers):
            return None

        chosen = None
        for answer in question.answers:
            answer.best = answer.id == answer_id
            if answer.best:
                chosen = answer
        self._save()
        return chosen

    def get_ai_answer(self, question_id: str) -> Optional[str]:
        question = self.get(question_id)
        return question.ai_answer if question else None

    def set_ai_answer(self, question_id: str, text: str) -> Optional[Question]:
        """Store (or overwrite) the cached AI answer for a question."""
        question = self.get(question_id)
        if question is None:
            return None
        question.ai_answer = text
        self._save()
        return question
