"""Tests for the command-line interface, using a throwaway database."""

import pytest

from codewire.cli import main, parse_args
from codewire.core.state import AI_ANSWER_PLACEHOLDER


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "codewire.db")


def test_parse_feed_args():
    args = parse_args(["feed", "--source", "hn", "--tag", "rust", "--tag", "go", "--pages", "2"])
    assert args.command == "feed"
    assert args.source == "hn"
    assert args.tag == ["rust", "go"]
    assert args.pages == 2


def test_parse_rejects_unknown_source():
    with pytest.raises(SystemExit):
        parse_args(["feed", "--source", "reddit"])


def test_qa_list(db, capsys):
    assert main(["--db", db, "qa", "list", "--view", "hot"]) == 0
    out = capsys.readouterr().out
    assert "Questions: hot (2)" in out
    assert "React or Vue" in out


def test_qa_ask_then_show(db, capsys):
    assert main(["--db", db, "qa", "ask", "Is asyncio fast?", "--tags", "#python"]) == 0
    question_id = capsys.readouterr().out.strip().rsplit(" ", 1)[-1]

    assert main(["--db", db, "qa", "show", question_id]) == 0
    out = capsys.readouterr().out
    assert "Is asyncio fast?" in out
    assert "#python" in out


def test_qa_ask_empty_title(db, capsys):
    assert main(["--db", db, "qa", "ask", "  "]) == 1
    assert "Please enter a title" in capsys.readouterr().err


def test_qa_vote_and_answer(db, capsys):
    assert main(["--db", db, "qa", "vote", "q2", "--down"]) == 0
    assert "6 votes" in capsys.readouterr().out

    assert main(["--db", db, "qa", "answer", "q2", "net/http is enough"]) == 0
    assert "Answer posted" in capsys.readouterr().out

    assert main(["--db", db, "qa", "answer", "q2", "   "]) == 1


def test_qa_unknown_question(db, capsys):
    assert main(["--db", db, "qa", "vote", "nope"]) == 1
    assert "Unknown question" in capsys.readouterr().err


def test_qa_best_unknown_answer(db):
    assert main(["--db", db, "qa", "best", "q1", "nope"]) == 1


def test_qa_ai_without_key(db, capsys):
    assert main(["--db", db, "qa", "ai", "q2"]) == 0
    assert AI_ANSWER_PLACEHOLDER in capsys.readouterr().out


def test_bookmarks_empty(db, capsys):
    assert main(["--db", db, "bookmarks"]) == 0
    assert "No bookmarks yet" in capsys.readouterr().out
