"""
Command-line interface for CodeWire.
"""
import sys
import argparse
import logging
import asyncio
from typing import List, Optional

import tqdm
from dotenv import load_dotenv

from codewire.config import get_config
from codewire.core.feed import ALL_SOURCES
from codewire.core.models import SOURCES
from codewire.core.qa import VIEWS
from codewire.core.state import AppState
from codewire.core.storage import KeyValueStore
from codewire.errors import ValidationError
from codewire.formatters.markdown import MarkdownFormatter
from codewire.server import run_server
from codewire.utils.tags import TAG_NAMES

logger = logging.getLogger(__name__)

def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="CodeWire - tech news aggregator and Q&A board")
    parser.add_argument("--db", help="Path to the state database", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    feed = commands.add_parser("feed", help="Fetch and show the merged feed")
    feed.add_argument("--source", choices=(ALL_SOURCES,) + SOURCES, default=ALL_SOURCES)
    feed.add_argument("--tag", action="append", default=[], help=f"Tag filter, one of: {', '.join(TAG_NAMES)}")
    feed.add_argument("--pages", type=int, default=1, help="Number of pages to show")
    feed.add_argument("--translate", action="append", default=[], metavar="ARTICLE_ID",
                      help="Show a translation under this article")

    bookmarks = commands.add_parser("bookmarks", help="List saved articles")
    bookmarks.add_argument("--clear", action="store_true", help="Remove all bookmarks")

    bookmark = commands.add_parser("bookmark", help="Save or unsave an article")
    bookmark.add_argument("article_id")

    translate = commands.add_parser("translate", help="Translate an article title")
    translate.add_argument("article_id")

    qa = commands.add_parser("qa", help="Q&A board")
    qa_commands = qa.add_subparsers(dest="qa_command", required=True)

    qa_list = qa_commands.add_parser("list", help="List questions")
    qa_list.add_argument("--view", choices=VIEWS, default="all")

    qa_show = qa_commands.add_parser("show", help="Show a question with its answers")
    qa_show.add_argument("question_id")

    qa_ask = qa_commands.add_parser("ask", help="Post a question")
    qa_ask.add_argument("title")
    qa_ask.add_argument("--body", default="")
    qa_ask.add_argument("--tags", default="", help='e.g. "#react #vue"')

    qa_vote = qa_commands.add_parser("vote", help="Vote a question up or down")
    qa_vote.add_argument("question_id")
    qa_vote.add_argument("--down", action="store_true")

    qa_answer = qa_commands.add_parser("answer", help="Answer a question")
    qa_answer.add_argument("question_id")
    qa_answer.add_argument("text")

    qa_best = qa_commands.add_parser("best", help="Mark the best answer")
    qa_best.add_argument("question_id")
    qa_best.add_argument("answer_id")

    qa_ai = qa_commands.add_parser("ai", help="Get an AI answer")
    qa_ai.add_argument("question_id")
    qa_ai.add_argument("--regenerate", action="store_true")

    serve = commands.add_parser("serve", help="Run the AI proxy HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser.parse_args(argv)


async def refresh_with_progress(state: AppState):
    """Refresh the feed, drawing a progress bar on stderr."""
    with tqdm.tqdm(total=100, desc="Fetching feeds", file=sys.stderr, leave=False) as pbar:
        def on_progress(percent: int, phase: str):
            pbar.set_postfix_str(phase)
            pbar.update(percent - pbar.n)
        await state.refresh(progress=on_progress)


async def run_feed(state: AppState, formatter: MarkdownFormatter, args) -> int:
    await refresh_with_progress(state)
    state.set_source_filter(args.source)
    state.set_tags(args.tag)
    for _ in range(max(args.pages, 1) - 1):
        state.load_more()

    for article_id in args.translate:
        article = state.find_article(article_id)
        if article is None:
            logger.warning(f"Unknown article {article_id}")
            continue
        await state.translate_article(article)

    bookmarked = {a.id for a in state.bookmarks.list()}
    sections = [
        formatter.format_ticker(state.ticker),
        formatter.format_stats(state.stats()),
        formatter.format_feed(state.current_page(), bookmarked),
        formatter.format_repos(state.repos),
    ]
    print("\n\n".join(s for s in sections if s))
    return 0


async def run_qa(state: AppState, formatter: MarkdownFormatter, args) -> int:
    qa = state.qa
    if args.qa_command == "list":
        print(formatter.format_questions(qa.list(args.view), args.view))
        return 0

    if args.qa_command == "ask":
        try:
            question = qa.create(args.title, args.body, args.tags)
        except ValidationError as e:
            print(e, file=sys.stderr)
            return 1
        print(f"Question posted: {question.id}")
        return 0

    question = qa.get(args.question_id)
    if question is None:
        print(f"Unknown question {args.question_id}", file=sys.stderr)
        return 1

    if args.qa_command == "show":
        print(formatter.format_question(question, detail=True))
    elif args.qa_command == "vote":
        qa.vote(question.id, -1 if args.down else 1)
        print(f"{question.title}: {question.votes} votes")
    elif args.qa_command == "answer":
        answer = qa.answer(question.id, args.text)
        if answer is None:
            print("Answer text is empty", file=sys.stderr)
            return 1
        print(f"Answer posted: {answer.id}")
    elif args.qa_command == "best":
        if qa.mark_best(question.id, args.answer_id) is None:
            print(f"Unknown answer {args.answer_id}", file=sys.stderr)
            return 1
        print(f"Marked {args.answer_id} as best answer")
    elif args.qa_command == "ai":
        print(await state.ask_ai(question.id, regenerate=args.regenerate))
    return 0


async def async_main(args) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)

    storage = KeyValueStore(args.db or get_config('storage.path', 'codewire.db'))
    state = AppState(storage)
    formatter = MarkdownFormatter(translations=state.translations)

    try:
        if args.command == "feed":
            return await run_feed(state, formatter, args)

        if args.command == "bookmarks":
            state.navigate("bookmarks")
            if args.clear:
                state.bookmarks.clear()
            print(formatter.format_bookmarks(state.bookmarks.list()))
            return 0

        if args.command in ("bookmark", "translate"):
            if state.find_article(args.article_id) is None:
                await refresh_with_progress(state)
            article = state.find_article(args.article_id)
            if article is None:
                print(f"Unknown article {args.article_id}", file=sys.stderr)
                return 1
            if args.command == "bookmark":
                saved = state.toggle_bookmark(article)
                print(f"{'Saved' if saved else 'Removed'}: {article.title}")
            else:
                translation = await state.translate_article(article)
                print(translation.title)
                if translation.summary:
                    print(translation.summary)
            return 0

        if args.command == "qa":
            state.navigate("qa")
            return await run_qa(state, formatter, args)
    finally:
        await state.close()
        storage.close()

    return 0


def main(argv: Optional[List[str]] = None):
    """
    Entry point for the command-line script.
    """
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "serve":
        run_server(args.host, args.port)
        return 0

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"An error occurred: {e}")
        return 1

if __name__ == "__main__":
    sys.exit(main())
