"""
CodeWire - Tech News Aggregator and Q&A Board

Merges Hacker News, Dev.to, tech-media RSS feeds and GitHub Trending into
one filterable feed, keeps bookmarks and a small Q&A board, and proxies
title translation and question answering to a language model.
"""

__version__ = "0.1.0"
