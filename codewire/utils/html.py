"""
Markup helpers for CodeWire.
"""
import re
import warnings
from typing import Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

def strip_html(text: Optional[str]) -> str:
    """
    Remove HTML markup and collapse whitespace.

    Args:
        text: A string that may contain markup or entities

    Returns:
        Plain text
    """
    if not text:
        return ""
    if '<' not in text and '&' not in text:
        return re.sub(r'\s+', ' ', text).strip()

    with warnings.catch_warnings():
        # Short feed titles can look like file names or URLs to bs4
        warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(text, 'html.parser')
    return re.sub(r'\s+', ' ', soup.get_text()).strip()


def truncate(text: str, length: int) -> str:
    """Cut text to at most ``length`` characters."""
    return text[:length] if length >= 0 else text
