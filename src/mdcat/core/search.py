"""Literal and pattern text search with line-numbered match spans"""

import logging
import re
from typing import Optional

from mdcat.core.models import Match


logger = logging.getLogger(__name__)


def compile_query(query: str, case_sensitive: bool = False, regex: bool = False) -> Optional[re.Pattern]:
    """Compile a search query; None for an empty query or invalid pattern syntax."""
    if not query:
        return None
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(query if regex else re.escape(query), flags)
    except re.error as e:
        logger.debug("Invalid search pattern %r: %s", query, e)
        return None


def find_matches(text: str, query: str, case_sensitive: bool = False, regex: bool = False) -> list[Match]:
    """Return non-overlapping matches of query in text, left to right.

    Zero-width matches advance the scan by one character.
    """
    pattern = compile_query(query, case_sensitive, regex)
    if pattern is None:
        return []

    matches: list[Match] = []
    pos = 0
    counted = 0     # offset up to which newlines have been counted
    line = 1
    while pos <= len(text):
        m = pattern.search(text, pos)
        if m is None:
            break
        start, end = m.span()
        line += text.count("\n", counted, start)
        counted = start
        matches.append(Match(start=start, end=end, line=line))
        pos = end + 1 if end == start else end
    return matches
