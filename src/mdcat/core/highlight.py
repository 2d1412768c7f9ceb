"""Search hit annotation over a rendered BeautifulSoup tree"""

import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from mdcat.core.models import SearchState
from mdcat.core.search import compile_query


logger = logging.getLogger(__name__)

MARK_CLASS = "search-highlight"
CURRENT_CLASS = "current"


def _text_leaves(root: Tag) -> list[NavigableString]:
    """Plain text leaves of root in document order, excluding anything under <svg>."""
    leaves = []
    for s in root.find_all(string=True):
        # comments, doctypes, script and style bodies are NavigableString subclasses
        if type(s) is not NavigableString:
            continue
        if s.find_parent("svg") is not None:
            continue
        leaves.append(s)
    return leaves


def highlight_tree(
    soup: BeautifulSoup,
    query: str,
    case_sensitive: bool = False,
    current_index: int = 0,
    root: Tag = None,
    regex: bool = False,
    ) -> int:
    """Wrap every match in a <mark> and flag the one at current_index; return the match count.

    Matches are counted in document order across text leaves. Zero-width
    matches are not wrapped.
    """
    pattern = compile_query(query, case_sensitive, regex)
    if pattern is None:
        return 0
    root = root if root is not None else soup

    count = 0
    for leaf in _text_leaves(root):
        text = str(leaf)
        spans = [m.span() for m in pattern.finditer(text) if m.end() > m.start()]
        if not spans:
            continue

        pieces = []
        last = 0
        for start, end in spans:
            if start > last:
                pieces.append(NavigableString(text[last:start]))
            cls = f"{MARK_CLASS} {CURRENT_CLASS}" if count == current_index else MARK_CLASS
            mark = soup.new_tag("mark", attrs={"class": cls})
            mark.string = text[start:end]
            pieces.append(mark)
            count += 1
            last = end
        if last < len(text):
            pieces.append(NavigableString(text[last:]))
        leaf.replace_with(*pieces)
    return count


def clear_highlights(root: Tag) -> int:
    """Unwrap all search marks and merge the split text back together; return marks removed."""
    parents: dict[int, Tag] = {}
    marks = root.select(f"mark.{MARK_CLASS}")
    for mark in marks:
        parent = mark.parent
        mark.unwrap()
        if parent is not None:
            parents[id(parent)] = parent
    for parent in parents.values():
        parent.smooth()
    return len(marks)


class SearchHighlighter:
    """Keeps marks in a tree in step with the search state.

    Work happens only when the (open, query, current_index, case_sensitive)
    tuple differs from the last applied one, or after attach() swaps in a new tree.
    """

    def __init__(self, reveal: Callable[[Tag], None] = None, regex: bool = False) -> None:
        self._reveal = reveal
        self._regex = regex
        self._soup: Optional[BeautifulSoup] = None
        self._key: Optional[tuple] = None
        self.count = 0

    def attach(self, soup: BeautifulSoup) -> None:
        self._soup = soup
        self._key = None
        self.count = 0

    def current_mark(self) -> Optional[Tag]:
        if self._soup is None:
            return None
        return self._soup.select_one(f"mark.{MARK_CLASS}.{CURRENT_CLASS}")

    def sync(self, search: SearchState) -> bool:
        """Re-apply marks if the search tuple changed; return whether the tree was touched."""
        key = (search.open, search.query, search.current_index, search.case_sensitive)
        if self._soup is None or key == self._key:
            return False
        self._key = key

        clear_highlights(self._soup)
        self.count = 0
        if search.open and search.query:
            self.count = highlight_tree(
                self._soup, search.query, search.case_sensitive, search.current_index, regex=self._regex,
            )
            current = self.current_mark()
            if current is not None and self._reveal is not None:
                self._reveal(current)
        logger.debug("Search marks applied: %d", self.count)
        return True
