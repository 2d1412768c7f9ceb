"""Code block highlighting via Pygments"""

import logging
from typing import Optional

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.util import ClassNotFound


logger = logging.getLogger(__name__)


class CodeHighlighter:
    """Returns highlighted markup for a code body, selected by language tag or detected."""

    def __init__(self, style: str = "default") -> None:
        self._style = style
        self._formatter = HtmlFormatter(nowrap=True)

    def lexer_for(self, code: str, lang: Optional[str]) -> Lexer:
        """Lexer for a declared tag; unknown or missing tags fall back to content detection."""
        if lang:
            try:
                return get_lexer_by_name(lang, stripnl=False, ensurenl=False)
            except ClassNotFound:
                logger.debug("Unknown code language %r; detecting from content", lang)
        try:
            return guess_lexer(code, stripnl=False, ensurenl=False)
        except ClassNotFound:
            return TextLexer(stripnl=False, ensurenl=False)

    def highlight(self, code: str, lang: Optional[str] = None) -> str:
        return highlight(code, self.lexer_for(code, lang), self._formatter)

    def stylesheet(self, selector: str = ".highlight") -> str:
        """CSS rules for the token classes emitted by highlight()."""
        return HtmlFormatter(style=self._style).get_style_defs(selector)
