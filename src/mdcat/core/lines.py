"""Source line attribution for block tokens by re-scanning the body text"""

import logging

from mdcat.core.models import BlockToken


logger = logging.getLogger(__name__)


def assign_lines(tokens: list[BlockToken], body: str, start_line: int = 1) -> list[BlockToken]:
    """Set token.line to the 1-indexed source line each token begins on.

    Tokens must be in document order with raw text occurring at or after the
    previous token's end. Child tokens are attributed within their parent's raw
    text, starting from the parent's line. A token whose raw text cannot be
    found keeps the current line and does not advance the cursor.
    """
    pos = 0
    line = start_line
    for token in tokens:
        idx = body.find(token.raw, pos)
        if idx < 0:
            logger.warning("Could not locate %s source at offset %d; using line %d", token.kind.value, pos, line)
            token.line = line
        else:
            line += body.count("\n", pos, idx)
            token.line = line
            line += token.raw.count("\n")
            pos = idx + len(token.raw)

        if token.children:
            assign_lines(token.children, token.raw, token.line)
    return tokens
