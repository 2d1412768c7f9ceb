"""Slug generation for heading anchors"""

import html
import re


def heading_slug(text: str) -> str:
    """Anchor id for rendered heading content: lowercase, tags stripped, whitespace runs joined by hyphens.

    Identical headings produce identical slugs; no de-duplication is applied.
    """
    text = text.lower()
    text = html.unescape(re.sub(r'<[^>]*>', '', text))
    text = re.sub(r'[^\w\s-]', '', text)
    return re.sub(r'\s+', '-', text.strip())
