"""Frontmatter extraction, markdown-it tokenization, and document loading"""

import re
from pathlib import Path
from typing import Optional

from markdown_it import MarkdownIt

from mdcat.core.models import BlockKind, BlockToken, Document, FrontmatterBlock
from mdcat.core.utils.text import normalize_newlines, source_lines


FRONTMATTER_RE = re.compile(r'\A---\n(.*?)\n---(?:\n|\Z)', re.DOTALL)
MD_EXTENSIONS = {'.md', '.markdown', '.mdown', '.mkd'}

_CONTAINERS: dict[str, BlockKind] = {
    'blockquote_open':   BlockKind.blockquote,
    'bullet_list_open':  BlockKind.list,
    'ordered_list_open': BlockKind.list,
    'list_item_open':    BlockKind.list_item,
}


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False, "html": True})


def split_frontmatter(text: str) -> tuple[Optional[FrontmatterBlock], str, int]:
    """Return (frontmatter, body, body_start_line).

    An unterminated opening delimiter is not frontmatter; the whole text is body.
    """
    m = FRONTMATTER_RE.match(text)
    if not m:
        return None, text, 1
    line_count = m.group(0).count("\n") + (0 if m.group(0).endswith("\n") else 1)
    block = FrontmatterBlock(text=m.group(1), line_count=line_count)
    return block, text[m.end():], 1 + line_count


def _raw(token, lines: list[str]) -> str:
    """Exact source text of a block token via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(lines[start:end])
    return token.content


def _close_index(tokens: list, i: int) -> int:
    """Index of the token closing the one opened at i."""
    opened = tokens[i]
    close_type = opened.type[:-len('_open')] + '_close'
    for j in range(i + 1, len(tokens)):
        if tokens[j].type == close_type and tokens[j].level == opened.level:
            return j
    return len(tokens) - 1


def _align(cell_open) -> Optional[str]:
    style = cell_open.attrGet('style') or ''
    return style.split(':', 1)[1].strip() if style.startswith('text-align:') else None


def _table(token, tokens: list, lines: list[str]) -> BlockToken:
    """Collect header cells, column alignment, and body rows from a table token run."""
    block = BlockToken(kind=BlockKind.table, raw=_raw(token, lines))
    row: list = []
    in_head = False
    for i, tok in enumerate(tokens):
        if tok.type == 'thead_open':
            in_head = True
        elif tok.type == 'thead_close':
            in_head = False
        elif tok.type == 'tr_open':
            row = []
        elif tok.type in ('th_open', 'td_open'):
            inline = tokens[i + 1]
            row.append(inline.children or [])
            if in_head:
                block.aligns.append(_align(tok))
        elif tok.type == 'tr_close':
            if in_head:
                block.header = row
            else:
                block.rows.append(row)
    return block


def build_blocks(tokens: list, lines: list[str]) -> list[BlockToken]:
    """Fold a flat markdown-it token stream into a tree of BlockTokens in document order."""
    blocks: list[BlockToken] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok.type in ('heading_open', 'paragraph_open'):
            inline = tokens[i + 1]
            heading = tok.type == 'heading_open'
            blocks.append(BlockToken(
                kind=BlockKind.heading if heading else BlockKind.paragraph,
                raw=_raw(tok, lines),
                depth=int(tok.tag[1:]) if heading else None,
                text=inline.content,
                hidden=tok.hidden,
                inline=inline.children or [],
            ))
            i = _close_index(tokens, i) + 1
        elif tok.type in ('fence', 'code_block'):
            info = tok.info.strip().split(maxsplit=1) if tok.info else []
            blocks.append(BlockToken(
                kind=BlockKind.code,
                raw=_raw(tok, lines),
                lang=info[0] if info else None,
                text=tok.content,
            ))
            i += 1
        elif tok.type == 'hr':
            blocks.append(BlockToken(kind=BlockKind.hr, raw=_raw(tok, lines)))
            i += 1
        elif tok.type == 'html_block':
            blocks.append(BlockToken(kind=BlockKind.html, raw=_raw(tok, lines), text=tok.content))
            i += 1
        elif tok.type == 'table_open':
            j = _close_index(tokens, i)
            blocks.append(_table(tok, tokens[i + 1:j], lines))
            i = j + 1
        elif tok.type in _CONTAINERS:
            j = _close_index(tokens, i)
            blocks.append(BlockToken(
                kind=_CONTAINERS[tok.type],
                raw=_raw(tok, lines),
                ordered=tok.type == 'ordered_list_open',
                start=int(tok.attrGet('start') or 1),
                children=build_blocks(tokens[i + 1:j], lines),
            ))
            i = j + 1
        else:
            i += 1
    return blocks


def tokenize(body: str, parser: MarkdownIt) -> list[BlockToken]:
    """Parse a frontmatter-free body into BlockTokens (lines not yet assigned)."""
    return build_blocks(parser.parse(body), source_lines(body))


def load_document(path: Path) -> Document:
    """Read a markdown file; relative assets resolve against its directory."""
    raw = path.read_text(encoding='utf-8')
    return Document(source=normalize_newlines(raw), base_dir=path.parent.resolve())


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] if a single markdown file."""
    if path.is_file():
        return [path] if path.suffix.lower() in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in MD_EXTENSIONS)


def find_markdown_file(path: Path) -> Optional[Path]:
    """Pick the file to open for a path: the file itself, else README.md, else the first markdown file."""
    if path.is_file():
        return path
    for name in ('README.md', 'readme.md', 'Readme.md'):
        if (path / name).is_file():
            return path / name
    top = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in MD_EXTENSIONS)
    if top:
        return top[0]
    found = discover_files(path)
    return found[0] if found else None
