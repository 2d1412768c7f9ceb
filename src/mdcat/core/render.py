"""Markdown to HTML rendering with per-block source line attribution.

Every block-level element carries a ``data-source-line`` attribute naming the
1-indexed line of the original document it was produced from, counting any
stripped frontmatter. Line navigation in the preview relies on this contract.
"""

import html
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote

from markdown_it import MarkdownIt

from mdcat.config import Settings
from mdcat.core.assets import AssetResolver
from mdcat.core.lines import assign_lines
from mdcat.core.models import BlockKind, BlockToken, Document, FrontmatterBlock, OutlineEntry
from mdcat.core.parse import make_parser, split_frontmatter, tokenize
from mdcat.core.syntax import CodeHighlighter
from mdcat.core.utils.slug import heading_slug
from mdcat.core.utils.text import normalize_newlines


logger = logging.getLogger(__name__)

SOURCE_LINE_ATTR = "data-source-line"
REMOTE_SRC_RE = re.compile(r'^(?:https?:|data:)', re.IGNORECASE)
IMG_SRC_RE = re.compile(r'(<img\b[^>]*?\bsrc\s*=\s*)(["\'])(.*?)\2', re.IGNORECASE | re.DOTALL)

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{css}
pre.frontmatter {{ opacity: 0.7; }}
mark.search-highlight {{ background: #fff3a3; }}
mark.search-highlight.current {{ background: #ff9632; }}
</style>
</head>
<body>
<article class="markdown-body">
{body}</article>
</body>
</html>
"""


@dataclass(frozen=True)
class RenderContext:
    """Read-only handle passed to block render functions."""
    parser:      MarkdownIt
    highlighter: CodeHighlighter
    code_class:  str
    resolve_src: Callable[[str], str]
    env:         dict

    def blocks(self, tokens: list[BlockToken]) -> str:
        return ''.join(render_block(t, self) for t in tokens)

    def inline(self, children: list) -> str:
        return self.parser.renderer.renderInline(children, self.parser.options, self.env)

    def rewrite_images(self, markup: str) -> str:
        """Resolve src attributes of raw <img> tags in passed-through HTML."""
        def _sub(m: re.Match) -> str:
            src = self.resolve_src(html.unescape(m.group(3)))
            return f'{m.group(1)}{m.group(2)}{html.escape(src)}{m.group(2)}'
        return IMG_SRC_RE.sub(_sub, markup)


def _line(token: BlockToken) -> str:
    return f' {SOURCE_LINE_ATTR}="{token.line}"'


def _heading(token: BlockToken, ctx: RenderContext) -> str:
    tag = f'h{token.depth}'
    content = ctx.inline(token.inline)
    return f'<{tag} id="{html.escape(heading_slug(content))}"{_line(token)}>{content}</{tag}>\n'


def _paragraph(token: BlockToken, ctx: RenderContext) -> str:
    if token.hidden:
        return ctx.inline(token.inline)
    return f'<p{_line(token)}>{ctx.inline(token.inline)}</p>\n'


def _list(token: BlockToken, ctx: RenderContext) -> str:
    tag = 'ol' if token.ordered else 'ul'
    start = f' start="{token.start}"' if token.ordered and token.start != 1 else ''
    return f'<{tag}{start}{_line(token)}>\n{ctx.blocks(token.children)}</{tag}>\n'


def _list_item(token: BlockToken, ctx: RenderContext) -> str:
    children = token.children
    body = '' if not children or children[0].hidden else '\n'
    for i, child in enumerate(children):
        body += render_block(child, ctx)
        if child.hidden and i < len(children) - 1:
            body += '\n'
    return f'<li{_line(token)}>{body}</li>\n'


def _code(token: BlockToken, ctx: RenderContext) -> str:
    classes = ctx.code_class + (f' language-{token.lang}' if token.lang else '')
    code = ctx.highlighter.highlight(token.text, token.lang)
    return f'<pre{_line(token)}><code class="{html.escape(classes)}">{code}</code></pre>\n'


def _blockquote(token: BlockToken, ctx: RenderContext) -> str:
    return f'<blockquote{_line(token)}>\n{ctx.blocks(token.children)}</blockquote>\n'


def _cell(tag: str, children: list, align: Optional[str], ctx: RenderContext) -> str:
    style = f' style="text-align:{align}"' if align else ''
    return f'<{tag}{style}>{ctx.inline(children)}</{tag}>'


def _table(token: BlockToken, ctx: RenderContext) -> str:
    def _align(i: int) -> Optional[str]:
        return token.aligns[i] if i < len(token.aligns) else None

    out = [f'<table{_line(token)}>', '<thead>', '<tr>']
    out += [_cell('th', cell, _align(i), ctx) for i, cell in enumerate(token.header)]
    out += ['</tr>', '</thead>']
    if token.rows:
        out.append('<tbody>')
        for row in token.rows:
            out.append('<tr>')
            out += [_cell('td', cell, _align(i), ctx) for i, cell in enumerate(row)]
            out.append('</tr>')
        out.append('</tbody>')
    out.append('</table>')
    return '\n'.join(out) + '\n'


def _hr(token: BlockToken, ctx: RenderContext) -> str:
    return f'<hr{_line(token)}>\n'


def _html(token: BlockToken, ctx: RenderContext) -> str:
    return ctx.rewrite_images(token.text)


RENDERERS: dict[BlockKind, Callable[[BlockToken, RenderContext], str]] = {
    BlockKind.heading:    _heading,
    BlockKind.paragraph:  _paragraph,
    BlockKind.list:       _list,
    BlockKind.list_item:  _list_item,
    BlockKind.code:       _code,
    BlockKind.blockquote: _blockquote,
    BlockKind.table:      _table,
    BlockKind.hr:         _hr,
    BlockKind.html:       _html,
}


def render_block(token: BlockToken, ctx: RenderContext) -> str:
    return RENDERERS[token.kind](token, ctx)


def render_frontmatter(frontmatter: FrontmatterBlock) -> str:
    """Frontmatter as an escaped literal block attributed to line 1."""
    text = html.escape(frontmatter.text, quote=False)
    return f'<pre class="frontmatter" {SOURCE_LINE_ATTR}="1"><code>{text}</code></pre>\n'


class MarkdownRenderer:
    """Renders markdown source to line-tagged HTML."""

    def __init__(
        self,
        settings: Settings = None,
        resolver: AssetResolver = None,
        highlighter: CodeHighlighter = None,
        ) -> None:
        self.settings = settings or Settings()
        self.resolver = resolver or AssetResolver(self.settings.asset_scheme, self.settings.asset_host)
        self.highlighter = highlighter or CodeHighlighter(self.settings.pygments_style)
        self._parser = make_parser(self.settings.parser_config)

        default_image = self._parser.renderer.rules["image"]

        def custom_image(tokens, idx, options, env):
            token = tokens[idx]
            token.attrSet("src", env["resolve_src"](token.attrGet("src") or ""))
            return default_image(tokens, idx, options, env)

        def custom_html_inline(tokens, idx, options, env):
            return env["rewrite_images"](tokens[idx].content)

        self._parser.renderer.rules["image"] = custom_image
        self._parser.renderer.rules["html_inline"] = custom_html_inline

    def resolve_src(self, src: str, base_dir: Optional[Path]) -> str:
        """Loadable reference for an image source; remote and already-resolved sources are kept."""
        if not src or base_dir is None or REMOTE_SRC_RE.match(src) or self.resolver.is_resolved(src):
            return src
        return self.resolver.resolve(Path(base_dir) / unquote(src))

    def _context(self, base_dir: Optional[Path]) -> RenderContext:
        env: dict = {}
        ctx = RenderContext(
            parser=self._parser,
            highlighter=self.highlighter,
            code_class=self.settings.code_class,
            resolve_src=lambda src: self.resolve_src(src, base_dir),
            env=env,
        )
        env["resolve_src"] = ctx.resolve_src
        env["rewrite_images"] = ctx.rewrite_images
        return ctx

    def parse(self, source: str) -> tuple[Optional[FrontmatterBlock], list[BlockToken]]:
        """Split frontmatter and return line-attributed body tokens."""
        frontmatter, body, start_line = split_frontmatter(normalize_newlines(source))
        tokens = assign_lines(tokenize(body, self._parser), body, start_line)
        return frontmatter, tokens

    def _render_tokens(
        self,
        frontmatter: Optional[FrontmatterBlock],
        tokens: list[BlockToken],
        ctx: RenderContext,
        ) -> str:
        out = render_frontmatter(frontmatter) if frontmatter else ''
        out += ctx.blocks(tokens)
        logger.debug("Rendered %d top-level blocks (%d chars)", len(tokens), len(out))
        return out

    def render(self, source: str, base_dir: Optional[Path] = None) -> str:
        frontmatter, tokens = self.parse(source)
        return self._render_tokens(frontmatter, tokens, self._context(base_dir))

    def render_document(self, document: Document) -> str:
        return self.render(document.source, document.base_dir)

    @staticmethod
    def _outline(tokens: list[BlockToken], ctx: RenderContext) -> list[OutlineEntry]:
        entries: list[OutlineEntry] = []

        def _walk(blocks: list[BlockToken]) -> None:
            for token in blocks:
                if token.kind == BlockKind.heading:
                    entries.append(OutlineEntry(
                        depth=token.depth,
                        text=token.text,
                        slug=heading_slug(ctx.inline(token.inline)),
                        line=token.line,
                    ))
                _walk(token.children)

        _walk(tokens)
        return entries

    def outline(self, source: str) -> list[OutlineEntry]:
        """Headings in document order, including those nested in quotes and lists."""
        _, tokens = self.parse(source)
        return self._outline(tokens, self._context(None))

    def render_page(self, document: Document, title: str = None) -> str:
        """Standalone HTML page with highlighting styles; title falls back to frontmatter, then first heading."""
        frontmatter, tokens = self.parse(document.source)
        ctx = self._context(document.base_dir)
        if title is None:
            metadata = frontmatter.metadata() if frontmatter else {}
            headings = self._outline(tokens, ctx)
            if metadata.get('title'):
                title = str(metadata['title'])
            elif headings:
                title = headings[0].text
            else:
                title = self.settings.app_name
        return PAGE_TEMPLATE.format(
            title=html.escape(title),
            css=self.highlighter.stylesheet(f'.{self.settings.code_class}'),
            body=self._render_tokens(frontmatter, tokens, ctx),
        )
