"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdcat.config import Settings, load_config
from mdcat.core.models import Document
from mdcat.core.parse import find_markdown_file, load_document
from mdcat.core.render import MarkdownRenderer
from mdcat.core.search import find_matches
from mdcat.logging_config import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then set up logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _load(path: str) -> tuple[Path, Document]:
    """Resolve a file or directory argument to a markdown document."""
    target = find_markdown_file(Path(path)) if Path(path).exists() else None
    if target is None:
        _fail(f"No markdown file found at {path}")
    try:
        return target, load_document(target)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Could not read {target}", e)


def render_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file or directory to render")],
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="Output HTML file (default: <stem>.html)")] = None,
    fragment: Annotated[bool, typer.Option("--fragment", help="Write the HTML fragment without page wrapper")] = False,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Render markdown to line-tagged HTML."""
    settings = _settings(overrides={"parser_config": parser})
    source_path, doc = _load(path)
    renderer = MarkdownRenderer(settings)
    try:
        markup = renderer.render_document(doc) if fragment else renderer.render_page(doc)
    except Exception as e:
        _fail("Render failed", e)

    out_path = Path(out) if out else source_path.with_suffix(".html")
    out_path.write_text(markup, encoding="utf-8")
    typer.echo(f"  {source_path} -> {out_path}")


def search_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to search")],
    query: Annotated[str, typer.Argument(help="Text or pattern to find")],
    case_sensitive: Annotated[Optional[bool], typer.Option("--case-sensitive/--ignore-case", help="Match case")] = None,
    regex: Annotated[Optional[bool], typer.Option("--regex/--literal", help="Treat query as a pattern")] = None,
    ):
    """Print every match as line:start-end with the matching line."""
    settings = _settings(overrides={"case_sensitive": case_sensitive, "regex": regex})
    _, doc = _load(path)
    matches = find_matches(doc.source, query, settings.case_sensitive, settings.regex)
    if not matches:
        typer.echo("No matches.")
        raise typer.Exit(1)

    lines = doc.source.split("\n")
    for m in matches:
        typer.echo(f"{m.line}:{m.start}-{m.end}: {lines[m.line - 1].rstrip()}")
    typer.echo(f"{len(matches)} match(es)")


def outline_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to outline")],
    ):
    """List headings with their source line and anchor id."""
    settings = _settings()
    _, doc = _load(path)
    entries = MarkdownRenderer(settings).outline(doc.source)
    if not entries:
        typer.echo("No headings found.")
        raise typer.Exit(1)
    for entry in entries:
        indent = "  " * (entry.depth - 1)
        typer.echo(f"{entry.line:>5}  {indent}{entry.text}  #{entry.slug}")


def open_cmd(
    path: Annotated[str, typer.Argument(help="File or directory (finds README.md or the first markdown file)")] = ".",
    ):
    """Print the markdown file that would be opened for a path."""
    _settings()
    target, _ = _load(path)
    typer.echo(str(target.resolve()))
