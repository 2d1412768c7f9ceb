"""Data models for rendering, search, and view state"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, model_validator


@dataclass(frozen=True)
class Document:
    """Raw source plus the directory relative assets resolve against. Never mutated by rendering."""
    source:   str
    base_dir: Optional[Path] = None


@dataclass(frozen=True)
class FrontmatterBlock:
    """Leading ---/--- region, stripped before tokenization."""
    text:       str     # inner content, delimiters excluded
    line_count: int     # lines occupied by the whole region, closing delimiter included

    def metadata(self) -> dict[str, Any]:
        """Parse the block as YAML; {} when it is not a valid mapping."""
        try:
            data = yaml.safe_load(self.text)
        except yaml.YAMLError:
            return {}
        return data if isinstance(data, dict) else {}


class BlockKind(str, Enum):
    heading    = "heading"
    paragraph  = "paragraph"
    list       = "list"
    list_item  = "list_item"
    code       = "code"
    blockquote = "blockquote"
    table      = "table"
    hr         = "hr"
    html       = "html"


@dataclass
class BlockToken:
    """A block-level node of the parsed body with the exact source text it was matched from."""
    kind:     BlockKind
    raw:      str
    line:     Optional[int] = None          # 1-indexed source line, set by assign_lines
    depth:    Optional[int] = None          # heading level (1-6)
    ordered:  bool = False
    start:    int = 1                       # first ordinal of an ordered list
    lang:     Optional[str] = None          # fenced code language tag
    text:     str = ""                      # code body, html body, or raw heading text
    hidden:   bool = False                  # paragraph inside a tight list
    inline:   list = field(default_factory=list)      # markdown-it inline children
    children: list["BlockToken"] = field(default_factory=list)
    header:   list[list] = field(default_factory=list)    # table header cells (inline children)
    aligns:   list[Optional[str]] = field(default_factory=list)
    rows:     list[list[list]] = field(default_factory=list)


@dataclass(frozen=True)
class Match:
    start: int      # 0-indexed offset into the searched text
    end:   int
    line:  int      # 1-indexed


class ViewMode(str, Enum):
    rendered = "rendered"
    raw      = "raw"

    def toggled(self) -> "ViewMode":
        return ViewMode.raw if self is ViewMode.rendered else ViewMode.rendered


class SearchState(BaseModel):
    query:          str  = ""
    open:           bool = False
    case_sensitive: bool = False
    current_index:  int  = 0
    total_matches:  int  = 0

    @model_validator(mode="after")
    def _clamp_index(self) -> "SearchState":
        if self.total_matches <= 0 or not 0 <= self.current_index < self.total_matches:
            self.current_index = 0
        return self


class AppState(BaseModel):
    file_path: Optional[Path] = None
    content:   str = ""
    base_dir:  Optional[Path] = None
    mode:      ViewMode = ViewMode.rendered
    dirty:     bool = False
    search:    SearchState = SearchState()


@dataclass(frozen=True)
class OutlineEntry:
    depth: int
    text:  str
    slug:  str
    line:  int
