"""Shared fixtures for core unit tests"""

import pytest
from bs4 import Tag

from mdcat.core.render import SOURCE_LINE_ATTR, MarkdownRenderer
from mdcat.core.state import Store


LINE_HEIGHT = 20

SAMPLE_MD = """\
# One

alpha

## Two

beta

## Three

gamma
"""


class FakeEditor:
    """In-memory TextEditor: the visible line is wherever go_to_line last put it."""

    def __init__(self) -> None:
        self.content = ""
        self.line = 1
        self.focused = False
        self.set_calls = 0

    def get_content(self) -> str:
        return self.content

    def set_content(self, text: str) -> None:
        self.content = text
        self.set_calls += 1

    def go_to_line(self, line: int, focus: bool = True) -> None:
        self.line = max(1, min(line, self.content.count("\n") + 1))
        self.focused = focus

    def get_visible_line(self) -> int:
        return self.line


class FakeSurface:
    """PreviewSurface laying every element out at (source line - 1) * LINE_HEIGHT."""

    def __init__(self, height: float = 100.0) -> None:
        self.top = 0.0
        self.height = height
        self.shown = 0

    def show(self, soup) -> None:
        self.shown += 1

    def scroll_top(self) -> float:
        return self.top

    def viewport_height(self) -> float:
        return self.height

    def element_top(self, element: Tag) -> float:
        el = element if element.has_attr(SOURCE_LINE_ATTR) else element.find_parent(attrs={SOURCE_LINE_ATTR: True})
        return (int(el[SOURCE_LINE_ATTR]) - 1) * LINE_HEIGHT

    def scroll_to(self, y: float) -> None:
        self.top = y


@pytest.fixture(name="renderer")
def renderer_fixture():
    return MarkdownRenderer()


@pytest.fixture(name="store")
def store_fixture():
    store = Store()
    store.set_file("/docs/sample.md", SAMPLE_MD)
    return store


@pytest.fixture(name="editor")
def editor_fixture():
    return FakeEditor()


@pytest.fixture(name="surface")
def surface_fixture():
    return FakeSurface()
