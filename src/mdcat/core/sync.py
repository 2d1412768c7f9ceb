"""Rendered and raw panes, and source-line synchronization when switching between them.

The display toolkit is reached only through two small protocols: a text
editing widget for the raw view and a scrollable surface for the rendered
view. Both panes react to Store notifications. Work that must wait for a
pane's next render pass is queued with after_render().
"""

import logging
from typing import Callable, Protocol

from bs4 import BeautifulSoup, Tag

from mdcat.core.highlight import SearchHighlighter
from mdcat.core.models import AppState, ViewMode
from mdcat.core.render import SOURCE_LINE_ATTR, MarkdownRenderer
from mdcat.core.state import Store


logger = logging.getLogger(__name__)


class TextEditor(Protocol):
    def get_content(self) -> str: ...
    def set_content(self, text: str) -> None: ...
    def go_to_line(self, line: int, focus: bool = True) -> None: ...
    def get_visible_line(self) -> int: ...


class PreviewSurface(Protocol):
    def show(self, soup: BeautifulSoup) -> None: ...
    def scroll_top(self) -> float: ...
    def viewport_height(self) -> float: ...
    def element_top(self, element: Tag) -> float: ...
    def scroll_to(self, y: float) -> None: ...


class _Pane:
    """One-shot callbacks run at the end of the pane's next render pass."""

    def __init__(self) -> None:
        self._after_render: list[Callable[[], None]] = []

    def after_render(self, callback: Callable[[], None]) -> None:
        self._after_render.append(callback)

    def _flush(self) -> None:
        pending, self._after_render = self._after_render, []
        for callback in pending:
            callback()


class PreviewPane(_Pane):
    """Rendered view: HTML tree, search marks, and line-based scrolling."""

    def __init__(self, store: Store, renderer: MarkdownRenderer, surface: PreviewSurface, regex: bool = False) -> None:
        super().__init__()
        self._renderer = renderer
        self._surface = surface
        self._rendered_key = None
        self._visible = False
        self.soup: BeautifulSoup = None
        self.highlighter = SearchHighlighter(reveal=self.reveal, regex=regex)
        store.subscribe(self._on_state)
        self._on_state(store.state)

    def _on_state(self, state: AppState) -> None:
        if state.mode is not ViewMode.rendered:
            self._visible = False
            return

        key = (state.content, state.base_dir)
        if not self._visible or key != self._rendered_key:
            markup = self._renderer.render(state.content, state.base_dir)
            self.soup = BeautifulSoup(markup, "html.parser")
            self._rendered_key = key
            self.highlighter.attach(self.soup)
            self._surface.show(self.soup)
        self._visible = True

        self.highlighter.sync(state.search)
        self._flush()

    def anchors(self) -> list[tuple[int, Tag]]:
        """(line, element) for every line-tagged element in document order."""
        if self.soup is None:
            return []
        return [(int(el[SOURCE_LINE_ATTR]), el) for el in self.soup.find_all(attrs={SOURCE_LINE_ATTR: True})]

    def visible_line(self) -> int:
        """Line of the first tagged element at or below the scroll position."""
        anchors = self.anchors()
        if not anchors:
            return 1
        top = self._surface.scroll_top()
        for line, el in anchors:
            if self._surface.element_top(el) >= top:
                return line
        return anchors[-1][0]

    def go_to_line(self, line: int, focus: bool = False) -> None:
        """Scroll to the last tagged element starting at or before line."""
        anchors = self.anchors()
        if not anchors:
            return
        target = anchors[0][1]
        for el_line, el in anchors:
            if el_line <= line:
                target = el
        self._surface.scroll_to(self._surface.element_top(target))

    def reveal(self, element: Tag) -> None:
        """Center element in the viewport when it is off-screen."""
        top = self._surface.element_top(element)
        scroll_top = self._surface.scroll_top()
        height = self._surface.viewport_height()
        if scroll_top <= top < scroll_top + height:
            return
        self._surface.scroll_to(max(0.0, top - height / 2))


class EditorPane(_Pane):
    """Raw view backed by a text editing widget."""

    def __init__(self, store: Store, editor: TextEditor) -> None:
        super().__init__()
        self._store = store
        self._editor = editor
        store.subscribe(self._on_state)
        self._on_state(store.state)

    def _on_state(self, state: AppState) -> None:
        if state.mode is not ViewMode.raw:
            return
        if not state.dirty and self._editor.get_content() != state.content:
            self._editor.set_content(state.content)
        self._flush()

    def on_edit(self, text: str) -> None:
        """Widget change callback: user edits flow into the store."""
        if text != self._store.state.content:
            self._store.set_content(text)

    def visible_line(self) -> int:
        return self._editor.get_visible_line()

    def go_to_line(self, line: int, focus: bool = False) -> None:
        self._editor.go_to_line(line, focus)


class ViewSyncController:
    """Switches between rendered and raw views while keeping the same source line in view."""

    def __init__(self, store: Store, preview: PreviewPane, editor: EditorPane) -> None:
        self._store = store
        self.preview = preview
        self.editor = editor

    def active_pane(self):
        return self.preview if self._store.state.mode is ViewMode.rendered else self.editor

    def toggle_mode_with_sync(self) -> int:
        """Flip the view mode and restore the visible line once the target pane has rendered."""
        line = self.active_pane().visible_line()
        target = self.editor if self._store.state.mode is ViewMode.rendered else self.preview
        target.after_render(lambda: target.go_to_line(line, False))
        self._store.toggle_mode()
        logger.debug("Switched to %s view at line %d", self._store.state.mode.value, line)
        return line

    def navigate_to_line(self, line: int) -> None:
        self.active_pane().go_to_line(line, False)
