"""Single owner of application view state with change notification"""

import logging
from pathlib import Path
from typing import Any, Callable

from mdcat.core.models import AppState, SearchState


logger = logging.getLogger(__name__)

Listener = Callable[[AppState], None]


class Store:
    """Holds AppState; every mutation replaces the snapshot and notifies subscribers in order."""

    def __init__(self, state: AppState = None) -> None:
        self._state = state or AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, fn: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(fn)

        def _unsubscribe() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)
        return _unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        for fn in list(self._listeners):
            fn(self._state)

    def set_file(self, path: Path, content: str) -> None:
        path = Path(path)
        self._update(file_path=path, content=content, base_dir=path.parent, dirty=False)

    def set_content(self, content: str) -> None:
        self._update(content=content, dirty=True)

    def mark_clean(self) -> None:
        self._update(dirty=False)

    def toggle_mode(self) -> None:
        self._update(mode=self._state.mode.toggled())

    def set_search(self, **changes: Any) -> None:
        search = SearchState.model_validate({**self._state.search.model_dump(), **changes})
        self._update(search=search)

    def open_search(self) -> None:
        self.set_search(open=True)

    def close_search(self) -> None:
        self._update(search=SearchState())

    def apply_external_update(self, content: str) -> bool:
        """Replace content from an outside change; ignored while there are unsaved edits."""
        if self._state.dirty:
            logger.info("Ignoring external update to %s: unsaved edits", self._state.file_path)
            return False
        if content == self._state.content:
            return False
        self._update(content=content, dirty=False)
        return True
