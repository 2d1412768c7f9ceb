"""Search session: match recomputation, next/previous navigation, and the counter label"""

from typing import Callable

from mdcat.core.models import AppState, Match
from mdcat.core.search import find_matches
from mdcat.core.state import Store


class SearchNavigator:
    """Drives SearchState from user actions; navigate(line) is called for the current match."""

    def __init__(self, store: Store, navigate: Callable[[int], None] = None, regex: bool = False) -> None:
        self._store = store
        self._navigate = navigate
        self._regex = regex
        self.matches: list[Match] = []
        store.subscribe(self._on_state)

    def _on_state(self, state: AppState) -> None:
        # a search closed elsewhere leaves nothing to navigate
        if not state.search.open:
            self.matches = []

    def _go(self, index: int) -> None:
        self._store.set_search(current_index=index)
        if self._navigate is not None:
            self._navigate(self.matches[index].line)

    def refresh(self) -> None:
        """Recompute matches over the current content, keeping the index when still in range."""
        state = self._store.state
        self.matches = find_matches(
            state.content, state.search.query, state.search.case_sensitive, self._regex,
        )
        index = state.search.current_index
        if index >= len(self.matches):
            index = 0
        self._store.set_search(total_matches=len(self.matches), current_index=index)
        if self.matches:
            self._go(index)

    def update_query(self, query: str) -> None:
        self._store.set_search(query=query, open=True)
        self.refresh()

    def toggle_case(self) -> None:
        self._store.set_search(case_sensitive=not self._store.state.search.case_sensitive)
        self.refresh()

    def next(self) -> None:
        if not self.matches:
            return
        self._go((self._store.state.search.current_index + 1) % len(self.matches))

    def previous(self) -> None:
        if not self.matches:
            return
        self._go((self._store.state.search.current_index - 1) % len(self.matches))

    def close(self) -> None:
        self.matches = []
        self._store.close_search()

    def counter_label(self) -> str:
        search = self._store.state.search
        if search.total_matches > 0:
            return f"{search.current_index + 1} of {search.total_matches}"
        return "0 of 0" if search.query else ""
