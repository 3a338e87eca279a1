"""
Screen routing and cross-screen handoff.

Streamlit keeps per-browser-session state in st.session_state; both classes
here take that mapping (or any dict, in tests) rather than importing
Streamlit, so the routing rules stay testable.

Handoff entries are read-once: the receiving screen take()s them, which
removes them. A screen that needs the value across reruns keeps it in its own
view state afterwards.
"""

from collections.abc import MutableMapping
from typing import Any

HOME      = "home"
ANALYSIS  = "analysis"
RESULTS   = "results"
QUESTIONS = "questions"

PAGES = (HOME, ANALYSIS, RESULTS, QUESTIONS)

_PAGE_KEY = "_page"
_PREFIX   = "_handoff."


class Handoff:
    def __init__(self, store: MutableMapping):
        self._store = store

    def put(self, **items: Any) -> None:
        for key, value in items.items():
            self._store[_PREFIX + key] = value

    def take(self, key: str, default: Any = None) -> Any:
        """Return the entry and remove it."""
        return self._store.pop(_PREFIX + key, default)

    def has(self, key: str) -> bool:
        return _PREFIX + key in self._store

    def clear(self, *keys: str) -> None:
        """Drop the named entries, or every entry when none are named."""
        targets = [_PREFIX + k for k in keys] or [k for k in self._store if k.startswith(_PREFIX)]
        for key in targets:
            self._store.pop(key, None)


class Navigator:
    def __init__(self, store: MutableMapping):
        self._store  = store
        self.handoff = Handoff(store)

    @property
    def current(self) -> str:
        return self._store.get(_PAGE_KEY, HOME)

    def go(self, page: str, **handoff: Any) -> None:
        """Write the handoff for the next screen, then switch to it."""
        if page not in PAGES:
            raise ValueError(f"Unknown page: {page!r}")
        self.handoff.put(**handoff)
        self._store[_PAGE_KEY] = page
