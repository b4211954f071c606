"""
Tab, frame and navigation state.

Contains pure data for the tabs the extension acts on, plus an in-process
registry of parsed frame documents that the injector runs against.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

TOP_FRAME = 0


class NavigationSource(Enum):
    """Browser callbacks that can report the same page load."""

    COMMITTED = "committed"
    HISTORY_STATE_UPDATED = "history_state_updated"
    COMPLETED = "completed"
    TAB_UPDATED = "tab_updated"


class TabStatus(Enum):
    LOADING = "loading"
    COMPLETE = "complete"


@dataclass
class Tab:
    id: int
    url: str = ""
    active: bool = False


@dataclass(frozen=True)
class TabChange:
    """The changed fields of a tab-update callback."""

    status: Optional[TabStatus] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class NavigationEvent:
    tab_id: int
    url: str
    frame_id: int = TOP_FRAME
    source: NavigationSource = NavigationSource.COMMITTED

    @property
    def is_top_frame(self) -> bool:
        return self.frame_id == TOP_FRAME


@dataclass
class TabDocuments:
    """Parsed documents of a tab; the first is the top document."""

    frames: List[BeautifulSoup] = field(default_factory=list)
    # Pages such as the browser's own settings refuse script injection
    scriptable: bool = True


class TabRegistry:
    def __init__(self):
        self._ids = itertools.count(1)
        self.tabs: Dict[int, Tab] = {}
        self.documents: Dict[int, TabDocuments] = {}

    def open(
        self,
        url: str,
        html: str = "",
        frames: Optional[List[str]] = None,
        active: bool = True,
        scriptable: bool = True,
    ) -> Tab:
        tab = Tab(id=next(self._ids), url=url)
        self.tabs[tab.id] = tab
        self.load(tab.id, url, html, frames, scriptable)
        if active:
            self.activate(tab.id)
        return tab

    def load(
        self,
        tab_id: int,
        url: str,
        html: str = "",
        frames: Optional[List[str]] = None,
        scriptable: bool = True,
    ) -> None:
        self.tabs[tab_id].url = url
        markup = [html] + list(frames or [])
        self.documents[tab_id] = TabDocuments(
            frames=[BeautifulSoup(doc, "html.parser") for doc in markup],
            scriptable=scriptable,
        )

    def activate(self, tab_id: int) -> None:
        for tab in self.tabs.values():
            tab.active = tab.id == tab_id

    def close(self, tab_id: int) -> None:
        self.tabs.pop(tab_id, None)
        self.documents.pop(tab_id, None)

    def get(self, tab_id: int) -> Optional[Tab]:
        return self.tabs.get(tab_id)

    async def active_tab(self) -> Optional[Tab]:
        for tab in self.tabs.values():
            if tab.active:
                return tab
        return None

    def html(self, tab_id: int, frame: int = TOP_FRAME) -> str:
        return str(self.documents[tab_id].frames[frame])
