"""Main window navigation state: which tab of the left bar is active."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import Enum

__all__ = ["ActiveTab", "MainWindowState", "get_instance", "WINDOW_TITLE", "ICON_DIR"]

_log = logging.getLogger(__name__)

WINDOW_TITLE = "我的聊天室"
ICON_DIR = "resource/image"
WINDOW_ICON = f"{ICON_DIR}/logo.png"
DEFAULT_AVATAR = f"{ICON_DIR}/defaultAvatar.png"

LEFT_WIDTH = 60
MIDDLE_WIDTH = 310
RIGHT_MIN_WIDTH = 500


class ActiveTab(Enum):
    """The list shown in the middle of the main window."""

    SESSION_LIST = "session"
    FRIEND_LIST = "friend"
    APPLY_LIST = "apply"


_LOAD_MESSAGES = {
    ActiveTab.SESSION_LIST: "加载会话列表",
    ActiveTab.FRIEND_LIST: "加载好友列表",
    ActiveTab.APPLY_LIST: "加载申请列表",
}


@dataclass
class MainWindowState:
    """Tracks the active tab and the icon each tab button shows."""

    active_tab: ActiveTab = ActiveTab.SESSION_LIST

    def _switch(self, tab: ActiveTab) -> None:
        self.active_tab = tab
        _log.debug(_LOAD_MESSAGES[tab])

    def switch_to_session(self) -> None:
        """Activate the session list tab and load it."""
        self._switch(ActiveTab.SESSION_LIST)

    def switch_to_friend(self) -> None:
        """Activate the friend list tab and load it."""
        self._switch(ActiveTab.FRIEND_LIST)

    def switch_to_apply(self) -> None:
        """Activate the friend-request tab and load it."""
        self._switch(ActiveTab.APPLY_LIST)

    def icons(self) -> dict[ActiveTab, str]:
        """Icon path for each tab button: active for the current tab, inactive otherwise."""
        return {
            tab: f"{ICON_DIR}/{tab.value}_{'active' if tab is self.active_tab else 'inactive'}.png"
            for tab in ActiveTab
        }


@functools.lru_cache(maxsize=None)
def get_instance() -> MainWindowState:
    """Return the single main window state."""
    return MainWindowState()