"""The scrollable list of sessions or friends shown in the middle of the main window."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

__all__ = [
    "SessionFriendItem",
    "SessionFriendArea",
    "AREA_WIDTH",
    "ITEM_HEIGHT",
    "SAMPLE_COUNT",
]

AREA_WIDTH = 310
ITEM_HEIGHT = 70
AVATAR_SIZE = 50
SAMPLE_COUNT = 30
SAMPLE_NAME = "张三"
SAMPLE_TEXT = "最后一条消息"


@dataclass
class SessionFriendItem:
    """One entry of the list: avatar, name and a preview line."""

    avatar: str
    name: str
    text: str
    owner: "SessionFriendArea | None" = field(default=None, repr=False, compare=False)
    selected: bool = False


class SessionFriendArea:
    """An ordered, clearable collection of session or friend entries."""

    def __init__(self) -> None:
        self._items: list[SessionFriendItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SessionFriendItem]:
        return iter(self._items)

    def __getitem__(self, index: int) -> SessionFriendItem:
        return self._items[index]

    @property
    def items(self) -> tuple[SessionFriendItem, ...]:
        """The entries in display order."""
        return tuple(self._items)

    def add_item(self, avatar: str, name: str, text: str) -> SessionFriendItem:
        """Append an entry to the end of the list and return it."""
        item = SessionFriendItem(avatar=avatar, name=name, text=text, owner=self)
        self._items.append(item)
        return item

    def clear(self) -> None:
        """Remove every entry."""
        for item in self._items:
            item.owner = None
        self._items.clear()

    def fill_sample_items(self, avatar: str, count: int = SAMPLE_COUNT) -> None:
        """Append *count* placeholder entries, numbered from 0, for trying out the layout."""
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        for number in range(count):
            self.add_item(avatar, f"{SAMPLE_NAME}{number}", f"{SAMPLE_TEXT}{number}")