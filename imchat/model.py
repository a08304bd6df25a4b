"""Client-side data model: users, messages, chat sessions and small helpers."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Union

__all__ = [
    "MessageType",
    "UserInfo",
    "Message",
    "ChatSessionInfo",
    "format_time",
    "get_time",
    "load_file_bytes",
    "write_file_bytes",
]

_log = logging.getLogger(__name__)

TIME_FORMAT = "%m-%d %H:%M:%S"

PathLike = Union[str, Path]


def format_time(timestamp: int) -> str:
    """Format a seconds-since-epoch timestamp as local ``MM-dd HH:mm:ss``."""
    return datetime.fromtimestamp(timestamp).strftime(TIME_FORMAT)


def get_time() -> int:
    """Return the current time as whole seconds since the epoch."""
    return int(time.time())


def load_file_bytes(path: PathLike) -> bytes:
    """Read and return the whole binary content of *path*."""
    try:
        return Path(path).read_bytes()
    except OSError:
        _log.error("文件打开失败 %s", path)
        raise


def write_file_bytes(path: PathLike, content: bytes) -> None:
    """Write *content* to *path*, replacing any existing file."""
    try:
        with open(path, "wb") as handle:
            handle.write(content)
            handle.flush()
    except OSError:
        _log.error("文件打开失败 %s", path)
        raise


class MessageType(IntEnum):
    """Kinds of chat message."""

    TEXT = 0
    IMAGE = 1
    FILE = 2
    SPEECH = 3


@dataclass
class UserInfo:
    """A user's public profile."""

    user_id: str = ""
    nickname: str = ""
    description: str = ""
    phone: str = ""
    avatar: bytes = b""


def _make_message_id() -> str:
    # The last group of a UUID, prefixed with "M".
    return "M" + uuid.uuid4().hex[-12:]


@dataclass
class Message:
    """A single chat message.

    ``file_id`` is filled in later for image, file and speech messages;
    ``file_name`` is only used by file messages.
    """

    message_id: str = ""
    chat_session_id: str = ""
    time: str = ""
    message_type: MessageType = MessageType.TEXT
    sender: UserInfo = field(default_factory=UserInfo)
    content: bytes = b""
    file_id: str = ""
    file_name: str = ""

    @classmethod
    def make(
        cls,
        message_type: MessageType | int,
        chat_session_id: str,
        sender: UserInfo,
        content: bytes | str,
        extra_info: str = "",
    ) -> "Message":
        """Build a new message with a fresh id and the current time.

        *extra_info* is the file name for file messages and is ignored
        otherwise. Raises ValueError for an unknown message type.
        """
        kind = MessageType(message_type)
        body = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        return cls(
            message_id=_make_message_id(),
            chat_session_id=chat_session_id,
            time=format_time(get_time()),
            message_type=kind,
            sender=sender,
            content=body,
            file_id="",
            file_name=extra_info if kind is MessageType.FILE else "",
        )


@dataclass
class ChatSessionInfo:
    """A chat session as shown in the session list.

    For a one-to-one chat ``user_id`` is the other party; for a group it is empty.
    """

    chat_session_id: str = ""
    chat_session_name: str = ""
    last_message: Message = field(default_factory=Message)
    avatar: bytes = b""
    user_id: str = ""