"""Data types and collaborators used by the message storage service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Iterable, Mapping, Optional, Union

from imchat.file_service import FileService, FileUpload

__all__ = [
    "ContentType",
    "SenderInfo",
    "MessageContent",
    "MessageInfo",
    "StoredMessage",
    "MessageStore",
    "MessageSearchIndex",
    "FileClient",
    "UserClient",
    "ServiceResponse",
    "ServiceError",
    "to_datetime",
]

_log = logging.getLogger(__name__)

TimeLike = Union[int, float, datetime]


def to_datetime(value: TimeLike) -> datetime:
    """Turn seconds since the epoch (or a datetime) into an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class ServiceError(RuntimeError):
    """A call to another service failed or no instance of it was available."""


class ContentType(IntEnum):
    """Kind of message content."""

    STRING = 0
    IMAGE = 1
    FILE = 2
    SPEECH = 3


@dataclass
class SenderInfo:
    """Public profile of the user who sent a message."""

    user_id: str = ""
    nickname: str = ""
    description: str = ""
    phone: str = ""
    avatar: bytes = b""


@dataclass
class MessageContent:
    """The body of a message.

    Text messages use ``content``; image, file and speech messages carry their
    data in ``file_contents`` and, once stored, a ``file_id``. ``file_name``
    and ``file_size`` belong to file messages.
    """

    message_type: ContentType = ContentType.STRING
    content: str = ""
    file_id: str = ""
    file_name: str = ""
    file_size: int = 0
    file_contents: bytes = b""


@dataclass
class MessageInfo:
    """A complete message as exchanged between client and services."""

    message_id: str
    chat_session_id: str
    timestamp: int
    sender: SenderInfo = field(default_factory=SenderInfo)
    message: MessageContent = field(default_factory=MessageContent)


@dataclass
class StoredMessage:
    """The metadata of a message as kept in the message store.

    File data itself lives in the file service; only its id is kept here.
    Optional columns are ``None`` when they do not apply.
    """

    message_id: str
    session_id: str
    user_id: str
    message_type: ContentType
    create_time: datetime
    content: Optional[str] = None
    file_id: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None

    def __post_init__(self) -> None:
        self.message_type = ContentType(self.message_type)
        self.create_time = to_datetime(self.create_time)

    @property
    def timestamp(self) -> int:
        """Creation time in seconds since the epoch."""
        return int(self.create_time.timestamp())

    @classmethod
    def from_message_info(
        cls,
        info: MessageInfo,
        file_id: str = "",
        file_name: str = "",
        file_size: int = 0,
    ) -> "StoredMessage":
        """Build the stored record of *info*, with the id its file was stored under."""
        kind = ContentType(info.message.message_type)
        return cls(
            message_id=info.message_id,
            session_id=info.chat_session_id,
            user_id=info.sender.user_id,
            message_type=kind,
            create_time=to_datetime(info.timestamp),
            content=info.message.content if kind is ContentType.STRING else None,
            file_id=file_id or None,
            file_name=file_name or None,
            file_size=file_size if kind is ContentType.FILE else None,
        )

    def to_message_info(
        self,
        sender: SenderInfo,
        file_data: Mapping[str, bytes] | None = None,
    ) -> MessageInfo:
        """Rebuild a full message from this record, its sender and downloaded file data."""
        files = file_data or {}
        body = MessageContent(message_type=self.message_type)
        if self.message_type is ContentType.STRING:
            if self.content is not None:
                body.content = self.content
        else:
            if self.file_id:
                body.file_id = self.file_id
                body.file_contents = files.get(self.file_id, b"")
            if self.message_type is ContentType.FILE:
                if self.file_size is not None:
                    body.file_size = self.file_size
                if self.file_name is not None:
                    body.file_name = self.file_name
        return MessageInfo(
            message_id=self.message_id,
            chat_session_id=self.session_id,
            timestamp=self.timestamp,
            sender=sender,
            message=body,
        )


def _by_time(messages: Iterable[StoredMessage]) -> list[StoredMessage]:
    return sorted(messages, key=lambda m: m.create_time)


class MessageStore:
    """Message metadata, queryable by session and time."""

    def __init__(self) -> None:
        self._messages: dict[str, StoredMessage] = {}

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._messages

    def insert(self, message: StoredMessage) -> None:
        """Add a message; raises ValueError if its id is already stored."""
        if message.message_id in self._messages:
            raise ValueError(f"message {message.message_id!r} already stored")
        self._messages[message.message_id] = message

    def remove(self, session_id: str) -> int:
        """Delete every message of a session and return how many went."""
        doomed = [mid for mid, m in self._messages.items() if m.session_id == session_id]
        for mid in doomed:
            del self._messages[mid]
        return len(doomed)

    def _session(self, session_id: str) -> list[StoredMessage]:
        return _by_time(m for m in self._messages.values() if m.session_id == session_id)

    def recent(self, session_id: str, count: int) -> list[StoredMessage]:
        """The newest *count* messages of a session, oldest first."""
        if count <= 0:
            return []
        return self._session(session_id)[-count:]

    def range(self, session_id: str, start: TimeLike, end: TimeLike) -> list[StoredMessage]:
        """Messages of a session created between *start* and *end* inclusive, oldest first."""
        lower, upper = to_datetime(start), to_datetime(end)
        return [m for m in self._session(session_id) if lower <= m.create_time <= upper]


class MessageSearchIndex:
    """Full-text index over text messages."""

    def __init__(self) -> None:
        self._entries: dict[str, StoredMessage] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def append_data(
        self,
        user_id: str,
        message_id: str,
        create_time: TimeLike,
        chat_session_id: str,
        content: str,
    ) -> StoredMessage:
        """Index a text message; the same id again replaces the earlier entry."""
        entry = StoredMessage(
            message_id=message_id,
            session_id=chat_session_id,
            user_id=user_id,
            message_type=ContentType.STRING,
            create_time=to_datetime(create_time),
            content=content,
        )
        self._entries[message_id] = entry
        return entry

    def search(self, key: str, chat_session_id: str) -> list[StoredMessage]:
        """Text messages of a session containing any whitespace-separated term of *key*."""
        terms = key.split()
        if not terms:
            return []
        return _by_time(
            m
            for m in self._entries.values()
            if m.session_id == chat_session_id
            and m.content is not None
            and any(term in m.content for term in terms)
        )


class FileClient:
    """Downloads and uploads file data through a file service.

    With no service every call raises ServiceError, as when no instance of the
    file service is reachable.
    """

    def __init__(self, service: FileService | None) -> None:
        self.service = service

    def _require(self) -> FileService:
        if self.service is None:
            _log.error("没有可供访问的文件子服务节点")
            raise ServiceError("没有可供访问的文件子服务节点")
        return self.service

    def get_files(self, request_id: str, file_ids: Iterable[str]) -> dict[str, bytes]:
        """Fetch the contents of several files, keyed by id."""
        response = self._require().get_multi_file(request_id, list(file_ids))
        if not response.success:
            _log.error("文件管理子服务调用失败 %s", response.errmsg)
            raise ServiceError(response.errmsg)
        return {fid: data.file_content for fid, data in response.file_data.items()}

    def put_file(self, file_name: str, body: bytes, file_size: int) -> str:
        """Store one file and return the id it was given."""
        response = self._require().put_single_file("", FileUpload(file_name, file_size, body))
        if not response.success:
            _log.error("文件管理子服务调用失败 %s", response.errmsg)
            raise ServiceError(response.errmsg)
        return response.file_info[0].file_id


class UserClient:
    """Looks up user profiles by id.

    Passing ``None`` as *users* models an unreachable user service: every
    lookup then raises ServiceError.
    """

    def __init__(self, users: Iterable[SenderInfo] | None = ()) -> None:
        self._users: dict[str, SenderInfo] | None = (
            None if users is None else {u.user_id: u for u in users}
        )

    def add(self, user: SenderInfo) -> None:
        """Register or replace a user profile."""
        if self._users is None:
            raise ServiceError("没有可供访问的用户子服务节点")
        self._users[user.user_id] = user

    def get_users(self, request_id: str, user_ids: Iterable[str]) -> dict[str, SenderInfo]:
        """Profiles of the known users among *user_ids*, keyed by id."""
        if self._users is None:
            _log.error("%s 没有可供访问的用户子服务节点", request_id)
            raise ServiceError("没有可供访问的用户子服务节点")
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}


@dataclass
class ServiceResponse:
    """Result of a message service call."""

    request_id: str
    success: bool = True
    errmsg: str = ""
    msg_list: list[MessageInfo] = field(default_factory=list)

    def fail(self, errmsg: str) -> "ServiceResponse":
        """Mark the response failed with *errmsg*, dropping any messages."""
        self.success = False
        self.errmsg = errmsg
        self.msg_list = []
        return self