"""Message storage service: persists chat messages and serves history, recent and search queries."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from imchat.message_types import (
    ContentType,
    FileClient,
    MessageInfo,
    MessageSearchIndex,
    MessageStore,
    SenderInfo,
    ServiceError,
    ServiceResponse,
    StoredMessage,
    TimeLike,
    UserClient,
)

__all__ = [
    "MessageService",
    "FILE_DOWNLOAD_ERROR",
    "USER_FETCH_ERROR",
    "USER_DOWNLOAD_ERROR",
]

_log = logging.getLogger(__name__)

FILE_DOWNLOAD_ERROR = "批量文件数据下载失败"
USER_FETCH_ERROR = "批量用户数据获取失败"
USER_DOWNLOAD_ERROR = "批量用户数据下载失败"
TYPE_ERROR = "消息类型错误"

_UPLOAD_ERRORS = {
    ContentType.IMAGE: "上传图片到文件子服务失败",
    ContentType.FILE: "上传文件到文件子服务失败",
    ContentType.SPEECH: "上传语音到文件子服务失败",
}


class MessageService:
    """Stores incoming messages and answers queries about a chat session.

    Message metadata lives in *store*, text messages are also indexed in
    *index* for keyword search, file data goes through *files* and sender
    profiles are looked up through *users*.
    """

    def __init__(
        self,
        files: FileClient,
        users: UserClient,
        store: Optional[MessageStore] = None,
        index: Optional[MessageSearchIndex] = None,
    ) -> None:
        self.files = files
        self.users = users
        self.store = store if store is not None else MessageStore()
        self.index = index if index is not None else MessageSearchIndex()

    def _assemble(
        self,
        request_id: str,
        messages: list[StoredMessage],
        *,
        with_files: bool,
        user_error: str,
    ) -> ServiceResponse:
        response = ServiceResponse(request_id)
        file_data: dict[str, bytes] = {}
        if with_files:
            file_ids = sorted({m.file_id for m in messages if m.file_id})
            try:
                file_data = self.files.get_files(request_id, file_ids)
            except ServiceError:
                _log.error("%s %s", request_id, FILE_DOWNLOAD_ERROR)
                return response.fail(FILE_DOWNLOAD_ERROR)
        try:
            users = self.users.get_users(request_id, {m.user_id for m in messages})
        except ServiceError:
            _log.error("%s %s", request_id, user_error)
            return response.fail(user_error)
        response.msg_list = [
            m.to_message_info(users.get(m.user_id, SenderInfo()), file_data)
            for m in messages
        ]
        return response

    def get_history(
        self,
        request_id: str,
        chat_session_id: str,
        start_time: TimeLike,
        over_time: TimeLike,
    ) -> ServiceResponse:
        """Messages of a session created between *start_time* and *over_time*, with file data and senders."""
        messages = self.store.range(chat_session_id, start_time, over_time)
        return self._assemble(request_id, messages, with_files=True, user_error=USER_FETCH_ERROR)

    def get_recent(self, request_id: str, chat_session_id: str, count: int) -> ServiceResponse:
        """The newest *count* messages of a session, with file data and senders."""
        messages = self.store.recent(chat_session_id, count)
        return self._assemble(request_id, messages, with_files=True, user_error=USER_DOWNLOAD_ERROR)

    def search(self, request_id: str, chat_session_id: str, key: str) -> ServiceResponse:
        """Text messages of a session matching *key*, with their senders."""
        messages = self.index.search(key, chat_session_id)
        return self._assemble(request_id, messages, with_files=False, user_error=USER_DOWNLOAD_ERROR)

    def _upload(self, kind: ContentType, file_name: str, body: bytes, size: int) -> str:
        try:
            return self.files.put_file(file_name, body, size)
        except ServiceError:
            _log.error(_UPLOAD_ERRORS[kind])
            raise

    def on_message(self, message: MessageInfo) -> StoredMessage:
        """Persist a newly sent message and return its stored record.

        Text is indexed for search; image, file and speech data is uploaded
        to the file service and only its id is kept. Raises ServiceError if
        an upload fails and ValueError for an unknown message type.
        """
        _log.debug("收到新消息，进行存储处理")
        body = message.message
        try:
            kind = ContentType(body.message_type)
        except ValueError:
            _log.error(TYPE_ERROR)
            raise ValueError(f"{TYPE_ERROR}: {body.message_type!r}") from None

        file_id = ""
        file_name = ""
        file_size = 0
        if kind is ContentType.STRING:
            self.index.append_data(
                message.sender.user_id,
                message.message_id,
                message.timestamp,
                message.chat_session_id,
                body.content,
            )
        elif kind is ContentType.FILE:
            file_name = body.file_name
            file_size = body.file_size
            file_id = self._upload(kind, file_name, body.file_contents, file_size)
        else:
            file_id = self._upload(kind, "", body.file_contents, len(body.file_contents))

        record = StoredMessage.from_message_info(message, file_id, file_name, file_size)
        _log.debug("插入的数据中文件长度为 %s ", file_size)
        try:
            self.store.insert(record)
        except ValueError:
            _log.error("向数据库中插入新消息失败")
            raise
        return record

    def on_messages(self, messages: Iterable[MessageInfo]) -> list[StoredMessage]:
        """Persist several messages in order."""
        return [self.on_message(m) for m in messages]