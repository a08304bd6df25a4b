"""File storage service: stores uploaded files under generated ids and serves them back."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

__all__ = [
    "FileUpload",
    "FileInfo",
    "FileDownload",
    "FileResponse",
    "FileService",
    "READ_ERROR",
    "WRITE_ERROR",
]

_log = logging.getLogger(__name__)

READ_ERROR = "读取文件数据失败"
WRITE_ERROR = "写入文件数据失败"
DEFAULT_STORAGE_PATH = "./data/"


@dataclass
class FileUpload:
    """A file sent for storage."""

    file_name: str
    file_size: int
    file_content: bytes


@dataclass
class FileInfo:
    """Metadata of a stored file."""

    file_id: str
    file_size: int
    file_name: str


@dataclass
class FileDownload:
    """A stored file's content, keyed by its id."""

    file_id: str
    file_content: bytes


@dataclass
class FileResponse:
    """Result of a service call.

    Uploads fill ``file_info`` in request order; downloads fill ``file_data``
    keyed by file id. On failure ``success`` is false and ``errmsg`` says why.
    """

    request_id: str
    success: bool = True
    errmsg: str = ""
    file_info: list[FileInfo] = field(default_factory=list)
    file_data: dict[str, FileDownload] = field(default_factory=dict)

    def fail(self, errmsg: str) -> "FileResponse":
        self.success = False
        self.errmsg = errmsg
        return self


def _new_file_id() -> str:
    return uuid.uuid4().hex


class FileService:
    """Stores files in a directory, one file per id."""

    def __init__(self, storage_path: Union[str, Path] = DEFAULT_STORAGE_PATH) -> None:
        self.storage_path = Path(storage_path)
        os.makedirs(self.storage_path, mode=0o775, exist_ok=True)

    def _path(self, file_id: str) -> Path:
        return self.storage_path / file_id

    def _read(self, file_id: str) -> bytes:
        return self._path(file_id).read_bytes()

    def _store(self, content: bytes) -> str:
        file_id = _new_file_id()
        self._path(file_id).write_bytes(content)
        return file_id

    def get_single_file(self, request_id: str, file_id: str) -> FileResponse:
        """Return the content of one stored file."""
        response = FileResponse(request_id)
        try:
            body = self._read(file_id)
        except OSError:
            _log.error("%s 请求, %s", request_id, READ_ERROR)
            return response.fail(READ_ERROR)
        response.file_data[file_id] = FileDownload(file_id, body)
        return response

    def get_multi_file(self, request_id: str, file_ids: Iterable[str]) -> FileResponse:
        """Return the contents of several stored files; empty ids are skipped."""
        response = FileResponse(request_id)
        for file_id in file_ids:
            if not file_id:
                continue
            try:
                body = self._read(file_id)
            except OSError:
                _log.error("%s 请求, %s", request_id, READ_ERROR)
                return response.fail(READ_ERROR)
            response.file_data[file_id] = FileDownload(file_id, body)
        return response

    def put_single_file(self, request_id: str, upload: FileUpload) -> FileResponse:
        """Store one file under a new id."""
        return self.put_multi_file(request_id, [upload])

    def put_multi_file(self, request_id: str, uploads: Iterable[FileUpload]) -> FileResponse:
        """Store several files, each under its own new id, in request order."""
        response = FileResponse(request_id)
        for upload in uploads:
            try:
                file_id = self._store(upload.file_content)
            except OSError:
                _log.error("%s 请求, %s", request_id, WRITE_ERROR)
                return response.fail(WRITE_ERROR)
            response.file_info.append(FileInfo(file_id, upload.file_size, upload.file_name))
        return response