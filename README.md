# imchat

Building blocks for an instant-messaging system, usable as a plain Python
library with no third-party dependencies.

## Modules

- `imchat.model` – the client-side chat data model: `MessageType`
  (`TEXT`, `IMAGE`, `FILE`, `SPEECH`), `UserInfo`, `Message` and
  `ChatSessionInfo`, with the helpers `format_time` (local `MM-dd HH:mm:ss`),
  `get_time` (seconds since the epoch), `load_file_bytes` and
  `write_file_bytes`. `Message.make(message_type, chat_session_id, sender,
  content, extra_info)` builds a message with a fresh id (`"M"` followed by
  12 hex digits) and the current formatted time; `extra_info` becomes the file
  name of file messages. An unknown type raises `ValueError`.
- `imchat.logger` – `init_logger(release_mode, file, level)` configures the
  shared `"default-logger"`. In debug mode (`release_mode` false) everything
  from trace level up goes to stdout; in release mode records at or above
  `level` (0 = trace … 6 = off) go to `file`. `get_logger()` returns it and
  raises `RuntimeError` before `init_logger` has been called.
- `imchat.navigation` – `MainWindowState` tracks which `ActiveTab`
  (`SESSION_LIST`, `FRIEND_LIST`, `APPLY_LIST`) is active;
  `switch_to_session`, `switch_to_friend` and `switch_to_apply` change it, and
  `icons()` maps each tab to its active or inactive icon path.
  `get_instance()` returns the single shared state.
- `imchat.session_area` – `SessionFriendArea`, an ordered list of
  `SessionFriendItem` entries (avatar, name, preview text) with `add_item`,
  `clear` and `fill_sample_items` (placeholder entries numbered from 0).
- `imchat.file_service` – `FileService`, a file store rooted at a directory
  (default `./data/`, created if missing). `put_single_file` and
  `put_multi_file` save `FileUpload`s under generated ids; `get_single_file`
  and `get_multi_file` read them back (empty ids are skipped). Results come as
  `FileResponse`: `file_info` is a list of `FileInfo` for uploads, `file_data`
  a dict of `FileDownload` keyed by id for downloads, and on failure `success`
  is false with `errmsg` set.
- `imchat.message_types` – the message service's data and collaborators:
  `ContentType`, `SenderInfo`, `MessageContent`, `MessageInfo`,
  `StoredMessage`, the in-memory `MessageStore` (by session and time) and
  `MessageSearchIndex` (text search), `FileClient` (over a `FileService`),
  `UserClient` (profiles by id), `ServiceResponse` and `ServiceError`.
- `imchat.message_service` – `MessageService` stores incoming messages
  (`on_message`, `on_messages`) and answers `get_history`, `get_recent` and
  `search`. Text messages are indexed for search; image, file and speech data
  is uploaded through the file client and only its id is stored.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Examples

```python
from imchat.file_service import FileService, FileUpload

service = FileService("./data/")
put = service.put_single_file("req-1", FileUpload(file_name="notes.txt", file_size=5, file_content=b"hello"))
file_id = put.file_info[0].file_id

got = service.get_single_file("req-2", file_id)
assert got.success and got.file_data[file_id].file_content == b"hello"
```

```python
from imchat.file_service import FileService
from imchat.message_service import MessageService
from imchat.message_types import FileClient, MessageContent, MessageInfo, SenderInfo, UserClient

alice = SenderInfo(user_id="u1", nickname="alice")
service = MessageService(FileClient(FileService("./data/")), UserClient([alice]))
service.on_message(MessageInfo("m1", "s1", 1735879339, alice, MessageContent(content="hello there")))

found = service.search("req-3", "s1", "hello")
assert [m.message_id for m in found.msg_list] == ["m1"]
```

```python
from imchat.navigation import get_instance, ActiveTab

state = get_instance()
state.switch_to_friend()
assert state.active_tab is ActiveTab.FRIEND_LIST
```

## What it does not do

- There is no network server or command: the file and message services are
  plain Python objects called in-process, with no RPC layer, service
  registration or discovery.
- Message metadata and the search index live in memory only; nothing is kept
  in a database between runs. Only uploaded files are written to disk.
- There is no graphical client: the navigation and session-list modules hold
  state, not windows or widgets.