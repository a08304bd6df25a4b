from datetime import datetime, timezone

import pytest

from imchat.file_service import FileService
from imchat.message_service import (
    FILE_DOWNLOAD_ERROR,
    USER_DOWNLOAD_ERROR,
    USER_FETCH_ERROR,
    MessageService,
)
from imchat.message_types import (
    ContentType,
    FileClient,
    MessageContent,
    MessageInfo,
    MessageSearchIndex,
    MessageStore,
    SenderInfo,
    ServiceError,
    StoredMessage,
    UserClient,
)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _users():
    return UserClient(
        [
            SenderInfo(user_id="用户ID1", nickname="小明"),
            SenderInfo(user_id="用户ID2", nickname="小红"),
            SenderInfo(user_id="用户ID3", nickname="小刚"),
        ]
    )


@pytest.fixture
def service(tmp_path):
    return MessageService(FileClient(FileService(tmp_path / "data")), _users())


def _text(mid, ssid, uid, ts, content):
    return MessageInfo(
        message_id=mid,
        chat_session_id=ssid,
        timestamp=ts,
        sender=SenderInfo(user_id=uid),
        message=MessageContent(message_type=ContentType.STRING, content=content),
    )


def _stored(mid, ssid, uid, when):
    return StoredMessage(mid, ssid, uid, ContentType.STRING, when)


@pytest.fixture
def table_service(tmp_path):
    store = MessageStore()
    store.insert(_stored("消息ID1", "会话ID1", "用户ID1", _utc(2002, 1, 20, 23, 59, 59)))
    store.insert(_stored("消息ID2", "会话ID1", "用户ID2", _utc(2002, 1, 21, 23, 59, 59)))
    store.insert(_stored("消息ID3", "会话ID1", "用户ID3", _utc(2002, 1, 22, 23, 59, 59)))
    store.insert(_stored("消息ID4", "会话ID2", "用户ID4", _utc(2002, 1, 20, 23, 59, 59)))
    store.insert(_stored("消息ID5", "会话ID2", "用户ID5", _utc(2002, 1, 21, 23, 59, 59)))
    return MessageService(FileClient(FileService(tmp_path / "data")), _users(), store=store)


def test_range_over_session(table_service):
    rsp = table_service.get_history(
        "rid", "会话ID1", _utc(2002, 1, 20, 23, 59, 59), _utc(2002, 1, 21, 23, 59, 59)
    )
    assert rsp.success
    assert rsp.request_id == "rid"
    assert [m.message_id for m in rsp.msg_list] == ["消息ID1", "消息ID2"]
    assert [m.sender.nickname for m in rsp.msg_list] == ["小明", "小红"]
    assert all(m.chat_session_id == "会话ID1" for m in rsp.msg_list)


def test_recent_two(table_service):
    rsp = table_service.get_recent("rid", "会话ID1", 2)
    assert rsp.success
    assert [m.message_id for m in rsp.msg_list] == ["消息ID2", "消息ID3"]
    assert rsp.msg_list[-1].timestamp == int(_utc(2002, 1, 22, 23, 59, 59).timestamp())


def test_remove_session_then_empty_history(table_service):
    assert table_service.store.remove("会话ID2") == 2
    rsp = table_service.get_recent("rid", "会话ID2", 5)
    assert rsp.success
    assert rsp.msg_list == []


def test_search_in_session(service):
    service.on_message(_text("消息ID1", "会话ID1", "用户ID1", 1735879339, "今天吃饭了吗？"))
    service.on_message(_text("消息ID2", "会话ID1", "用户ID2", 1735879339 - 10, "吃的兰州拉面"))
    service.on_message(_text("消息ID3", "会话ID2", "用户ID3", 1735879339, "今天吃饭了吗？"))
    service.on_message(_text("消息ID4", "会话ID2", "用户ID1", 1735879339 - 10, "吃的兰州拉面"))

    rsp = service.search("rid", "会话ID1", "兰州拉面")
    assert rsp.success
    assert [m.message_id for m in rsp.msg_list] == ["消息ID2"]
    found = rsp.msg_list[0]
    assert found.message.content == "吃的兰州拉面"
    assert found.message.message_type is ContentType.STRING
    assert found.sender.nickname == "小红"
    assert found.timestamp == 1735879339 - 10

    rsp = service.search("rid", "会话ID1", "兰州")
    assert [m.message_id for m in rsp.msg_list] == ["消息ID2"]


def test_text_message_stored_and_recent(service):
    record = service.on_message(_text("m1", "会话ID1", "用户ID1", 1736500000, "你好"))
    assert record.content == "你好"
    assert "m1" in service.store
    rsp = service.get_recent("r", "会话ID1", 10)
    assert [m.message.content for m in rsp.msg_list] == ["你好"]


def test_image_message_round_trip(service):
    info = MessageInfo(
        "img1",
        "会话ID1",
        1736500000,
        SenderInfo(user_id="用户ID1"),
        MessageContent(message_type=ContentType.IMAGE, file_contents=b"\x89PNG data"),
    )
    record = service.on_message(info)
    assert record.file_id
    assert record.content is None
    rsp = service.get_history("r", "会话ID1", _utc(2025, 1, 7), _utc(2025, 1, 19))
    assert rsp.success
    msg = rsp.msg_list[0].message
    assert msg.message_type is ContentType.IMAGE
    assert msg.file_id == record.file_id
    assert msg.file_contents == b"\x89PNG data"
    assert len(service.index) == 0


def test_file_message_keeps_name_and_size(service):
    info = MessageInfo(
        "f1",
        "会话ID1",
        1736500000,
        SenderInfo(user_id="用户ID2"),
        MessageContent(
            message_type=ContentType.FILE,
            file_name="Makefile",
            file_size=7,
            file_contents=b"all: x\n",
        ),
    )
    service.on_message(info)
    rsp = service.get_recent("r", "会话ID1", 1)
    msg = rsp.msg_list[0].message
    assert msg.file_name == "Makefile"
    assert msg.file_size == 7
    assert msg.file_contents == b"all: x\n"


def test_speech_message_round_trip(service):
    info = MessageInfo(
        "s1",
        "会话ID1",
        1736500000,
        SenderInfo(user_id="用户ID3"),
        MessageContent(message_type=ContentType.SPEECH, file_contents=b"pcm"),
    )
    record = service.on_message(info)
    assert record.file_size is None
    msg = service.get_recent("r", "会话ID1", 1).msg_list[0].message
    assert msg.message_type is ContentType.SPEECH
    assert msg.file_contents == b"pcm"


def test_unknown_sender_gets_empty_profile(service):
    service.on_message(_text("m1", "会话ID1", "stranger", 1736500000, "hi"))
    rsp = service.get_recent("r", "会话ID1", 1)
    assert rsp.msg_list[0].sender == SenderInfo()


def test_unknown_type_rejected(service):
    info = MessageInfo("x", "会话ID1", 1, SenderInfo(user_id="用户ID1"), MessageContent(message_type=9))
    with pytest.raises(ValueError):
        service.on_message(info)
    assert len(service.store) == 0


def test_duplicate_message_rejected(service):
    service.on_message(_text("m1", "会话ID1", "用户ID1", 1, "a"))
    with pytest.raises(ValueError):
        service.on_message(_text("m1", "会话ID1", "用户ID1", 2, "b"))
    assert len(service.store) == 1


def test_upload_fails_without_file_service():
    svc = MessageService(FileClient(None), _users())
    info = MessageInfo(
        "img", "会话ID1", 1, SenderInfo(user_id="用户ID1"),
        MessageContent(message_type=ContentType.IMAGE, file_contents=b"x"),
    )
    with pytest.raises(ServiceError):
        svc.on_message(info)
    assert "img" not in svc.store


def test_history_fails_without_file_service():
    store = MessageStore()
    store.insert(_stored("m1", "会话ID1", "用户ID1", _utc(2025, 1, 10)))
    svc = MessageService(FileClient(None), _users(), store=store)
    rsp = svc.get_history("rid", "会话ID1", _utc(2025, 1, 7), _utc(2025, 1, 19))
    assert rsp.success is False
    assert rsp.errmsg == FILE_DOWNLOAD_ERROR
    assert rsp.request_id == "rid"
    assert rsp.msg_list == []
    rsp = svc.get_recent("rid", "会话ID1", 3)
    assert rsp.errmsg == FILE_DOWNLOAD_ERROR


def test_missing_stored_file_fails_history(service):
    service.store.insert(
        StoredMessage("m1", "会话ID1", "用户ID1", ContentType.IMAGE, _utc(2025, 1, 10), file_id="gone")
    )
    rsp = service.get_recent("rid", "会话ID1", 1)
    assert rsp.success is False
    assert rsp.errmsg == FILE_DOWNLOAD_ERROR


def test_user_service_unavailable(tmp_path):
    index = MessageSearchIndex()
    index.append_data("用户ID1", "m1", 1736500000, "会话ID1", "兰州拉面")
    store = MessageStore()
    store.insert(_stored("m1", "会话ID1", "用户ID1", _utc(2025, 1, 10)))
    svc = MessageService(FileClient(FileService(tmp_path / "d")), UserClient(None), store=store, index=index)

    history = svc.get_history("r", "会话ID1", _utc(2025, 1, 7), _utc(2025, 1, 19))
    assert (history.success, history.errmsg) == (False, USER_FETCH_ERROR)
    recent = svc.get_recent("r", "会话ID1", 2)
    assert (recent.success, recent.errmsg) == (False, USER_DOWNLOAD_ERROR)
    found = svc.search("r", "会话ID1", "兰州")
    assert (found.success, found.errmsg) == (False, USER_DOWNLOAD_ERROR)
    assert found.msg_list == []


def test_on_messages_in_order(service):
    records = service.on_messages(
        [
            _text("a", "会话ID1", "用户ID1", 100, "one"),
            _text("b", "会话ID1", "用户ID2", 200, "two"),
        ]
    )
    assert [r.message_id for r in records] == ["a", "b"]
    assert [m.message_id for m in service.get_recent("r", "会话ID1", 5).msg_list] == ["a", "b"]