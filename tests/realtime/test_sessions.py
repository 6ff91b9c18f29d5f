import json

import pytest

from application.ports.realtime import RESERVED_IDENTITY_KEYS, stamp_identity
from application.services.chat_service import ChatApplicationService
from application.services.realtime_service import ChatSession, WhiteboardSession
from infrastructure.realtime.registry import RoomRegistry
from infrastructure.realtime.room import encode_frame


class FakeConnection:
    def __init__(self):
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    def frames(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def chat_service(uow_factory):
    return ChatApplicationService(uow_factory)


async def open_chat(registry, chat_service, user_id, name, team_id="t1"):
    conn = FakeConnection()
    session = ChatSession(
        chat_service=chat_service,
        registry=registry,
        room_key=team_id,
        connection=conn,
        user_id=user_id,
        name=name,
    )
    await session.open()
    return session, conn


async def open_board(registry, user_id, name, board_id="b1"):
    conn = FakeConnection()
    session = WhiteboardSession(registry=registry, room_key=board_id, connection=conn, user_id=user_id, name=name)
    await session.open()
    return session, conn


@pytest.mark.asyncio
async def test_whiteboard_relay_overwrites_identity():
    registry = RoomRegistry("whiteboard")
    a, a_conn = await open_board(registry, "A", "Alice")
    b, b_conn = await open_board(registry, "B", "Bob")
    a_conn.clear()
    b_conn.clear()

    await a.handle(json.dumps({"x": 1, "y": 2, "user_id": "B", "name": "Mallory"}))

    assert b_conn.frames() == [{"x": 1, "y": 2, "user_id": "A", "name": "Alice"}]
    assert a_conn.sent == []


@pytest.mark.asyncio
async def test_whiteboard_drops_unparseable_and_non_object_frames():
    registry = RoomRegistry("whiteboard")
    a, _ = await open_board(registry, "A", "Alice")
    _, b_conn = await open_board(registry, "B", "Bob")
    b_conn.clear()

    await a.handle("{not json")
    await a.handle("[1, 2, 3]")
    await a.handle('"just a string"')

    assert b_conn.sent == []


@pytest.mark.asyncio
async def test_whiteboard_drops_frames_with_non_standard_constants():
    registry = RoomRegistry("whiteboard")
    a, _ = await open_board(registry, "A", "Alice")
    _, b_conn = await open_board(registry, "B", "Bob")
    b_conn.clear()

    await a.handle('{"x": NaN, "y": 1}')
    await a.handle('{"x": Infinity}')
    await a.handle('{"x": [-Infinity]}')
    assert b_conn.sent == []

    await a.handle('{"x": 1.5}')
    assert b_conn.frames() == [{"x": 1.5, "user_id": "A", "name": "Alice"}]


def test_encode_frame_refuses_nan():
    with pytest.raises(ValueError):
        encode_frame({"x": float("nan")})


def test_stamp_identity_overwrites_reserved_keys_on_a_copy():
    incoming = {"user_id": "B", "name": "Mallory", "shape": "rect"}

    stamped = stamp_identity(incoming, user_id="A", name="Alice")

    assert {k: stamped[k] for k in RESERVED_IDENTITY_KEYS} == {"user_id": "A", "name": "Alice"}
    assert stamped["shape"] == "rect"
    assert incoming["user_id"] == "B"


@pytest.mark.asyncio
async def test_whiteboard_join_and_leave_frames():
    registry = RoomRegistry("whiteboard")
    a, a_conn = await open_board(registry, "A", "Alice")
    assert a_conn.frames() == [{"type": "users", "users": [{"user_id": "A", "name": "Alice"}]}]

    b, b_conn = await open_board(registry, "B", "Bob")
    users = [{"user_id": "A", "name": "Alice"}, {"user_id": "B", "name": "Bob"}]
    assert a_conn.frames()[-1] == {"type": "join", "user_id": "B", "name": "Bob", "users": users}
    # 加入者只收到私有的 users 快照
    assert b_conn.frames() == [{"type": "users", "users": users}]

    await b.close()
    assert a_conn.frames()[-1] == {
        "type": "leave",
        "user_id": "B",
        "name": "Bob",
        "users": [{"user_id": "A", "name": "Alice"}],
    }
    await a.close()
    assert "b1" not in registry


@pytest.mark.asyncio
async def test_chat_presence_goes_to_everyone():
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service=None, user_id="A", name="Alice")
    assert a_conn.frames() == [{"type": "presence", "users": [{"user_id": "A", "name": "Alice"}]}]

    b, b_conn = await open_chat(registry, chat_service=None, user_id="B", name="Bob")
    expected = {
        "type": "presence",
        "users": [{"user_id": "A", "name": "Alice"}, {"user_id": "B", "name": "Bob"}],
    }
    assert a_conn.frames()[-1] == expected
    assert b_conn.frames() == [expected]

    await b.close()
    assert a_conn.frames()[-1] == {"type": "presence", "users": [{"user_id": "A", "name": "Alice"}]}
    await a.close()
    assert "t1" not in registry


@pytest.mark.asyncio
async def test_chat_message_length_boundary(store, chat_service):
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    _, b_conn = await open_chat(registry, chat_service, "B", "Bob")
    a_conn.clear()
    b_conn.clear()

    await a.handle(json.dumps({"type": "message", "content": "x" * 5000}))
    assert len(store.chat_messages) == 1
    assert [f["type"] for f in a_conn.frames()] == ["message"]
    assert [f["type"] for f in b_conn.frames()] == ["message"]

    await a.handle(json.dumps({"type": "message", "content": "x" * 5001}))
    await a.handle(json.dumps({"type": "message", "content": "   "}))
    assert len(store.chat_messages) == 1
    assert len(a_conn.sent) == 1
    assert len(b_conn.sent) == 1


@pytest.mark.asyncio
async def test_chat_message_is_trimmed_and_stamped(store, chat_service):
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    a_conn.clear()

    await a.handle(json.dumps({"type": "message", "content": "  hello  "}))

    frame = a_conn.frames()[0]
    message = frame["message"]
    assert message["content"] == "hello"
    assert message["user_id"] == "A"
    assert message["user_name"] == "Alice"
    assert message["team_id"] == "t1"
    assert message["id"] == store.chat_messages[0].id
    assert message["created_at"].endswith("Z")


@pytest.mark.asyncio
async def test_chat_broadcasts_even_when_persistence_times_out(store, chat_service, monkeypatch):
    from core.config import settings

    monkeypatch.setattr(settings.realtime, "chat_persist_timeout_s", 0.01)
    store.chat_delay = 1.0
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    a_conn.clear()

    await a.handle(json.dumps({"type": "message", "content": "still delivered"}))

    assert store.chat_messages == []
    assert a_conn.frames()[0]["message"]["content"] == "still delivered"


@pytest.mark.asyncio
async def test_chat_broadcasts_even_when_persistence_fails(store, chat_service):
    store.chat_error = RuntimeError("db down")
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    a_conn.clear()

    await a.handle(json.dumps({"type": "message", "content": "hi"}))

    assert a_conn.frames()[0]["type"] == "message"


@pytest.mark.asyncio
async def test_chat_typing_goes_to_others_only(chat_service):
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    _, b_conn = await open_chat(registry, chat_service, "B", "Bob")
    a_conn.clear()
    b_conn.clear()

    await a.handle(json.dumps({"type": "typing"}))

    assert a_conn.sent == []
    assert b_conn.frames() == [{"type": "typing", "user_id": "A", "name": "Alice"}]


@pytest.mark.asyncio
async def test_chat_ignores_unknown_and_malformed_frames(store, chat_service):
    registry = RoomRegistry("chat")
    a, a_conn = await open_chat(registry, chat_service, "A", "Alice")
    a_conn.clear()

    await a.handle(json.dumps({"type": "reaction", "content": "+1"}))
    await a.handle(json.dumps({"type": "message", "content": 42}))
    await a.handle("not json")

    assert a_conn.sent == []
    assert store.chat_messages == []
