import asyncio
import logging

import pytest
from socketio.exceptions import TimeoutError as ReplyTimeout
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sheetsync.database import init_db
from sheetsync.errors import InvalidToken
from sheetsync.models.sheet import AccessGrant, AccessRight
from sheetsync.realtime.connection import Connection, ConnectionState
from sheetsync.realtime.registry import ConnectionRegistry
from sheetsync.realtime.server import CollabServer


class FakeSocketServer:
    """Stands in for socketio.AsyncServer and records what the server sends."""

    def __init__(self) -> None:
        self.handlers = {}
        self.emitted: list[tuple[str, object, str]] = []
        self.calls: list[tuple[str, object, str]] = []
        self.disconnected: list[str] = []
        # sid -> acknowledgement returned for the next call; missing sid never answers
        self.replies: dict[str, object] = {}

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None, to=None, **kwargs) -> None:
        self.emitted.append((event, data, to))

    async def call(self, event, data=None, to=None, timeout=60, **kwargs):
        self.calls.append((event, data, to))
        if to in self.replies:
            return self.replies[to]
        await asyncio.sleep(timeout)
        raise ReplyTimeout()

    async def disconnect(self, sid, **kwargs) -> None:
        self.disconnected.append(sid)
        handler = self.handlers.get("disconnect")
        if handler is not None:
            await handler(sid, "server disconnect")

    def received(self, sid: str) -> list[tuple[str, object]]:
        return [(event, data) for event, data, to in self.emitted if to == sid]

    def received_names(self, sid: str) -> list[str]:
        return [event for event, _ in self.received(sid)]


class FakeTokens:
    def __init__(self, users: dict[str, int]) -> None:
        self.users = users
        self.verified: list[str] = []

    def verify(self, token: str) -> int:
        self.verified.append(token)
        try:
            return self.users[token]
        except (KeyError, TypeError):
            raise InvalidToken("unknown token")


class FakeAccess:
    def __init__(self, grants: set[tuple[int, int]]) -> None:
        self.grants = grants
        self.lookups: list[tuple[int, int]] = []

    def lookup(self, user_id: int, sheet_id: int):
        self.lookups.append((user_id, sheet_id))
        if (user_id, sheet_id) in self.grants:
            return AccessGrant(user_id=user_id, sheet_id=sheet_id, access_right=AccessRight.WRITER)
        return None


@pytest.fixture
def sheetsync_caplog(caplog):
    """caplog for the sheetsync loggers, which do not propagate to the root logger."""
    logger = logging.getLogger("sheetsync")
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture
def sio():
    return FakeSocketServer()


@pytest.fixture
def tokens():
    return FakeTokens({"token-42": 42, "token-43": 43, "token-44": 44})


@pytest.fixture
def access():
    return FakeAccess({(42, 7), (43, 7), (44, 8)})


@pytest.fixture
def registry(sio):
    return ConnectionRegistry(sio, reply_timeout=0.05, include_origin=False)


@pytest.fixture
def collab(sio, tokens, access):
    return CollabServer(sio, tokens, access, reply_timeout=0.05, include_origin=False)


def authenticated(registry: ConnectionRegistry, sid: str, user_id: int, room_id: str) -> Connection:
    """Register a connection that already went through the handshake."""
    conn = Connection(sid)
    registry.register(conn)
    conn.user_id = user_id
    conn.state = ConnectionState.AUTH_SUCCESS
    registry.join_room(conn, room_id)
    return conn


async def connect(collab: CollabServer, sid: str) -> Connection:
    """Connect a client and run its handshake to completion."""
    await collab.on_connect(sid, {})
    conn = collab.registry.get(sid)
    await conn.handshake.wait()
    return conn


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
