from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from sheetsync.realtime.handshake import AuthHandshake


class ConnectionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTH_SUCCESS = "auth_success"
    AUTH_REFUSED = "auth_refused"


class Connection:
    """One live Socket.IO client, identified by its sid."""

    def __init__(self, sid: str):
        self.sid = sid
        self.state = ConnectionState.UNAUTHENTICATED
        self.user_id: Optional[int] = None
        self.room_id: Optional[str] = None
        self.closed = False
        self.handshake: Optional[AuthHandshake] = None
        # Inbound events of one connection are handled one at a time
        self.inbound_lock = asyncio.Lock()

    @property
    def id(self) -> str:
        return self.sid

    @property
    def is_authenticated(self) -> bool:
        return self.state is ConnectionState.AUTH_SUCCESS and not self.closed

    def __repr__(self) -> str:
        return f"Connection(sid={self.sid!r}, state={self.state.value}, room={self.room_id!r})"
