from __future__ import annotations

from typing import Any, Dict, Optional, Set

import socketio
from socketio.exceptions import TimeoutError as ReplyTimeout

from sheetsync import config
from sheetsync.log import get_logger
from sheetsync.realtime.connection import Connection
from sheetsync.realtime.protocol import ProtocolMessage

logger = get_logger(__name__)


class ConnectionRegistry:
    """
    Live connections and sheet rooms of one Socket.IO server.

    Membership is only mutated by the synchronous methods below, so on the
    event loop a mutation never interleaves with another one, and a broadcast
    works on a snapshot taken without yielding.
    """

    def __init__(
        self,
        sio: socketio.AsyncServer,
        *,
        reply_timeout: Optional[float] = None,
        include_origin: Optional[bool] = None,
    ):
        self.sio = sio
        self.reply_timeout = config.AUTH_REPLY_TIMEOUT if reply_timeout is None else reply_timeout
        self.include_origin = config.BROADCAST_INCLUDE_ORIGIN if include_origin is None else include_origin
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Set[Connection]] = {}

    # ---------- membership ----------

    def register(self, conn: Connection) -> None:
        self.connections.setdefault(conn.sid, conn)

    def unregister(self, conn: Connection) -> None:
        """Forget the connection and drop it from its room. Safe to call repeatedly."""
        conn.closed = True
        self.leave_room(conn)
        if self.connections.get(conn.sid) is conn:
            del self.connections[conn.sid]

    def get(self, sid: str) -> Optional[Connection]:
        return self.connections.get(sid)

    def is_registered(self, conn: Connection) -> bool:
        return not conn.closed and self.connections.get(conn.sid) is conn

    def join_room(self, conn: Connection, room_id: str) -> None:
        if not self.is_registered(conn):
            raise ValueError(f"{conn!r} is not registered")
        # Only authenticated connections may be room members
        if not conn.is_authenticated:
            raise ValueError(f"{conn!r} has not completed the handshake")
        if conn.room_id is not None and conn.room_id != room_id:
            self.leave_room(conn)
        conn.room_id = room_id
        self.rooms.setdefault(room_id, set()).add(conn)

    def leave_room(self, conn: Connection) -> None:
        room_id = conn.room_id
        if room_id is None:
            return
        members = self.rooms.get(room_id)
        if members is not None:
            members.discard(conn)
            if not members:
                del self.rooms[room_id]
        conn.room_id = None

    def members(self, room_id: str) -> Set[Connection]:
        return set(self.rooms.get(room_id, ()))

    def is_member(self, conn: Connection, room_id: str) -> bool:
        return conn in self.rooms.get(room_id, ())

    # ---------- transport ----------

    async def emit(self, conn: Connection, message: ProtocolMessage, payload: Any = None) -> bool:
        """
        Send `message` to one connection.

        Messages with a reply handler wait for the client's acknowledgement and
        hand `(error, reply)` to that handler. Returns False when nothing was
        sent; transport failures are logged, never raised.
        """
        if not self.is_registered(conn):
            logger.debug("Skipping %s, connection already closed", message.name,
                         extra={"connection_id": conn.sid})
            return False

        if not message.expects_reply:
            try:
                await self.sio.emit(message.name, payload, to=conn.sid)
            except Exception as e:
                logger.warning("Failed to send %s: %s", message.name, e, extra={"connection_id": conn.sid})
                return False
            return True

        on_reply = message.reply_handler(conn)
        try:
            reply = await self.sio.call(message.name, payload, to=conn.sid, timeout=self.reply_timeout)
        except ReplyTimeout as e:
            await on_reply(e, None)
            return True
        except Exception as e:
            logger.warning("No reply to %s: %s", message.name, e, extra={"connection_id": conn.sid})
            await on_reply(e, None)
            return False
        await on_reply(None, reply)
        return True

    async def emit_to_room(
        self,
        conn: Connection,
        message: ProtocolMessage,
        payload: Any = None,
        *,
        include_origin: Optional[bool] = None,
    ) -> int:
        """Send `message` to the members of conn's room; returns how many were sent to."""
        room_id = conn.room_id
        if room_id is None:
            return 0
        if include_origin is None:
            include_origin = self.include_origin

        delivered = 0
        for member in list(self.rooms.get(room_id, ())):
            if member is conn and not include_origin:
                continue
            # Left the room while earlier sends were in flight
            if not self.is_member(member, room_id):
                continue
            if await self.emit(member, message, payload):
                delivered += 1
        return delivered

    async def disconnect(self, conn: Connection) -> None:
        """Close the transport; the registry is left consistent even if closing fails."""
        try:
            if not conn.closed:
                await self.sio.disconnect(conn.sid)
        except Exception as e:
            logger.warning("Error while disconnecting: %s", e, extra={"connection_id": conn.sid})
        finally:
            self.unregister(conn)
