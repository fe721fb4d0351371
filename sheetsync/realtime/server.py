from __future__ import annotations

from typing import Any, Optional

import socketio

from sheetsync.log import get_logger
from sheetsync.realtime.connection import Connection
from sheetsync.realtime.dispatcher import MessageDispatcher
from sheetsync.realtime.handshake import AccessLookup, AuthHandshake, TokenVerifier
from sheetsync.realtime.registry import ConnectionRegistry

logger = get_logger(__name__)


class CollabServer:
    """Binds the Socket.IO events to the registry, the handshake and the dispatcher."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        tokens: TokenVerifier,
        access: AccessLookup,
        *,
        reply_timeout: Optional[float] = None,
        include_origin: Optional[bool] = None,
    ):
        self.sio = sio
        self.tokens = tokens
        self.access = access
        self.registry = ConnectionRegistry(sio, reply_timeout=reply_timeout, include_origin=include_origin)
        self.dispatcher = MessageDispatcher(self.registry)

        sio.on("connect", self.on_connect)
        sio.on("disconnect", self.on_disconnect)
        sio.on("*", self.on_event)

    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        logger.info("Client connected", extra={"connection_id": sid})
        conn = Connection(sid)
        self.registry.register(conn)
        AuthHandshake(conn, self.registry, self.tokens, self.access).start()

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        conn = self.registry.get(sid)
        if conn is None:
            return
        logger.info("Client disconnected", extra={
            "connection_id": sid, "user_id": conn.user_id, "room_id": conn.room_id,
        })
        try:
            if conn.handshake is not None:
                conn.handshake.cancel()
        finally:
            self.registry.unregister(conn)

    async def on_event(self, event: str, sid: str, *args: Any) -> None:
        conn = self.registry.get(sid)
        if conn is None:
            logger.debug("Event %r from unknown sid", event, extra={"connection_id": sid})
            return
        payload = args[0] if len(args) == 1 else (list(args) if args else None)
        await self.dispatcher.dispatch(conn, event, payload)
