from __future__ import annotations

from typing import Any

from sheetsync.log import get_logger
from sheetsync.realtime.connection import Connection
from sheetsync.realtime.protocol import FROM_CLIENT, FromClient
from sheetsync.realtime.registry import ConnectionRegistry

logger = get_logger(__name__)


class MessageDispatcher:
    """Routes inbound socket events to their entry in the protocol table."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def dispatch(self, conn: Connection, event: str, payload: Any = None) -> bool:
        """
        Handle one inbound event. Returns True when a handler ran.

        Unknown events, events from connections that have not finished the
        handshake and payloads that fail validation are dropped; the
        connection stays open.
        """
        kind = FromClient.lookup(event)
        if kind is None:
            logger.debug("Dropping unknown event %r", event, extra={"connection_id": conn.sid})
            return False
        entry = FROM_CLIENT[kind]

        async with conn.inbound_lock:
            if conn.closed or not conn.is_authenticated:
                logger.warning("Dropping %s from unauthenticated connection", entry.name,
                               extra={"connection_id": conn.sid, "msg_type": entry.name})
                return False

            if not entry.validate(payload):
                logger.warning("Dropping %s with invalid payload", entry.name,
                               extra={"connection_id": conn.sid, "user_id": conn.user_id, "msg_type": entry.name})
                return False

            await entry.handle(self.registry, conn, payload)
            return True
