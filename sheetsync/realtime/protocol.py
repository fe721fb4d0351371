"""
Socket protocol catalogue.

Every message exchanged on the collaboration channel is declared here, once.
Outbound messages (server -> client) are `ProtocolMessage` entries keyed by
`ToClient`; inbound messages (client -> server) are `InboundMessageSpec`
entries keyed by `FromClient`. The dispatcher only reads these tables, so a
new message kind is one new enum member plus one new entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

from pydantic import ValidationError

from sheetsync.log import get_logger
from sheetsync.models.schemas import CellWrite

if TYPE_CHECKING:
    from sheetsync.realtime.connection import Connection
    from sheetsync.realtime.registry import ConnectionRegistry

logger = get_logger(__name__)

# (error, reply) -> None; error is set when no usable reply arrived
ReplyHandler = Callable[[Optional[Exception], Any], Awaitable[None]]
InboundHandler = Callable[["ConnectionRegistry", "Connection", Any], Awaitable[None]]


class ToClient(str, Enum):
    AUTH_REQUIRED = "authReq"
    AUTH_REFUSED = "authFail"
    AUTH_SUCCESS = "authOk"
    WRITE_CELL = "writeCell"


class FromClient(str, Enum):
    WRITE_CELL = "writeCell"

    @classmethod
    def lookup(cls, name: Any) -> Optional[FromClient]:
        """Return the member for a wire name, or None when the name is unknown."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ProtocolMessage:
    name: str
    # Builds the coroutine that consumes the client's acknowledgement
    reply_handler: Optional[Callable[["Connection"], ReplyHandler]] = None

    @property
    def expects_reply(self) -> bool:
        return self.reply_handler is not None


@dataclass(frozen=True)
class InboundMessageSpec:
    name: str
    validate: Callable[[Any], bool]
    handle: InboundHandler


def _request_auth(conn: Connection) -> ReplyHandler:
    if conn.handshake is None:
        raise RuntimeError(f"{conn!r} has no handshake attached")
    return conn.handshake.on_reply


def write_cell_checker(payload: Any) -> bool:
    """A cell edit is a mapping with an integer line and string column/content."""
    if not isinstance(payload, dict):
        return False
    try:
        CellWrite.model_validate(payload)
    except ValidationError:
        return False
    return True


async def write_cell_event(registry: ConnectionRegistry, conn: Connection, payload: dict) -> None:
    cell = CellWrite.model_validate(payload)
    delivered = await registry.emit_to_room(conn, TO_CLIENT[ToClient.WRITE_CELL], cell.model_dump())
    logger.debug(
        "Cell %s%s broadcast to %d member(s)", cell.column, cell.line, delivered,
        extra={"connection_id": conn.sid, "room_id": conn.room_id, "msg_type": FromClient.WRITE_CELL.value},
    )


TO_CLIENT: Mapping[ToClient, ProtocolMessage] = MappingProxyType({
    ToClient.AUTH_REQUIRED: ProtocolMessage(ToClient.AUTH_REQUIRED.value, reply_handler=_request_auth),
    ToClient.AUTH_REFUSED: ProtocolMessage(ToClient.AUTH_REFUSED.value),
    ToClient.AUTH_SUCCESS: ProtocolMessage(ToClient.AUTH_SUCCESS.value),
    ToClient.WRITE_CELL: ProtocolMessage(ToClient.WRITE_CELL.value),
})

FROM_CLIENT: Mapping[FromClient, InboundMessageSpec] = MappingProxyType({
    FromClient.WRITE_CELL: InboundMessageSpec(
        FromClient.WRITE_CELL.value,
        validate=write_cell_checker,
        handle=write_cell_event,
    ),
})
