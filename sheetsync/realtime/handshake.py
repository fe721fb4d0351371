from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from sheetsync.errors import AuthError, HandshakeTimeout, MalformedPayload, NoAccess
from sheetsync.log import get_logger
from sheetsync.models.schemas import AuthCredential
from sheetsync.models.sheet import AccessGrant
from sheetsync.realtime.connection import Connection, ConnectionState
from sheetsync.realtime.protocol import TO_CLIENT, ToClient
from sheetsync.realtime.registry import ConnectionRegistry

logger = get_logger(__name__)


class TokenVerifier(Protocol):
    def verify(self, token: str) -> int: ...


class AccessLookup(Protocol):
    def lookup(self, user_id: int, sheet_id: int) -> Optional[AccessGrant]: ...


def room_for_sheet(sheet_id: int) -> str:
    return f"sheet{sheet_id}"


def parse_credential(reply: Any) -> AuthCredential:
    if not isinstance(reply, dict):
        raise MalformedPayload("auth reply must be an object")
    try:
        return AuthCredential.model_validate(reply)
    except ValidationError as e:
        raise MalformedPayload(str(e)) from e


class AuthHandshake:
    """
    Authentication of a single connection.

    UNAUTHENTICATED -> AUTH_SUCCESS | AUTH_REFUSED. The handshake owns the task
    that waits for the client's reply to authReq; cancelling it (on disconnect)
    stops the state machine before any further transition.
    """

    def __init__(
        self,
        conn: Connection,
        registry: ConnectionRegistry,
        tokens: TokenVerifier,
        access: AccessLookup,
    ):
        self.conn = conn
        self.registry = registry
        self.tokens = tokens
        self.access = access
        self._task: Optional[asyncio.Task] = None
        conn.handshake = self

    @property
    def finished(self) -> bool:
        return self.conn.state is not ConnectionState.UNAUTHENTICATED

    def start(self) -> asyncio.Task:
        """Send authReq and wait for the reply in the background."""
        self._task = asyncio.ensure_future(self.registry.emit(self.conn, TO_CLIENT[ToClient.AUTH_REQUIRED]))
        return self._task

    def cancel(self) -> None:
        task = self._task
        # The refusal path disconnects from inside the task itself
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()

    async def wait(self) -> None:
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def on_reply(self, error: Optional[Exception], reply: Any) -> None:
        """Consume the acknowledgement of authReq (or the reason there is none)."""
        if self.finished or self.conn.closed:
            return

        try:
            if error is not None:
                raise HandshakeTimeout(str(error) or "no reply to authReq") from error
            credential = parse_credential(reply)
            user_id = await run_in_threadpool(self.tokens.verify, credential.token)
            grant = await run_in_threadpool(self.access.lookup, user_id, credential.sheet_id)
            if grant is None:
                raise NoAccess(f"user {user_id} has no access to sheet {credential.sheet_id}")
        except AuthError as e:
            await self.refuse(e)
            return
        except Exception as e:
            logger.exception("Handshake failed unexpectedly", extra={"connection_id": self.conn.sid})
            await self.refuse(AuthError(f"internal error: {e}"))
            return

        # Disconnected while the collaborators were being queried
        if self.finished or self.conn.closed:
            return
        self.accept(user_id, room_for_sheet(credential.sheet_id))
        await self.registry.emit(self.conn, TO_CLIENT[ToClient.AUTH_SUCCESS])

    def accept(self, user_id: int, room_id: str) -> None:
        # No await in here: state, identity and membership change together
        self.conn.user_id = user_id
        self.conn.state = ConnectionState.AUTH_SUCCESS
        self.registry.join_room(self.conn, room_id)
        logger.info("Handshake accepted", extra={
            "connection_id": self.conn.sid, "user_id": user_id, "room_id": room_id,
        })

    async def refuse(self, reason: AuthError) -> None:
        if self.finished:
            return
        self.conn.state = ConnectionState.AUTH_REFUSED
        logger.info("Handshake refused (%s): %s", type(reason).__name__, reason,
                    extra={"connection_id": self.conn.sid})
        await self.registry.emit(self.conn, TO_CLIENT[ToClient.AUTH_REFUSED])
        await self.registry.disconnect(self.conn)
