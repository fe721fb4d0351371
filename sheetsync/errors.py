# sheetsync/errors.py


class AuthError(Exception):
    """Base for every reason a socket handshake is refused.

    All subclasses end in the same authFail message on the wire, so the client
    cannot tell an unknown sheet from a bad token.
    """


class InvalidToken(AuthError):
    """Token is malformed, expired or signed with another key."""


class NoAccess(AuthError):
    """Token is valid but the user has no grant on the requested sheet."""


class MalformedPayload(AuthError):
    """Handshake reply is missing token/sheetID or has the wrong types."""


class HandshakeTimeout(AuthError):
    """Client did not answer authReq in time."""
