"""Deezer OAuth integration (authorization code flow).

The session keeps its token in memory only; nothing here persists it.
"""

from .auth import AuthMethods, AuthorizationStatus, Credentials, DeezerAuthSession
from .errors import CodeNotFoundError, DeezerAuthError, TokenParseError, TransportError
from .transport import HttpxTransport, Transport

__all__ = [
    "AuthMethods",
    "AuthorizationStatus",
    "Credentials",
    "DeezerAuthSession",
    "DeezerAuthError",
    "CodeNotFoundError",
    "TokenParseError",
    "TransportError",
    "HttpxTransport",
    "Transport",
]
