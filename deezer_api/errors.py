"""Exceptions raised by the Deezer OAuth helpers.

None of these carry the access token, the app secret or the token URL.
"""


class DeezerAuthError(RuntimeError):
    """Base class for recoverable authorization failures."""


class CodeNotFoundError(DeezerAuthError):
    """The redirect response did not contain an authorization code."""


class TokenParseError(DeezerAuthError):
    """The token endpoint body did not contain access_token/expires markers."""


class TransportError(DeezerAuthError):
    """The request to Deezer could not be completed."""
