import abc
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .flow import build_authorize_url, build_token_url, parse_code, parse_token_response
from .transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"


class AuthorizationStatus(enum.Enum):
    """Progress of the authorization, in flow order."""

    NOT_STARTED = 0
    AWAITING_USER_AUTHORIZATION = 1
    CODE_RECEIVED = 2
    TOKEN_ACQUIRED = 3
    COMPLETED = 4


@dataclass(frozen=True)
class Credentials:
    """Deezer application id and secret."""

    app_id: str
    app_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if not str(self.app_id or "").strip():
            raise ValueError("Deezer app_id must be a non-empty string")
        if not str(self.app_secret or "").strip():
            raise ValueError("Deezer app_secret must be a non-empty string")


class AuthMethods(abc.ABC):
    """Authorization capabilities shared by streaming providers."""

    @abc.abstractmethod
    def status(self) -> AuthorizationStatus:
        """Return the current authorization status."""

    @abc.abstractmethod
    def authorize_url(self, redirect_uri: str) -> str:
        """Return the URL the user opens to grant access."""

    @abc.abstractmethod
    def extract_code(self, redirect_response: str) -> str:
        """Return the authorization code carried by the redirect."""

    @abc.abstractmethod
    def exchange_token(self, code: str) -> None:
        """Trade an authorization code for an access token."""

    @abc.abstractmethod
    def save_token(self, token: str) -> bool:
        """Store a token obtained out-of-band."""

    @abc.abstractmethod
    def token(self) -> str:
        """Return the active user token.

        DO NOT STORE THE TOKEN ELSEWHERE.
        """


class DeezerAuthSession(AuthMethods):
    """Deezer OAuth session (authorization code flow).

    Holds status, token and expiry in memory only. Not thread-safe: callers
    sharing a session must serialize authorize_url/extract_code/exchange_token.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        transport: Optional[Transport] = None,
        encode_redirect_uri: bool = False,
    ):
        self.credentials = credentials
        self.transport = transport or HttpxTransport()
        self.encode_redirect_uri = bool(encode_redirect_uri)
        self._status = AuthorizationStatus.NOT_STARTED
        self._token: Optional[str] = None
        self._expiry: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(app_id={self.credentials.app_id!r}, "
            f"status={self._status.name}, has_token={bool(self._token)})"
        )

    def _advance(self, status: AuthorizationStatus) -> None:
        # Never move backwards.
        if status.value < self._status.value:
            return
        if status is not self._status:
            logger.debug("Deezer auth status %s -> %s", self._status.name, status.name)
        self._status = status

    def status(self) -> AuthorizationStatus:
        return self._status

    def authorize_url(self, redirect_uri: str) -> str:
        url = build_authorize_url(
            self.credentials.app_id,
            redirect_uri,
            encode_redirect_uri=self.encode_redirect_uri,
        )
        self._advance(AuthorizationStatus.AWAITING_USER_AUTHORIZATION)
        return url

    def extract_code(self, redirect_response: str) -> str:
        code = parse_code(redirect_response)
        self._advance(AuthorizationStatus.CODE_RECEIVED)
        return code

    def exchange_token(self, code: str) -> None:
        """Request a token for ``code`` and store it.

        Raises TransportError or TokenParseError; on either the session is left
        exactly as it was. Calling this again after completion re-authenticates
        and overwrites the stored token and expiry.
        """

        url = build_token_url(self.credentials.app_id, self.credentials.app_secret, code)
        body = self.transport.send(url)
        token, expiry = parse_token_response(body)

        self._token = token
        self._advance(AuthorizationStatus.TOKEN_ACQUIRED)
        self._expiry = expiry
        self._advance(AuthorizationStatus.COMPLETED)
        logger.info("Deezer authorization completed (expires=%s)", expiry)

    def save_token(self, token: str) -> bool:
        """Store a token obtained out-of-band (its expiry is unknown).

        Refused once the session is COMPLETED, so the held expiry always
        belongs to the held token; use exchange_token to re-authenticate.
        """

        token = str(token or "")
        if not token or self._status is AuthorizationStatus.COMPLETED:
            return False
        self._token = token
        self._advance(AuthorizationStatus.TOKEN_ACQUIRED)
        return True

    def token(self) -> str:
        return self._token or ""

    def expiry(self) -> Optional[str]:
        return self._expiry


def check_deezer_credentials(config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate Deezer OAuth config fields and return a structured status dict.

    The secret is only checked for presence and is never part of the result.
    """

    config = config or {}
    app_id = str(config.get("deezer_app_id", "")).strip()
    app_secret = str(config.get("deezer_app_secret", "")).strip()
    redirect_uri = str(config.get("deezer_redirect_uri", "")).strip()

    missing = []
    if not app_id:
        missing.append("deezer_app_id")
    if not app_secret:
        missing.append("deezer_app_secret")
    if not redirect_uri:
        missing.append("deezer_redirect_uri")

    if missing:
        message = f"Missing {', '.join(missing)} in config.json."
        if "deezer_redirect_uri" in missing:
            message += f"\nRecommended default: {DEFAULT_REDIRECT_URI}"
        return {"ok": False, "app_id": app_id, "redirect_uri": redirect_uri, "message": message}

    return {"ok": True, "app_id": app_id, "redirect_uri": redirect_uri, "message": "Deezer credentials look OK."}


def deezer_app_setup_instructions(*, redirect_uri: str = DEFAULT_REDIRECT_URI) -> str:
    """Return user-facing setup instructions for creating a Deezer application."""

    redirect_uri = str(redirect_uri or "").strip() or DEFAULT_REDIRECT_URI
    return (
        "Deezer app setup:\n"
        "1) Go to https://developers.deezer.com/myapps\n"
        "2) Create an application (or select an existing one)\n"
        f"3) Set the Redirect URL after authentication to: {redirect_uri}\n"
        "4) Copy the Application ID into config.json as deezer_app_id\n"
        "5) Copy the Secret Key into config.json as deezer_app_secret\n\n"
        "Notes:\n"
        "- Keep config.json private: it holds your app secret.\n"
        "- The redirect URL must match what you configured in the Deezer dashboard.\n"
    )


def session_from_config(config: Dict[str, Any], *, transport: Optional[Transport] = None) -> DeezerAuthSession:
    """Build a DeezerAuthSession from config values. Raises ValueError on missing credentials."""

    config = config or {}
    credentials = Credentials(
        app_id=str(config.get("deezer_app_id", "")).strip(),
        app_secret=str(config.get("deezer_app_secret", "")).strip(),
    )
    if transport is None:
        transport = HttpxTransport(timeout=float(config.get("deezer_request_timeout", 30)))
    return DeezerAuthSession(
        credentials,
        transport=transport,
        encode_redirect_uri=bool(config.get("deezer_encode_redirect_uri", False)),
    )
