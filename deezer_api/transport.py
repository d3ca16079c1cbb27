import logging
import re
from typing import Optional, Protocol

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)

_SECRET_PARAM_RE = re.compile(r"(secret=)[^&\s\"']*")


class _SecretRedactingFilter(logging.Filter):
    """Mask ``secret=`` query values in records of the httpx logger.

    httpx logs every request line with the full URL at INFO, and the token
    URL carries the app secret.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _SECRET_PARAM_RE.sub(r"\1[REDACTED]", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _install_httpx_redaction() -> None:
    httpx_logger = logging.getLogger("httpx")
    if not any(isinstance(f, _SecretRedactingFilter) for f in httpx_logger.filters):
        httpx_logger.addFilter(_SecretRedactingFilter())


_install_httpx_redaction()


class Transport(Protocol):
    """Performs one outbound request and returns the response body.

    Implementations raise TransportError on failure and must not retry.
    """

    def send(self, url: str) -> str:
        ...


class HttpxTransport:
    """Single best-effort GET through httpx.

    The URL may carry credentials, so it never ends up in logs or errors.
    """

    def __init__(self, *, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.timeout = float(timeout)
        self._client = client

    def send(self, url: str) -> str:
        try:
            if self._client is not None:
                resp = self._client.get(url)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=False) as client:
                    resp = client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"Deezer request failed: {type(e).__name__}") from None

        # Redirects are not followed, so anything but 2xx is a failed exchange.
        if not resp.is_success:
            raise TransportError(f"Deezer request failed (HTTP {resp.status_code})")

        try:
            body = resp.content.decode(resp.charset_encoding or "utf-8")
        except (UnicodeDecodeError, LookupError):
            raise TransportError("Deezer response body could not be decoded") from None

        logger.debug("Deezer responded with HTTP %s (%d bytes)", resp.status_code, len(body))
        return body
