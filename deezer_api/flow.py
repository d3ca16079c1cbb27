import urllib.parse
from typing import Tuple

from .errors import CodeNotFoundError, TokenParseError

DEEZER_CONNECT_BASE_URL = "https://connect.deezer.com/oauth"
DEEZER_AUTHORIZE_URL = f"{DEEZER_CONNECT_BASE_URL}/auth.php"
DEEZER_ACCESS_TOKEN_URL = f"{DEEZER_CONNECT_BASE_URL}/access_token.php"

DEFAULT_PERMS = "basic_access"

CODE_MARKER = "?code="
ACCESS_TOKEN_MARKER = "access_token="
EXPIRES_MARKER = "&expires="


def build_authorize_url(app_id: str, redirect_uri: str, *, encode_redirect_uri: bool = False) -> str:
    """Return the Deezer user authorization URL.

    Parameters are concatenated in a fixed order, unencoded by default:

        https://connect.deezer.com/oauth/auth.php?app_id=111&redirect_uri=http://example.com&perms=basic_access

    With ``encode_redirect_uri`` the redirect URI is percent-encoded, which keeps
    URIs containing ``&`` or ``=`` from corrupting the query string.
    """

    if encode_redirect_uri:
        redirect_uri = urllib.parse.quote(redirect_uri, safe="")
    return f"{DEEZER_AUTHORIZE_URL}?app_id={app_id}&redirect_uri={redirect_uri}&perms={DEFAULT_PERMS}"


def build_token_url(app_id: str, app_secret: str, code: str) -> str:
    """Return the access token URL. Contains the secret: never log it."""

    return f"{DEEZER_ACCESS_TOKEN_URL}?app_id={app_id}&secret={app_secret}&code={code}"


def parse_code(response: str) -> str:
    """Return the authorization code following the last ``?code=`` in ``response``.

    The value runs to the end of the string and is returned as-is (no
    percent-decoding, no trailing parameter parsing).
    """

    response = str(response or "")
    idx = response.rfind(CODE_MARKER)
    if idx < 0:
        raise CodeNotFoundError("No authorization code found in redirect response")
    return response[idx + len(CODE_MARKER):]


def parse_token_response(body: str) -> Tuple[str, str]:
    """Split a token endpoint body into ``(token, expires)``.

    Deezer answers with plain text ``access_token=<token>&expires=<seconds>``.
    The token starts after the first ``access_token=`` and ends at the last
    ``&expires=``; everything after that marker is the expiry.
    """

    body = str(body or "")
    token_idx = body.find(ACCESS_TOKEN_MARKER)
    if token_idx < 0:
        raise TokenParseError("Token response is missing 'access_token='")

    expires_idx = body.rfind(EXPIRES_MARKER)
    if expires_idx < 0:
        raise TokenParseError("Token response is missing '&expires='")

    token_start = token_idx + len(ACCESS_TOKEN_MARKER)
    if token_start > expires_idx:
        raise TokenParseError("Token response has 'access_token=' after '&expires='")

    token = body[token_start:expires_idx]
    expires = body[expires_idx + len(EXPIRES_MARKER):]
    if not token or not expires:
        raise TokenParseError("Token response has an empty access token or expiry")
    return token, expires
