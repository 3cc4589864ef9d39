"""
AmoCRM OAuth2 helpers
Authorization URL, code exchange, token refresh and long-lived tokens
"""

from typing import Optional, Dict, Any
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel

from .client import AmoCRMError

logger = structlog.get_logger("amocrm_sdk.amocrm.auth")

TOKEN_ENDPOINT = "/oauth2/access_token"
AUTH_TIMEOUT_SECONDS = 30.0


class AuthError(AmoCRMError):
    """OAuth endpoint rejected the request"""

    def __init__(self, status_code: int, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"unexpected status code: {status_code}")


class AuthResponse(BaseModel):
    """Token pair returned by the OAuth endpoint"""

    token_type: str = "Bearer"
    expires_in: int
    access_token: str
    refresh_token: str = ""

    @property
    def is_long_lived(self) -> bool:
        # Long-lived tokens come without refresh token
        return not self.refresh_token


def get_auth_url(
    base_url: str,
    client_id: str,
    redirect_uri: str,
    state: str,
    mode: str = "post_message"
) -> str:
    """Build URL the user is redirected to for granting access"""
    params = {
        "client_id": client_id,
        "mode": mode,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "state": state,
    }
    query = urlencode(sorted(params.items()))
    return f"{base_url.rstrip('/')}{TOKEN_ENDPOINT}?{query}"


async def _request_token(
    base_url: str,
    payload: Dict[str, str],
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> AuthResponse:
    url = f"{base_url.rstrip('/')}{TOKEN_ENDPOINT}"

    async with httpx.AsyncClient(timeout=AUTH_TIMEOUT_SECONDS, transport=transport) as client:
        try:
            response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"OAuth request failed: {e}", grant_type=payload["grant_type"])
            raise AmoCRMError(f"OAuth request failed: {e}") from e

    if response.status_code != 200:
        logger.error(
            "OAuth endpoint returned error",
            grant_type=payload["grant_type"],
            status_code=response.status_code
        )
        raise AuthError(response.status_code, response.text)

    # Covers both non-JSON bodies and pydantic ValidationError
    try:
        token = AuthResponse.model_validate(response.json())
    except ValueError as e:
        logger.error(
            "Invalid token response",
            grant_type=payload["grant_type"],
            error=str(e)
        )
        raise AmoCRMError(f"Invalid token response: {e}") from e

    logger.info(
        "Access token received",
        grant_type=payload["grant_type"],
        expires_in=token.expires_in
    )
    return token


async def get_access_token(
    base_url: str,
    client_id: str,
    client_secret: str,
    code: str,
    redirect_uri: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> AuthResponse:
    """Exchange authorization code for token pair"""
    payload = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
    }
    return await _request_token(base_url, payload, transport)


async def refresh_access_token(
    base_url: str,
    client_id: str,
    client_secret: str,
    refresh_token: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> AuthResponse:
    """Get new token pair using refresh token"""
    payload = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
    }
    return await _request_token(base_url, payload, transport)


async def get_long_lived_token(
    base_url: str,
    client_id: str,
    client_secret: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> AuthResponse:
    """Get long-lived token for server-side integrations"""
    payload = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "client_credentials",
    }
    return await _request_token(base_url, payload, transport)
