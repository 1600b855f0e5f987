"""OAuth authorization code exchange"""

import datetime
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

import httpx

from config.models import OAuthCLIConfig
from .exceptions import TokenExchangeError, TokenSerializationError
from .transport import build_transport

logger = logging.getLogger(__name__)


@dataclass
class TokenResult:
    """Token endpoint response

    Attributes:
        access_token: Bearer token issued by the provider
        token_type: Token type, usually "Bearer"
        refresh_token: Refresh token when offline access was granted
        expires_in: Lifetime in seconds as reported by the provider
        expiry: Absolute expiry computed at exchange time
        raw: Full provider payload, including extras such as id_token
    """
    access_token: str
    token_type: str = ""
    refresh_token: str = ""
    expires_in: Optional[int] = None
    expiry: Optional[datetime.datetime] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenResult":
        expires_in = payload.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in not in (None, "") else None
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric expires_in: {expires_in!r}")
            expires_in = None

        expiry = None
        if expires_in:
            try:
                expiry = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(seconds=expires_in)
            except OverflowError:
                logger.warning(f"Ignoring out-of-range expires_in: {expires_in}")

        return cls(
            access_token=payload["access_token"],
            token_type=payload.get("token_type", ""),
            refresh_token=payload.get("refresh_token", ""),
            expires_in=expires_in,
            expiry=expiry,
            raw=dict(payload),
        )

    def extra(self, key: str) -> Any:
        """Field from the provider payload outside the standard token fields"""
        return self.raw.get(key)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        if self.expiry is not None:
            data["expiry"] = self.expiry.isoformat().replace("+00:00", "Z")
        return data

    def to_json(self) -> str:
        """Indented JSON for the operator and the callback response"""
        try:
            return json.dumps(self.to_dict(), indent=2)
        except (TypeError, ValueError) as e:
            raise TokenSerializationError(f"Token parse error: {e}") from e


def _parse_token_payload(response: httpx.Response) -> Dict[str, Any]:
    """Decode a token response body (JSON or form-encoded)"""
    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in ("application/x-www-form-urlencoded", "text/plain"):
        return dict(parse_qsl(response.text))

    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


class TokenExchanger:
    """Exchanges an authorization code at the provider token endpoint"""

    def __init__(
        self,
        config: OAuthCLIConfig,
        redirect_uri: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.redirect_uri = redirect_uri
        self.transport = build_transport(config.verbose, transport)

    def _request_parts(self, code: str):
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        }
        auth = None
        if self.config.auth_style == "header":
            auth = httpx.BasicAuth(self.config.client_id, self.config.client_secret)
        else:
            data["client_id"] = self.config.client_id
            data["client_secret"] = self.config.client_secret
        return data, auth

    async def exchange(self, code: str) -> TokenResult:
        """Exchange authorization code for tokens

        Args:
            code: Authorization code from the callback

        Returns:
            TokenResult with the provider payload

        Raises:
            TokenExchangeError: If the request fails or the provider
                does not return an access token
        """
        data, auth = self._request_parts(code)

        logger.info(f"Exchanging authorization code for tokens at {self.config.token_url}")

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.config.http_timeout) as client:
                response = await client.post(
                    self.config.token_url,
                    data=data,
                    auth=auth,
                    headers={"Accept": "application/json"},
                )
        except httpx.TimeoutException as e:
            raise TokenExchangeError(f"Exchange error: token request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Exchange error: {e}") from e

        logger.debug(f"Token exchange response status: {response.status_code}")

        if not response.is_success:
            raise TokenExchangeError(
                f"Exchange error: cannot fetch token: {response.status_code}\nResponse: {response.text}"
            )

        try:
            payload = _parse_token_payload(response)
        except ValueError as e:
            raise TokenExchangeError(f"Exchange error: cannot parse token response: {e}") from e

        if payload.get("error"):
            message = f"Exchange error: {payload['error']}"
            if payload.get("error_description"):
                message += f": {payload['error_description']}"
            raise TokenExchangeError(message)

        if not payload.get("access_token"):
            raise TokenExchangeError("Exchange error: server response missing access_token")

        logger.info("Successfully exchanged authorization code for tokens")
        return TokenResult.from_payload(payload)
