"""
Pydantic model for the resolved oauth2-cli configuration.
"""
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

import settings


class OAuthCLIConfig(BaseModel):
    """Configuration for one authorization-code flow run"""
    interface: str = settings.DEFAULT_INTERFACE
    port: int = Field(default=settings.DEFAULT_PORT, ge=0, le=65535)
    callback: str = settings.DEFAULT_CALLBACK
    client_id: str = ""
    client_secret: str = ""
    auth_url: str = ""
    token_url: str = ""
    code_param: str = settings.DEFAULT_CODE_PARAM
    scopes: List[str] = Field(default_factory=list)
    nonce: bool = False  # Include and then validate the OIDC nonce param
    verbose: bool = False
    offline: bool = True  # Request access_type=offline (refresh token)
    auth_style: Literal["params", "header"] = settings.DEFAULT_AUTH_STYLE
    timeout: Optional[float] = Field(default=None, gt=0)  # Callback wait, None = unbounded
    http_timeout: float = Field(default=settings.HTTP_TIMEOUT, gt=0)

    @field_validator("scopes", mode="before")
    @classmethod
    def _literal_scopes(cls, value: Union[str, List[str], None]) -> List[str]:
        # Scope values are forwarded verbatim; "read,write" stays one value
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return value

    @property
    def scope(self) -> str:
        """Scope parameter as sent to the provider"""
        return " ".join(self.scopes)

    @property
    def listen_address(self) -> str:
        return f"{self.interface}:{self.port}"

    def missing_required(self) -> List[str]:
        """Names of the required flags that are still empty"""
        required = [
            ("auth", self.auth_url),
            ("token", self.token_url),
            ("id", self.client_id),
            ("secret", self.client_secret),
        ]
        return [flag for flag, value in required if not value]
