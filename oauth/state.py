"""CSRF state and OIDC nonce generation"""

import secrets
from dataclasses import dataclass
from typing import Optional

# 32 random bytes -> 43 character base64url string
TOKEN_BYTES = 32


def generate_token() -> str:
    """Generate an unpredictable URL-safe token

    Returns:
        str: 32-byte random string, base64url encoded
    """
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass(frozen=True)
class FlowState:
    """Per-run values round-tripped through the provider

    Attributes:
        state: CSRF state sent with the authorization URL
        nonce: OIDC nonce, only set when nonce checking is enabled
    """
    state: str
    nonce: Optional[str] = None

    @classmethod
    def create(cls, with_nonce: bool = False) -> "FlowState":
        """Generate a fresh state (and independent nonce when requested)"""
        return cls(
            state=generate_token(),
            nonce=generate_token() if with_nonce else None,
        )
