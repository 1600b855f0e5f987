"""
OIDC ID token nonce verification.

Only the payload segment is decoded; the signature is not verified. The
check guards against a replayed ID token, not a forged one.
"""
import base64
import binascii
import hmac
import json
import logging
import re
from typing import Any, Dict

from .exceptions import MissingIDToken, NonceMismatch, PayloadDecodeError
from .token_exchange import TokenResult

logger = logging.getLogger(__name__)

# Unpadded base64url alphabet
BASE64URL_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


def decode_jwt_payload(token: str) -> Dict[str, Any]:
    """
    Decode the payload of a compact JWT without verification.

    Args:
        token: header.payload.signature

    Returns:
        Decoded payload claims

    Raises:
        PayloadDecodeError: If the token is not three segments or the
            payload is not base64url-encoded JSON object
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise PayloadDecodeError(f"id_token payload decode: expected 3 segments, got {len(parts)}")

    payload = parts[1]
    logger.debug(f"id_token payload segment: {payload!r}")

    # JWT uses base64url without padding
    if not BASE64URL_SEGMENT.fullmatch(payload):
        raise PayloadDecodeError("id_token payload decode: illegal base64url data")
    try:
        decoded = base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4))
        claims = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PayloadDecodeError(f"id_token payload decode: {e}") from e

    if not isinstance(claims, dict):
        raise PayloadDecodeError(f"id_token payload decode: expected a JSON object, got {type(claims).__name__}")
    return claims


def check_nonce(nonce: str, token: TokenResult) -> None:
    """
    Verify the ID token carries the nonce generated for this run.

    Args:
        nonce: Nonce sent with the authorization URL
        token: Token returned by the exchange

    Raises:
        MissingIDToken: No id_token in the token response
        PayloadDecodeError: id_token payload cannot be decoded
        NonceMismatch: nonce claim differs from the expected one
    """
    id_token = token.extra("id_token")
    if not isinstance(id_token, str) or not id_token:
        raise MissingIDToken("missing OIDC id_token")

    claims = decode_jwt_payload(id_token)
    received = claims.get("nonce")
    if not isinstance(received, str):
        received = "" if received is None else str(received)

    if not hmac.compare_digest(received.encode("utf-8"), nonce.encode("utf-8")):
        raise NonceMismatch(received, nonce)

    logger.debug("OIDC nonce verified")
