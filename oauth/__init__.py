"""
OAuth2 / OpenID Connect authorization-code flow for the command line
"""
from .exceptions import (
    OAuthCLIError,
    ListenerError,
    CallbackTimeout,
    StateMismatch,
    AuthorizationDenied,
    TokenExchangeError,
    TokenSerializationError,
    NonceError,
    MissingIDToken,
    PayloadDecodeError,
    NonceMismatch,
)
from .state import FlowState, generate_token
from .authorization import AuthorizationURLBuilder, derive_redirect_uri, callback_path
from .transport import LoggingTransport, build_transport
from .token_exchange import TokenResult, TokenExchanger
from .nonce import decode_jwt_payload, check_nonce
from .callback_server import CallbackState, CallbackOutcome, OAuthCallbackServer
from .flow import AuthorizationCodeFlow

__all__ = [
    # Errors
    "OAuthCLIError",
    "ListenerError",
    "CallbackTimeout",
    "StateMismatch",
    "AuthorizationDenied",
    "TokenExchangeError",
    "TokenSerializationError",
    "NonceError",
    "MissingIDToken",
    "PayloadDecodeError",
    "NonceMismatch",
    # State
    "FlowState",
    "generate_token",
    # Authorization
    "AuthorizationURLBuilder",
    "derive_redirect_uri",
    "callback_path",
    # Transport
    "LoggingTransport",
    "build_transport",
    # Token Exchange
    "TokenResult",
    "TokenExchanger",
    # Nonce
    "decode_jwt_payload",
    "check_nonce",
    # Callback Server
    "CallbackState",
    "CallbackOutcome",
    "OAuthCallbackServer",
    # Flow
    "AuthorizationCodeFlow",
]
