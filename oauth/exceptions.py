"""Errors raised while running the authorization-code flow

Errors that happen while answering the callback carry the HTTP status the
browser is sent. The rest are fatal to the process and handled by the CLI.
"""


class OAuthCLIError(Exception):
    """Base class for flow errors"""

    status_code = 500


class ListenerError(OAuthCLIError):
    """Callback listener could not start or failed unexpectedly"""


class CallbackTimeout(OAuthCLIError):
    """No callback arrived within the configured wait"""


class StateMismatch(OAuthCLIError):
    """Callback state does not match the state sent with the authorization URL"""

    status_code = 401

    def __init__(self, received: str):
        self.received = received
        super().__init__(f"Invalid state: {received}")


class AuthorizationDenied(OAuthCLIError):
    """Provider redirected back with an error instead of a code"""

    status_code = 400

    def __init__(self, error: str, description: str = ""):
        self.error = error
        self.description = description
        message = f"Authorization error: {error}"
        if description:
            message += f" ({description})"
        super().__init__(message)


class TokenExchangeError(OAuthCLIError):
    """Token endpoint rejected the code or could not be reached"""

    status_code = 503


class TokenSerializationError(OAuthCLIError):
    """Token result could not be rendered as JSON"""

    status_code = 503


class NonceError(OAuthCLIError):
    """OIDC nonce verification failed"""

    status_code = 401


class MissingIDToken(NonceError):
    """Token response has no id_token to check the nonce against"""


class PayloadDecodeError(NonceError):
    """ID token payload is not decodable JSON"""


class NonceMismatch(NonceError):
    """ID token nonce differs from the one generated for this run"""

    def __init__(self, received: str, expected: str):
        self.received = received
        self.expected = expected
        super().__init__(f"{received!r} != {expected!r}")
