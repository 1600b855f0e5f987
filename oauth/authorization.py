"""OAuth authorization URL construction"""

import logging
from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from config.models import OAuthCLIConfig
from .state import FlowState

logger = logging.getLogger(__name__)


def _host_port(interface: str, port: int) -> str:
    # Bare IPv6 literals need brackets inside a URL
    if ":" in interface and not interface.startswith("["):
        interface = f"[{interface}]"
    return f"{interface}:{port}"


def derive_redirect_uri(callback: str, interface: str, port: int) -> str:
    """Turn the configured callback into an absolute redirect URI

    A callback without a scheme gets plain http; one without a host gets
    the listening interface and port.

    Args:
        callback: Configured callback path or URL
        interface: Listening interface
        port: Listening port

    Returns:
        Absolute redirect URI
    """
    parts = urlsplit(callback)
    if not parts.scheme:
        parts = parts._replace(scheme="http")
    if not parts.netloc:
        parts = parts._replace(netloc=_host_port(interface, port))
    return urlunsplit(parts)


def callback_path(callback: str) -> str:
    """Route path the listener serves for the configured callback"""
    path = urlsplit(callback).path
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    return path


class AuthorizationURLBuilder:
    """Builds the provider authorization URL for one flow run"""

    def __init__(self, config: OAuthCLIConfig):
        self.config = config
        self.redirect_uri = derive_redirect_uri(config.callback, config.interface, config.port)

    def build(self, flow_state: FlowState) -> str:
        """Construct the authorization URL

        Args:
            flow_state: State (and optional nonce) for this run

        Returns:
            Full authorization URL
        """
        return self.get_authorize_url(flow_state.state, flow_state.nonce)

    def get_authorize_url(self, state: str, nonce: Optional[str] = None) -> str:
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": self.redirect_uri,
        }
        if self.config.scopes:
            params["scope"] = self.config.scope
        params["state"] = state
        if self.config.offline:
            params["access_type"] = "offline"
        if nonce:
            params["nonce"] = nonce

        # Keep any query the provider endpoint already carries
        separator = "&" if "?" in self.config.auth_url else "?"
        url = f"{self.config.auth_url}{separator}{urlencode(params)}"
        logger.debug(f"Authorization URL built for redirect_uri={self.redirect_uri}")
        return url
