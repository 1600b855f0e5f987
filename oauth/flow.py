"""Three-legged authorization-code flow driven from the terminal"""

import logging
from typing import Optional

import httpx
from rich.console import Console

from config.models import OAuthCLIConfig
from .authorization import AuthorizationURLBuilder, callback_path
from .callback_server import OAuthCallbackServer
from .state import FlowState
from .token_exchange import TokenExchanger, TokenResult

logger = logging.getLogger(__name__)


class AuthorizationCodeFlow:
    """Orchestrates one run of the flow

    Prints the authorization URL, serves the callback once, exchanges the
    code and returns the token. Errors are raised, never turned into a
    process exit, so the CLI decides how to terminate.
    """

    def __init__(
        self,
        config: OAuthCLIConfig,
        console: Optional[Console] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        flow_state: Optional[FlowState] = None,
    ):
        self.config = config
        self.console = console or Console()
        self.flow_state = flow_state or FlowState.create(with_nonce=config.nonce)
        self.auth_builder = AuthorizationURLBuilder(config)
        self.exchanger = TokenExchanger(config, self.auth_builder.redirect_uri, transport=transport)
        self.server = OAuthCallbackServer(
            config,
            self.flow_state,
            self.exchanger,
            callback_path(config.callback),
        )

    @property
    def redirect_uri(self) -> str:
        return self.auth_builder.redirect_uri

    def authorization_url(self) -> str:
        return self.auth_builder.build(self.flow_state)

    async def run(self) -> TokenResult:
        """Run the flow to completion

        Returns:
            TokenResult obtained from the provider

        Raises:
            ListenerError: Callback listener could not start
            CallbackTimeout: No callback within the configured timeout
            OAuthCLIError: The callback was rejected (state, provider
                error, exchange or nonce failure)
        """
        await self.server.start()
        try:
            self.console.print("Visit this URL in your browser:", style="bold")
            self.console.print(self.authorization_url(), soft_wrap=True, markup=False, highlight=False)
            self.console.print()

            outcome = await self.server.wait_for_callback(self.config.timeout)
        finally:
            await self.server.stop()

        if outcome.error is not None:
            raise outcome.error
        return outcome.token
