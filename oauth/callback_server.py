"""
Local single-shot OAuth callback server
"""
import asyncio
import enum
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from aiohttp import web

from config.models import OAuthCLIConfig
from .exceptions import AuthorizationDenied, CallbackTimeout, ListenerError, OAuthCLIError, StateMismatch
from .nonce import check_nonce
from .state import FlowState
from .token_exchange import TokenExchanger, TokenResult

logger = logging.getLogger(__name__)


class CallbackState(enum.Enum):
    IDLE = "idle"
    AWAITING = "awaiting"
    VALIDATING = "validating"
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass
class CallbackOutcome:
    """Result of handling the one expected callback"""
    status: int
    body: str
    token: Optional[TokenResult] = None
    error: Optional[OAuthCLIError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class OAuthCallbackServer:
    """Local HTTP server that accepts exactly one OAuth redirect"""

    def __init__(
        self,
        config: OAuthCLIConfig,
        flow_state: FlowState,
        exchanger: TokenExchanger,
        path: str,
    ):
        self.config = config
        self.flow_state = flow_state
        self.exchanger = exchanger
        self.path = path
        self.state = CallbackState.IDLE
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._outcome: Optional[asyncio.Future] = None

        # Register callback route
        self.app.router.add_get(path, self._handle_callback)

    def _future(self) -> asyncio.Future:
        if self._outcome is None:
            self._outcome = asyncio.get_running_loop().create_future()
        return self._outcome

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        if self.state not in (CallbackState.IDLE, CallbackState.AWAITING):
            logger.warning(f"Ignoring extra callback request: {request.rel_url}")
            return web.Response(text="Callback already handled", status=410)

        self.state = CallbackState.VALIDATING
        try:
            outcome = await self._process(request)
        except OAuthCLIError as e:
            logger.error(f"Callback rejected ({e.status_code}): {e}")
            outcome = CallbackOutcome(status=e.status_code, body=str(e), error=e)
        except Exception as e:
            logger.exception("Error in callback handler")
            error = ListenerError(f"Internal error: {e}")
            outcome = CallbackOutcome(status=500, body=str(error), error=error)

        self.state = CallbackState.SUCCESS if outcome.ok else CallbackState.REJECTED

        # Release the waiting flow whatever happened
        future = self._future()
        if not future.done():
            future.set_result(outcome)

        if outcome.ok:
            return web.Response(text=outcome.body, content_type="application/json")
        return web.Response(text=outcome.body, status=outcome.status)

    async def _process(self, request: web.Request) -> CallbackOutcome:
        if self.config.verbose:
            body = await request.text()
            headers = "".join(f"{name}: {value}\n" for name, value in request.headers.items())
            logger.debug(f"Got callback: {request.method} {request.rel_url}\n{headers}\nbody:\n{body}")

        query = request.query

        # Validate state (CSRF protection)
        received_state = query.get("state", "")
        if not hmac.compare_digest(received_state.encode("utf-8"), self.flow_state.state.encode("utf-8")):
            raise StateMismatch(received_state)

        error = query.get("error")
        if error:
            raise AuthorizationDenied(error, query.get("error_description", ""))

        code = query.get(self.config.code_param, "")
        token = await self.exchanger.exchange(code)

        if self.flow_state.nonce:
            check_nonce(self.flow_state.nonce, token)

        token_json = token.to_json()
        logger.info(f"result:\n{token_json}")
        return CallbackOutcome(status=200, body=token_json, token=token)

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound (differs from the configured one for port 0)"""
        if self.runner and self.runner.addresses:
            return self.runner.addresses[0][1]
        return None

    async def start(self) -> None:
        """Start the callback server"""
        self._future()
        self.runner = web.AppRunner(self.app, access_log=None)
        await self.runner.setup()

        site = web.TCPSite(
            self.runner,
            host=self.config.interface,
            port=self.config.port,
        )

        try:
            await site.start()
        except OSError as e:
            await self.runner.cleanup()
            self.runner = None
            raise ListenerError(f"failed to listen on {self.config.listen_address}: {e}") from e

        self.state = CallbackState.AWAITING
        logger.info(f"OAuth callback server listening on {self.config.listen_address}{self.path}")

    async def wait_for_callback(self, timeout: Optional[float] = None) -> CallbackOutcome:
        """
        Wait for the OAuth callback.

        Args:
            timeout: Maximum time to wait in seconds (None waits forever)

        Returns:
            CallbackOutcome of the single handled request

        Raises:
            CallbackTimeout: If no callback arrived in time
        """
        try:
            return await asyncio.wait_for(asyncio.shield(self._future()), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CallbackTimeout(f"OAuth callback timeout after {timeout} seconds") from e

    async def stop(self) -> None:
        """Stop accepting connections and drain the in-flight response"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.debug("OAuth callback server stopped")
