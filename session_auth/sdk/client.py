"""
Auth Client - High-level SDK that wires the session components together.

Simplifies the common setup for application developers.
"""

from typing import Callable, Optional, Any
import httpx
from session_auth.adapters import HTTPAuthAdapter, create_storage
from session_auth.config import Settings, get_settings
from session_auth.domain.session import SessionState
from session_auth.ports.auth_port import AuthenticationPort
from session_auth.sdk.controller import AuthResult, SessionController
from session_auth.sdk.gateway import RequestGateway
from session_auth.sdk.store import CredentialStore, get_credential_store


class AuthClient:
    """
    High-level client combining credential store, gateway and session controller.

    Example:
        from session_auth import AuthClient

        async with AuthClient.from_settings(navigator=router.push) as client:
            await client.controller.ready()

            # Login
            result = await client.login("e@x.com", "Secret1!")

            # Authenticated calls reuse the stored token
            response = await client.gateway.get("/orders")

            # Logout
            await client.logout()
    """

    def __init__(
        self,
        store: CredentialStore,
        gateway: RequestGateway,
        auth: Optional[AuthenticationPort] = None,
        verify_on_start: bool = True,
        navigator: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize auth client with components.

        Args:
            store: Credential store
            gateway: Request gateway bound to the same store
            auth: Remote authority (defaults to HTTPAuthAdapter over gateway)
            verify_on_start: Verify a stored token in the background
            navigator: Host UI hook called with the login path when a
                401 ends the session
        """
        self._store = store
        self._gateway = gateway
        self._auth = auth or HTTPAuthAdapter(gateway)
        if navigator is not None:
            gateway.subscribe(navigator)
        self._controller = SessionController(
            store,
            self._auth,
            gateway=gateway,
            verify_on_start=verify_on_start,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        navigator: Optional[Callable[[str], Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AuthClient":
        """
        Build a client from settings.

        Without explicit settings the process-wide store is used, so every
        client in the process shares one credential.

        Args:
            settings: Settings (defaults to get_settings())
            navigator: Host UI navigation hook
            transport: Custom httpx transport
        """
        if settings is None:
            settings = get_settings()
            store = get_credential_store()
        else:
            store = CredentialStore(
                create_storage(settings),
                token_key=settings.token_key,
                refresh_token_key=settings.refresh_token_key,
                user_key=settings.user_key,
            )

        gateway = RequestGateway(
            store,
            base_url=settings.api_url,
            timeout=settings.request_timeout,
            login_path=settings.login_path,
            refresh_on_unauthorized=settings.refresh_on_unauthorized,
            transport=transport,
        )
        return cls(
            store,
            gateway,
            verify_on_start=settings.verify_on_start,
            navigator=navigator,
        )

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def gateway(self) -> RequestGateway:
        return self._gateway

    @property
    def controller(self) -> SessionController:
        return self._controller

    @property
    def state(self) -> SessionState:
        return self._controller.state

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._controller.login(email, password)

    async def signup(
        self,
        email: str,
        password: str,
        name: str = "",
        confirm_password: Optional[str] = None,
    ) -> AuthResult:
        return await self._controller.signup(email, password, name, confirm_password)

    async def logout(self) -> None:
        await self._controller.logout()

    async def verify_session(self) -> bool:
        return await self._controller.verify_session()

    async def aclose(self) -> None:
        """Tear down the controller and close the HTTP client."""
        self._controller.close()
        await self._gateway.aclose()

    async def __aenter__(self) -> "AuthClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
