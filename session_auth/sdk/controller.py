"""
Session Controller - The only entry point that mutates session state.

Owns the SessionStatus state machine, runs forms through the validators,
talks to the remote authority through an AuthenticationPort and persists
results through the CredentialStore.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from session_auth.domain.profile import UserProfile
from session_auth.domain.session import SessionState, SessionStatus
from session_auth.domain.validation import validate_login_form, validate_signup_form
from session_auth.exceptions import (
    AuthRejectedError,
    InvalidTransitionError,
    OperationInProgressError,
    SessionAuthError,
    ValidationError,
)
from session_auth.ports.auth_port import AuthenticationPort, AuthResponse
from session_auth.sdk.gateway import RequestGateway
from session_auth.sdk.store import CredentialStore

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]

LOGIN_FAILED = "Login failed. Please try again."
SIGNUP_FAILED = "Signup failed. Please try again."


@dataclass(frozen=True)
class AuthResult:
    """Outcome of login/signup as shown to the user."""
    success: bool
    message: str


class SessionController:
    """
    Session state machine.

    Example:
        controller = SessionController(store, auth, gateway=gateway)
        result = await controller.login("e@x.com", "Secret1!")
        if result.success:
            print(controller.profile.email)
        await controller.logout()
    """

    def __init__(
        self,
        store: CredentialStore,
        auth: AuthenticationPort,
        gateway: Optional[RequestGateway] = None,
        verify_on_start: bool = True,
    ):
        """
        Initialize the controller from whatever the store holds.

        With a stored token the controller starts AUTHENTICATED using the
        cached profile and, when an event loop is running, schedules
        verify_session() in the background (see ready()).

        Args:
            store: Credential store (usually the process-wide one)
            auth: Remote authority
            gateway: Gateway whose forced session ends this controller follows
            verify_on_start: Schedule verification of a stored token
        """
        self._store = store
        self._auth = auth
        self._alive = True
        self._pending: Optional[str] = None
        self._listeners: List[StateListener] = []
        self._unsubscribe_gateway = gateway.subscribe(self._on_session_ended) if gateway else None
        self._startup_task: Optional[asyncio.Task] = None

        if store.has_token():
            self._state = SessionState(
                status=SessionStatus.AUTHENTICATED,
                profile=store.get_user_profile(),
            )
            logger.info("Restored session from storage")
            if verify_on_start:
                self._schedule_startup_verify()
        else:
            self._state = SessionState()

    def _schedule_startup_verify(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, startup verification left to the caller")
            return
        self._startup_task = loop.create_task(self._startup_verify())

    async def _startup_verify(self) -> None:
        try:
            await self.verify_session()
        except OperationInProgressError as e:
            logger.debug(f"Startup verification skipped: {e.message}")

    async def ready(self) -> None:
        """Wait for the startup verification, if one was scheduled."""
        if self._startup_task is not None:
            await asyncio.shield(self._startup_task)

    # State

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._state.profile

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def in_flight(self) -> Optional[str]:
        """Name of the pending login/signup/verify, or None."""
        return self._pending

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def expires_at(self) -> Optional[datetime]:
        """Expiry of the stored access token when it carries one."""
        credential = self._store.get_credential()
        return credential.expires_at if credential else None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a state listener.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SessionState) -> None:
        if not self._alive:
            return
        previous = self._state
        self._state = state
        if previous.status != state.status:
            logger.info(f"Session {previous.status.value} -> {state.status.value}")
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session state listener failed")

    def _move(self, target: SessionStatus, **kwargs) -> None:
        if not self._alive:
            return
        self._set_state(self._state.transition(target, **kwargs))

    def _discard_credentials(self) -> None:
        if self._store.has_token():
            self._store.clear()

    # Guards

    def _begin(self, operation: str) -> None:
        if self._pending is not None:
            raise OperationInProgressError(operation, self._pending)
        self._pending = operation

    def _end(self) -> None:
        self._pending = None

    # Operations

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Log in.

        Raises:
            ValidationError: The form is invalid (nothing is sent)
            InvalidTransitionError: Not in UNAUTHENTICATED or FAILED
            OperationInProgressError: Another operation is pending
        """
        form = validate_login_form(email, password)
        if not form.is_valid:
            raise ValidationError(form.errors)

        return await self._authenticate(
            "login",
            lambda: self._auth.login(email, password),
            success_message="Login successful",
            failure_message=LOGIN_FAILED,
        )

    async def signup(
        self,
        email: str,
        password: str,
        name: str = "",
        confirm_password: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an account and log in.

        Args:
            confirm_password: Confirmation field; defaults to password when
                the caller collects no confirmation

        Raises:
            ValidationError: The form is invalid (nothing is sent)
            InvalidTransitionError: Not in UNAUTHENTICATED or FAILED
            OperationInProgressError: Another operation is pending
        """
        if confirm_password is None:
            confirm_password = password
        form = validate_signup_form(email, password, confirm_password)
        if not form.is_valid:
            raise ValidationError(form.errors)

        return await self._authenticate(
            "signup",
            lambda: self._auth.signup(email, password, name),
            success_message="Signup successful",
            failure_message=SIGNUP_FAILED,
        )

    async def _authenticate(self, operation, call, success_message, failure_message) -> AuthResult:
        self._begin(operation)
        try:
            if self._state.status not in (SessionStatus.UNAUTHENTICATED, SessionStatus.FAILED):
                raise InvalidTransitionError(self._state.status.value, SessionStatus.AUTHENTICATING.value)

            self._move(SessionStatus.AUTHENTICATING)
            try:
                response: AuthResponse = await call()
                self._store.save_session(
                    response.token,
                    response.user,
                    refresh_token=response.refresh_token,
                )
            except SessionAuthError as e:
                return self._fail(operation, e, e.message if isinstance(e, AuthRejectedError) else failure_message)
            except Exception as e:
                logger.exception(f"Unexpected error during {operation}")
                return self._fail(operation, e, failure_message)

            self._move(SessionStatus.AUTHENTICATED, profile=response.user)
            logger.info(f"{operation} succeeded for {response.user.email}")
            return AuthResult(success=True, message=success_message)
        finally:
            self._end()

    def _fail(self, operation: str, error: BaseException, message: str) -> AuthResult:
        logger.warning(f"{operation} failed: {error!r}")
        self._discard_credentials()
        if self._state.status == SessionStatus.AUTHENTICATING:
            self._move(SessionStatus.FAILED, error=message, error_detail=error)
        return AuthResult(success=False, message=message)

    async def logout(self) -> None:
        """
        Log out. The remote call is best effort; the store is always cleared
        and the state always ends UNAUTHENTICATED.
        """
        try:
            await self._auth.logout()
        except Exception as e:
            logger.warning(f"Remote logout failed, clearing local session anyway: {e!r}")
        finally:
            self._store.clear()
            if self._state.status != SessionStatus.UNAUTHENTICATED:
                self._move(SessionStatus.UNAUTHENTICATED)

    async def verify_session(self) -> bool:
        """
        Ask the remote authority whether the stored token is still valid.

        Returns:
            True if the session is valid; on any failure the store is
            cleared and the state becomes UNAUTHENTICATED

        Raises:
            OperationInProgressError: Another operation is pending
        """
        self._begin("verify")
        try:
            if not self._store.has_token():
                if self._state.status == SessionStatus.AUTHENTICATED:
                    self._move(SessionStatus.UNAUTHENTICATED)
                return False

            try:
                profile = await self._auth.verify()
            except Exception as e:
                logger.warning(f"Session verification failed: {e!r}")
                self._discard_credentials()
                if self._state.status != SessionStatus.UNAUTHENTICATED:
                    self._move(SessionStatus.UNAUTHENTICATED)
                return False

            # Logout or a 401 may have cleared the store while verify was pending
            if not self._store.has_token():
                return False

            if profile is not None:
                self._store.set_user_profile(profile)
            else:
                profile = self._store.get_user_profile()

            self._move(SessionStatus.AUTHENTICATED, profile=profile)
            return True
        finally:
            self._end()

    def clear_error(self) -> None:
        """Remove the error message without changing the status."""
        if self._state.error is not None:
            self._set_state(self._state.without_error())

    # Gateway events

    def _on_session_ended(self, _login_path: str) -> None:
        if self._state.status != SessionStatus.UNAUTHENTICATED:
            self._move(SessionStatus.UNAUTHENTICATED)

    def close(self) -> None:
        """
        Tear the controller down.

        Operations still pending complete without touching state or
        calling listeners.
        """
        self._alive = False
        self._listeners.clear()
        if self._unsubscribe_gateway is not None:
            self._unsubscribe_gateway()
            self._unsubscribe_gateway = None
