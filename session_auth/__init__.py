"""
Session Auth - Client-side session & credential management

Persists issued credentials across restarts, validates login/signup forms
before anything is sent, runs login/signup/logout/verify against a remote
authority, and attaches the bearer token to every outbound request.

Usage:
    from session_auth import AuthClient

    async with AuthClient.from_settings() as client:
        result = await client.login("e@x.com", "Secret1!")
        print(client.state.status, result.message)

        await client.logout()
"""

__version__ = "0.1.0"

from session_auth.sdk.client import AuthClient
from session_auth.sdk.controller import AuthResult, SessionController
from session_auth.sdk.gateway import RequestGateway
from session_auth.sdk.store import CredentialStore, get_credential_store
from session_auth.domain.credential import Credential
from session_auth.domain.profile import UserProfile
from session_auth.domain.session import SessionState, SessionStatus
from session_auth.exceptions import (
    AuthRejectedError,
    InvalidTransitionError,
    OperationInProgressError,
    SessionAuthError,
    SessionExpiredError,
    StorageCorruptError,
    TransportFailureError,
    ValidationError,
)

__all__ = [
    "AuthClient",
    "AuthResult",
    "SessionController",
    "RequestGateway",
    "CredentialStore",
    "get_credential_store",
    "Credential",
    "UserProfile",
    "SessionState",
    "SessionStatus",
    "SessionAuthError",
    "ValidationError",
    "AuthRejectedError",
    "SessionExpiredError",
    "TransportFailureError",
    "StorageCorruptError",
    "OperationInProgressError",
    "InvalidTransitionError",
]
