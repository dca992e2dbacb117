"""
Credential Store - Durable plus cached persistence of the session credential.

The only abstraction over persistence. Holds three keys: access token,
refresh token and user profile, which are always cleared together.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Union
from session_auth.domain.credential import Credential
from session_auth.domain.profile import UserProfile
from session_auth.exceptions import StorageCorruptError
from session_auth.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)

ProfileInput = Union[UserProfile, Dict[str, Any], str]


class CredentialStore:
    """
    Write-through, read-through credential cache over a StoragePort.

    Writes go to durable storage first and then to the cache. Reads use the
    cache and fall back to durable storage when the cache holds nothing for
    the key, refilling the cache on a hit.

    Example:
        store = CredentialStore(FileStorageAdapter("~/.app/creds.json"))
        store.set_access_token("abc")
        store.has_token()  # True
        store.clear()
    """

    def __init__(
        self,
        storage: StoragePort,
        token_key: str = "auth_token",
        refresh_token_key: str = "refresh_token",
        user_key: str = "auth_user",
    ):
        """
        Initialize the store and hydrate the cache.

        Args:
            storage: Durable storage backend
            token_key: Key for the access token
            refresh_token_key: Key for the refresh token
            user_key: Key for the serialized user profile
        """
        self._storage = storage
        self._token_key = token_key
        self._refresh_token_key = refresh_token_key
        self._user_key = user_key
        self._cache: Dict[str, Optional[str]] = {}
        self.hydrate()

    @property
    def storage(self) -> StoragePort:
        return self._storage

    def _keys(self):
        return (self._token_key, self._refresh_token_key, self._user_key)

    def hydrate(self) -> None:
        """Load all keys from durable storage into the cache."""
        self._cache = {key: self._storage.get_item(key) for key in self._keys()}
        logger.debug(f"Credential store hydrated, token present: {bool(self._cache[self._token_key])}")

    def invalidate_cache(self) -> None:
        """Drop the cache; the next read goes to durable storage."""
        self._cache = {}

    def _read(self, key: str) -> Optional[str]:
        value = self._cache.get(key)
        if value:
            return value

        value = self._storage.get_item(key)
        self._cache[key] = value
        return value

    def _write(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._storage.remove_item(key)
        else:
            self._storage.set_item(key, value)
        self._cache[key] = value

    # Access token

    def set_access_token(self, token: str) -> None:
        """Persist the access token."""
        if not token:
            raise ValueError("access token must be a non-empty string")
        self._write(self._token_key, token)

    def get_access_token(self) -> Optional[str]:
        """Current access token, or None."""
        return self._read(self._token_key) or None

    def has_token(self) -> bool:
        return bool(self.get_access_token())

    # Refresh token

    def set_refresh_token(self, token: Optional[str]) -> None:
        """Persist the refresh token. None removes it."""
        self._write(self._refresh_token_key, token or None)

    def get_refresh_token(self) -> Optional[str]:
        return self._read(self._refresh_token_key) or None

    # User profile

    def set_user_profile(self, profile: Optional[ProfileInput]) -> None:
        """
        Persist the user profile.

        Args:
            profile: UserProfile, backend dict, or an already serialized
                JSON string (stored as-is). None removes it.
        """
        if profile is None:
            self._write(self._user_key, None)
            return

        if isinstance(profile, str):
            serialized = profile
        elif isinstance(profile, UserProfile):
            serialized = json.dumps(profile.to_dict())
        else:
            serialized = json.dumps(profile)

        self._write(self._user_key, serialized)

    def get_user_profile(self) -> Optional[UserProfile]:
        """
        Stored profile, or None when absent or unreadable.

        Corrupt data is logged and reported as absent; it never raises.
        """
        raw = self._read(self._user_key)
        if not raw:
            return None

        try:
            return self._decode_profile(raw)
        except StorageCorruptError as e:
            logger.warning(e.message)
            return None

    def _decode_profile(self, raw: str) -> UserProfile:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise StorageCorruptError(self._user_key, str(e)) from e

        try:
            return UserProfile.from_dict(data)
        except ValueError as e:
            raise StorageCorruptError(self._user_key, str(e)) from e

    # Whole session

    def get_credential(self) -> Optional[Credential]:
        """Access and refresh token as a Credential, or None."""
        token = self.get_access_token()
        if not token:
            return None
        return Credential(access_token=token, refresh_token=self.get_refresh_token())

    def save_session(
        self,
        token: str,
        profile: Optional[ProfileInput],
        refresh_token: Optional[str] = None,
    ) -> None:
        """
        Persist a complete exchange result.

        If any write fails, everything is cleared before the error
        propagates so no partial credential survives.
        """
        try:
            self.set_access_token(token)
            self.set_refresh_token(refresh_token)
            self.set_user_profile(profile)
        except Exception:
            logger.error("Failed to persist session, clearing partial credentials", exc_info=True)
            self.clear()
            raise

    def clear(self) -> bool:
        """
        Remove all three keys and reset the cache.

        Returns:
            True if an access token was present before clearing
        """
        had_token = bool(self._cache.get(self._token_key)) or bool(
            self._storage.get_item(self._token_key)
        )

        try:
            for key in self._keys():
                self._storage.remove_item(key)
        finally:
            # Reads fall through to storage, which reflects any key left behind
            self._cache = {key: None for key in self._keys()}

        if had_token:
            logger.info("Credential store cleared")
        return had_token


@lru_cache
def get_credential_store() -> CredentialStore:
    """
    Process-wide credential store built from settings.

    Every controller in the process shares this instance.
    """
    from session_auth.adapters import create_storage
    from session_auth.config import get_settings

    settings = get_settings()
    return CredentialStore(
        create_storage(settings),
        token_key=settings.token_key,
        refresh_token_key=settings.refresh_token_key,
        user_key=settings.user_key,
    )
