"""
End-to-end session flows: controller -> HTTP adapter -> gateway -> fake backend.

Demonstrates:
1. Login and signup against the remote authority
2. Authenticated requests carrying the stored token
3. Forced session end on 401
4. Logout and startup verification
"""

import httpx
import pytest
import pytest_asyncio
from session_auth import AuthClient, SessionStatus
from session_auth.adapters import HTTPAuthAdapter, MemoryStorageAdapter
from session_auth.config import Settings
from session_auth.exceptions import SessionExpiredError
from session_auth.sdk.controller import SessionController
from session_auth.sdk.gateway import RequestGateway
from session_auth.sdk.store import CredentialStore
from tests.conftest import BASE_URL


@pytest_asyncio.fixture
async def client(store, backend):
    navigations = []
    gateway = RequestGateway(store, base_url=BASE_URL, transport=httpx.MockTransport(backend))
    client = AuthClient(store, gateway, navigator=navigations.append)
    client.navigations = navigations
    yield client
    await client.aclose()


class TestLoginFlow:

    @pytest.mark.asyncio
    async def test_login_persists_token_and_profile(self, client, store):
        result = await client.login("e@x.com", "Secret1!")

        assert result.success
        assert result.message == "Login successful"
        assert store.get_access_token() == "t1"
        assert client.state.status == SessionStatus.AUTHENTICATED
        assert client.state.profile.email == "e@x.com"
        assert client.state.profile.user_id == 1

    @pytest.mark.asyncio
    async def test_login_sends_no_credential(self, client, backend):
        await client.login("e@x.com", "Secret1!")

        request = backend.calls("POST", "/auth/login")[0]
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_wrong_password_shows_server_message(self, client, store):
        result = await client.login("e@x.com", "Wrong1!")

        assert not result.success
        assert result.message == "Invalid email or password"
        assert client.state.status == SessionStatus.FAILED
        assert client.state.error == "Invalid email or password"
        assert not store.has_token()
        assert client.navigations == []

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, client):
        await client.login("e@x.com", "Wrong1!")

        result = await client.login("e@x.com", "Secret1!")

        assert result.success
        assert client.state.status == SessionStatus.AUTHENTICATED
        assert client.state.error is None

    @pytest.mark.asyncio
    async def test_server_error_without_message_uses_default(self, client, backend):
        backend.on("POST", "/auth/login", lambda request: httpx.Response(500, text="oops"))

        result = await client.login("e@x.com", "Secret1!")

        assert not result.success
        assert result.message == "Login failed. Please try again."

    @pytest.mark.asyncio
    async def test_malformed_success_body_fails_login(self, client, backend, store):
        backend.on("POST", "/auth/login", lambda request: httpx.Response(200, json={"user": {"id": 1}}))

        result = await client.login("e@x.com", "Secret1!")

        assert not result.success
        assert result.message == "Login failed. Please try again."
        assert not store.has_token()

    @pytest.mark.asyncio
    async def test_unreachable_server_fails_login(self, client, backend):
        def unreachable(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        backend.on("POST", "/auth/login", unreachable)

        result = await client.login("e@x.com", "Secret1!")

        assert not result.success
        assert client.state.status == SessionStatus.FAILED


class TestSignupFlow:

    @pytest.mark.asyncio
    async def test_signup_logs_in(self, client, store, backend):
        result = await client.signup("new@x.com", "Secret1!", name="Newt")

        assert result.success
        assert result.message == "Signup successful"
        assert store.get_access_token() == "t2"
        assert store.get_refresh_token() == "r-t2"
        assert client.state.profile.name == "Newt"
        assert backend.accounts["new@x.com"]["name"] == "Newt"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, client, store):
        result = await client.signup("e@x.com", "Secret1!", name="Eve")

        assert not result.success
        assert result.message == "Email already registered"
        assert client.state.status == SessionStatus.FAILED
        assert not store.has_token()


class TestAuthenticatedRequests:

    @pytest.mark.asyncio
    async def test_protected_call_uses_login_token(self, client, backend):
        await client.login("e@x.com", "Secret1!")

        response = await client.gateway.get("/orders")

        assert response.status_code == 200
        assert backend.bearer(backend.calls("GET", "/orders")[0]) == "t1"

    @pytest.mark.asyncio
    async def test_revoked_token_ends_session(self, client, backend, store):
        await client.login("e@x.com", "Secret1!")
        backend.valid_tokens.discard("t1")

        with pytest.raises(SessionExpiredError):
            await client.gateway.get("/orders")

        assert not store.has_token()
        assert client.state.status == SessionStatus.UNAUTHENTICATED
        assert client.state.profile is None
        assert client.navigations == ["/"]

    @pytest.mark.asyncio
    async def test_can_log_in_again_after_forced_end(self, client, backend):
        await client.login("e@x.com", "Secret1!")
        backend.valid_tokens.discard("t1")
        with pytest.raises(SessionExpiredError):
            await client.gateway.get("/orders")
        backend.valid_tokens.add("t1")

        result = await client.login("e@x.com", "Secret1!")

        assert result.success
        assert client.state.status == SessionStatus.AUTHENTICATED


class TestLogoutFlow:

    @pytest.mark.asyncio
    async def test_logout_clears_everything(self, client, store, backend):
        await client.login("e@x.com", "Secret1!")

        await client.logout()

        assert not store.has_token()
        assert client.state.status == SessionStatus.UNAUTHENTICATED
        assert backend.bearer(backend.calls("POST", "/auth/logout")[0]) == "t1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failure", ["status", "timeout"])
    async def test_logout_survives_remote_failure(self, client, store, backend, failure):
        def broken_logout(request):
            if failure == "timeout":
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(500, json={"message": "boom"})

        backend.on("POST", "/auth/logout", broken_logout)
        await client.login("e@x.com", "Secret1!")

        await client.logout()

        assert not store.has_token()
        assert client.state.status == SessionStatus.UNAUTHENTICATED


class TestStartupVerification:

    @pytest.mark.asyncio
    async def test_valid_stored_token(self, storage, backend):
        storage.set_item("auth_token", "t1")
        storage.set_item("auth_user", '{"id": 1, "email": "e@x.com"}')
        store = CredentialStore(storage)

        async with RequestGateway(store, base_url=BASE_URL, transport=httpx.MockTransport(backend)) as gateway:
            controller = SessionController(store, HTTPAuthAdapter(gateway), gateway=gateway)
            assert controller.status == SessionStatus.AUTHENTICATED

            await controller.ready()

            assert controller.status == SessionStatus.AUTHENTICATED
            assert controller.profile.email == "e@x.com"
            assert len(backend.calls("GET", "/auth/verify")) == 1

    @pytest.mark.asyncio
    async def test_stale_stored_token(self, storage, backend):
        storage.set_item("auth_token", "stale")
        store = CredentialStore(storage)
        navigations = []

        async with RequestGateway(store, base_url=BASE_URL, transport=httpx.MockTransport(backend)) as gateway:
            gateway.subscribe(navigations.append)
            controller = SessionController(store, HTTPAuthAdapter(gateway), gateway=gateway)

            await controller.ready()

            assert controller.status == SessionStatus.UNAUTHENTICATED
            assert not store.has_token()
            assert storage.keys() == []
            assert navigations == ["/"]

    @pytest.mark.asyncio
    async def test_verify_refreshes_profile_from_response(self, storage, backend):
        backend.on("GET", "/auth/verify", lambda request: httpx.Response(
            200, json={"valid": True, "user": {"id": 1, "email": "e@x.com", "name": "Eve"}},
        ))
        storage.set_item("auth_token", "t1")
        store = CredentialStore(storage)

        async with RequestGateway(store, base_url=BASE_URL, transport=httpx.MockTransport(backend)) as gateway:
            controller = SessionController(store, HTTPAuthAdapter(gateway), gateway=gateway)
            await controller.ready()

            assert controller.profile.name == "Eve"
            assert store.get_user_profile().name == "Eve"


class TestFromSettings:

    @pytest.mark.asyncio
    async def test_builds_working_client(self, backend):
        settings = Settings(_env_file=None, api_url=BASE_URL, storage_backend="memory")

        async with AuthClient.from_settings(settings, transport=httpx.MockTransport(backend)) as client:
            assert client.gateway.base_url.rstrip("/") == BASE_URL
            result = await client.login("e@x.com", "Secret1!")

            assert result.success
            assert client.store.get_access_token() == "t1"

    @pytest.mark.asyncio
    async def test_clients_with_shared_store_see_one_credential(self, backend):
        store = CredentialStore(MemoryStorageAdapter())
        transport = httpx.MockTransport(backend)
        first = AuthClient(store, RequestGateway(store, base_url=BASE_URL, transport=transport))
        second = AuthClient(store, RequestGateway(store, base_url=BASE_URL, transport=transport))

        await first.login("e@x.com", "Secret1!")
        assert await second.verify_session() is True
        assert second.state.status == SessionStatus.AUTHENTICATED

        await first.aclose()
        await second.aclose()
