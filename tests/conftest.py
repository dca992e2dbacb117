"""
Shared fixtures: in-memory credential store and a scriptable fake backend
served through httpx.MockTransport.
"""

import json
import httpx
import pytest
import pytest_asyncio
from session_auth.adapters import MemoryStorageAdapter
from session_auth.sdk.gateway import RequestGateway
from session_auth.sdk.store import CredentialStore

BASE_URL = "http://auth.test/api"


class FakeAuthBackend:
    """
    Stand-in for the remote authority.

    Implements the /auth/* contract plus a protected GET /orders endpoint.
    Routes can be overridden per test with `on()`.
    """

    def __init__(self):
        self.requests = []
        self.accounts = {"e@x.com": {"password": "Secret1!", "id": 1, "name": "Eve"}}
        self.valid_tokens = {"t1"}
        self.valid_refresh_tokens = set()
        self.next_token = 2
        self._routes = {
            ("POST", "/auth/login"): self._login,
            ("POST", "/auth/signup"): self._signup,
            ("POST", "/auth/logout"): lambda request: httpx.Response(204),
            ("GET", "/auth/verify"): self._protected(lambda request: httpx.Response(200, json={"valid": True})),
            ("POST", "/auth/refresh"): self._refresh,
            ("GET", "/orders"): self._protected(lambda request: httpx.Response(200, json=[])),
        }

    def on(self, method, path, handler):
        """Override a route. handler(request) -> httpx.Response."""
        self._routes[(method, path)] = handler

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and self.path(r) == path]

    @staticmethod
    def path(request):
        return request.url.path[len("/api"):]

    @staticmethod
    def bearer(request):
        header = request.headers.get("Authorization", "")
        return header[len("Bearer "):] if header.startswith("Bearer ") else None

    def __call__(self, request):
        self.requests.append(request)
        handler = self._routes.get((request.method, self.path(request)))
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        return handler(request)

    def _protected(self, handler):
        def wrapped(request):
            if self.bearer(request) not in self.valid_tokens:
                return httpx.Response(401, json={"message": "Unauthorized"})
            return handler(request)
        return wrapped

    def _login(self, request):
        body = json.loads(request.content)
        account = self.accounts.get(body.get("email"))
        if not account or account["password"] != body.get("password"):
            return httpx.Response(401, json={"message": "Invalid email or password"})
        return httpx.Response(200, json={
            "token": "t1",
            "user": {"id": account["id"], "email": body["email"]},
        })

    def _signup(self, request):
        body = json.loads(request.content)
        if body["email"] in self.accounts:
            return httpx.Response(409, json={"message": "Email already registered"})

        user_id = len(self.accounts) + 1
        self.accounts[body["email"]] = {"password": body["password"], "id": user_id, "name": body["name"]}
        token = f"t{self.next_token}"
        self.next_token += 1
        self.valid_tokens.add(token)
        self.valid_refresh_tokens.add(f"r-{token}")
        return httpx.Response(201, json={
            "token": token,
            "refreshToken": f"r-{token}",
            "user": {"id": user_id, "email": body["email"], "name": body["name"]},
        })

    def _refresh(self, request):
        body = json.loads(request.content)
        if body.get("refreshToken") not in self.valid_refresh_tokens:
            return httpx.Response(401, json={"message": "Invalid refresh token"})
        token = f"t{self.next_token}"
        self.next_token += 1
        self.valid_tokens.add(token)
        return httpx.Response(200, json={"token": token})


class CountingStore(CredentialStore):
    """CredentialStore that counts clear() calls which removed a token."""

    def __init__(self, *args, **kwargs):
        self.clear_calls = 0
        self.effective_clears = 0
        super().__init__(*args, **kwargs)

    def clear(self) -> bool:
        self.clear_calls += 1
        had_token = super().clear()
        if had_token:
            self.effective_clears += 1
        return had_token


@pytest.fixture
def storage():
    return MemoryStorageAdapter()


@pytest.fixture
def store(storage):
    return CountingStore(storage)


@pytest.fixture
def backend():
    return FakeAuthBackend()


@pytest_asyncio.fixture
async def gateway(store, backend):
    gateway = RequestGateway(store, base_url=BASE_URL, transport=httpx.MockTransport(backend))
    yield gateway
    await gateway.aclose()
