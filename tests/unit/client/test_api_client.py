"""Tests for the RecipeBox HTTP client and its interaction with the session monitor."""

import json

import httpx
import pytest

from recipebox.client.api import RecipeBoxClient
from recipebox.client.errors import BadRequestError, TransportError, UnauthenticatedError
from recipebox.client.events import EventBus
from recipebox.client.session import LogoutReason, SessionActivityMonitor
from recipebox.client.storage import LAST_ACTIVITY_KEY, TOKEN_KEY, USERNAME_KEY, LocalStorage
from recipebox.utils import now_ms


class ManualScheduler:
    def call_every(self, interval, callback):
        return self

    def cancel(self):
        pass


def make_client(handler, storage, logouts):
    monitor = SessionActivityMonitor(storage, EventBus(), ManualScheduler(), on_logout=logouts.append)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://recipes.test")
    return RecipeBoxClient("http://recipes.test", monitor, http_client=http)


def api_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    authorization = request.headers.get("Authorization")

    if path == "/api/auth/login":
        body = json.loads(request.content)
        if body["username"] == "admin" and body["password"] == "admin123":
            return httpx.Response(200, json={"token": "good-token", "username": "admin"})
        return httpx.Response(401, json={"message": "Invalid credentials", "type": "authentication_error"})

    if path == "/api/auth/verify":
        if authorization == "Bearer good-token":
            return httpx.Response(200, json={"valid": True, "username": "admin"})
        return httpx.Response(401, json={"valid": False})

    if path == "/api/recipes" and request.method == "POST":
        if authorization != "Bearer good-token":
            return httpx.Response(401, json={"message": "Authentication failed", "type": "authentication_error"})
        return httpx.Response(400, json={"message": "All fields are required", "type": "validation_error"})

    if path.startswith("/api/recipes/") and request.method == "DELETE":
        return httpx.Response(401, json={"message": "Authentication failed", "type": "authentication_error"})

    return httpx.Response(200, json=[])


@pytest.fixture
def storage():
    return LocalStorage()


@pytest.fixture
def logouts():
    return []


@pytest.fixture
async def client(storage, logouts):
    async with make_client(api_handler, storage, logouts) as client:
        yield client


class TestClientLogin:
    @pytest.mark.asyncio
    async def test_login_stores_token_and_starts_session(self, client, storage):
        assert await client.login("admin", "admin123") == "admin"

        assert client.monitor.is_authenticated
        assert storage.get_item(TOKEN_KEY) == "good-token"
        assert storage.get_item(LAST_ACTIVITY_KEY) is not None

    @pytest.mark.asyncio
    async def test_failed_login_raises_generic_error(self, client, logouts):
        with pytest.raises(UnauthenticatedError, match="Invalid credentials"):
            await client.login("admin", "wrong")

        assert not client.monitor.is_authenticated
        assert logouts == []

    @pytest.mark.asyncio
    async def test_verify(self, client):
        assert await client.verify() is False
        await client.login("admin", "admin123")
        assert await client.verify() is True


class TestUnauthorizedResponses:
    @pytest.mark.asyncio
    async def test_401_ends_local_session(self, client, storage, logouts):
        await client.login("admin", "admin123")

        with pytest.raises(UnauthenticatedError):
            await client.delete_recipe("12345678-1234-5678-1234-567812345678")

        assert logouts == [LogoutReason.UNAUTHORIZED]
        assert storage.keys() == []
        assert client.monitor.notice is None

    @pytest.mark.asyncio
    async def test_bearer_header_attached(self, client):
        await client.login("admin", "admin123")

        with pytest.raises(BadRequestError, match="All fields are required"):
            await client.create_recipe("", "", "", "")

        assert client.monitor.is_authenticated

    @pytest.mark.asyncio
    async def test_manual_logout(self, client, storage, logouts):
        await client.login("admin", "admin123")

        client.logout()

        assert logouts == [LogoutReason.MANUAL]
        assert storage.keys() == []


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_unreachable_server(self, storage, logouts):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler, storage, logouts) as client:
            with pytest.raises(TransportError):
                await client.list_recipes()


class TestStoredSession:
    """A token left in storage by an earlier run."""

    RECIPE_ID = "12345678-1234-5678-1234-567812345678"

    @pytest.fixture
    def sent_headers(self):
        return []

    @pytest.fixture
    def recording_handler(self, sent_headers):
        def handler(request):
            sent_headers.append(request.headers.get("Authorization"))
            return api_handler(request)

        return handler

    @staticmethod
    def seed(storage, last_activity):
        storage.set_item(TOKEN_KEY, "stored-token")
        storage.set_item(USERNAME_KEY, "admin")
        storage.set_item(LAST_ACTIVITY_KEY, last_activity)

    @pytest.mark.asyncio
    async def test_stale_session_is_dropped_on_enter(self, recording_handler, sent_headers, storage, logouts):
        self.seed(storage, "0")

        async with make_client(recording_handler, storage, logouts) as client:
            assert not client.monitor.is_authenticated
            assert storage.keys() == []
            with pytest.raises(UnauthenticatedError):
                await client.delete_recipe(self.RECIPE_ID)

        assert sent_headers == [None]
        assert logouts == [LogoutReason.INACTIVITY]

    @pytest.mark.asyncio
    async def test_fresh_session_is_restored_and_ended_by_401(self, recording_handler, sent_headers, storage, logouts):
        self.seed(storage, str(now_ms()))

        async with make_client(recording_handler, storage, logouts) as client:
            assert client.monitor.is_authenticated
            with pytest.raises(UnauthenticatedError):
                await client.delete_recipe(self.RECIPE_ID)

        assert sent_headers == ["Bearer stored-token"]
        assert storage.keys() == []
        assert logouts == [LogoutReason.UNAUTHORIZED]

    @pytest.mark.asyncio
    async def test_client_used_without_entering(self, recording_handler, sent_headers, storage, logouts):
        self.seed(storage, "0")
        client = make_client(recording_handler, storage, logouts)
        try:
            with pytest.raises(UnauthenticatedError):
                await client.delete_recipe(self.RECIPE_ID)
        finally:
            await client.aclose()

        assert sent_headers == [None]
        assert storage.keys() == []
        assert logouts == []
