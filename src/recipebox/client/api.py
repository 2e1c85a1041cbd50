"""HTTP client for the RecipeBox API.

The bearer token is read from the session monitor's storage on every request
and only sent while the monitor holds an authenticated session. Entering the
client restores a stored session first. A 401 answer ends the local session
and clears any stored token.
"""

from types import TracebackType
from typing import Any

import httpx
import structlog

from recipebox.client.errors import ClientError, TransportError, error_for_status
from recipebox.client.session import LogoutReason, SessionActivityMonitor

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


class RecipeBoxClient:
    def __init__(
        self,
        base_url: str,
        monitor: SessionActivityMonitor,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.monitor = monitor
        self._http = http_client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> "RecipeBoxClient":
        self.monitor.restore()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # === Auth ===
    async def login(self, username: str, password: str) -> str:
        """Log in and start a monitored session. Returns the username."""
        data = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        self.monitor.login(data["token"], data["username"])
        return str(data["username"])

    def logout(self) -> None:
        self.monitor.logout(LogoutReason.MANUAL)

    async def verify(self) -> bool:
        """Ask the server whether the stored token is still valid."""
        if not self.monitor.token:
            return False
        try:
            data = await self._request("GET", "/auth/verify")
        except ClientError as e:
            if e.status_code == 401:
                return False
            raise
        return bool(data.get("valid"))

    # === Recipes ===
    async def list_recipes(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/recipes")

    async def get_recipe(self, recipe_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/recipes/{recipe_id}")

    async def create_recipe(self, title: str, description: str, ingredients: str, instructions: str) -> dict[str, Any]:
        body = {"title": title, "description": description, "ingredients": ingredients, "instructions": instructions}
        return await self._request("POST", "/recipes", json=body)

    async def update_recipe(
        self, recipe_id: str, title: str, description: str, ingredients: str, instructions: str
    ) -> dict[str, Any]:
        body = {"title": title, "description": description, "ingredients": ingredients, "instructions": instructions}
        return await self._request("PUT", f"/recipes/{recipe_id}", json=body)

    async def delete_recipe(self, recipe_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/recipes/{recipe_id}")

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        headers = {}
        token = self.monitor.token
        if token and self.monitor.is_authenticated:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._http.request(method, f"/api{path}", json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise TransportError(f"Could not reach server: {e}") from e

        if response.status_code == 401 and token:
            self.monitor.logout(LogoutReason.UNAUTHORIZED)

        if response.is_error:
            raise error_for_status(response.status_code, _error_message(response))
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Request failed"
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.reason_phrase or "Request failed"
