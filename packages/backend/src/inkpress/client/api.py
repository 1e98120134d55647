"""Async API client for the Inkpress backend.

Learn: Every protected call pulls the token from the SessionStore first
(NotLoggedIn is raised locally, no request is sent) and passes it as an
explicit Authorization header on that one request. The underlying
httpx client never gets a default auth header, so logging out can't
leave a stale token attached to later calls.
"""

from typing import Optional

import httpx

from inkpress.client.session import SessionStore

DEFAULT_API_URL = "http://localhost:5000"


class ApiError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, status_code: int, category: str, message: str):
        super().__init__(f"{status_code} {category}: {message}")
        self.status_code = status_code
        self.category = category
        self.message = message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        category, message = "unknown", response.text or response.reason_phrase
        try:
            error = response.json().get("error", {})
            category = error.get("category", category)
            message = error.get("message", message)
        except (ValueError, AttributeError):
            pass
        return cls(response.status_code, category, message)


class BlogClient:
    """Thin wrapper over the REST API, bound to a SessionStore."""

    def __init__(
        self,
        session: SessionStore,
        base_url: str = DEFAULT_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "BlogClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Plumbing ───────────────────────────────────────

    async def _request(self, method: str, path: str, *, auth: bool = False, **kwargs):
        if auth:
            token = self.session.require_token()
            kwargs["headers"] = {"Authorization": f"Bearer {token}"}
        response = await self._http.request(method, f"/api{path}", **kwargs)
        if response.is_error:
            raise ApiError.from_response(response)
        return response.json()

    # ─── Account ────────────────────────────────────────

    async def signup(self, username: str, email: str, password: str) -> dict:
        """Create an account and start a session with it."""
        data = await self._request(
            "POST",
            "/auth/signup",
            json={"username": username, "email": email, "password": password},
        )
        self.session.login(data["user"], data["token"])
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        data = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        self.session.login(data["user"], data["token"])
        return data["user"]

    def logout(self) -> None:
        self.session.logout()

    async def me(self) -> dict:
        return await self._request("GET", "/auth/me", auth=True)

    # ─── Posts ──────────────────────────────────────────

    async def list_posts(self) -> list[dict]:
        return await self._request("GET", "/posts")

    async def get_post(self, post_id: str) -> dict:
        return await self._request("GET", f"/posts/{post_id}")

    async def create_post(self, title: str, content: str) -> dict:
        return await self._request(
            "POST", "/posts", auth=True, json={"title": title, "content": content}
        )

    async def update_post(self, post_id: str, title: str, content: str) -> dict:
        return await self._request(
            "PUT", f"/posts/{post_id}", auth=True, json={"title": title, "content": content}
        )

    async def delete_post(self, post_id: str) -> dict:
        return await self._request("DELETE", f"/posts/{post_id}", auth=True)
