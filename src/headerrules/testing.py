"""In-process test client for ASGI applications.

Sends requests through the ASGI interface directly — no HTTP involved —
and captures the status, headers, and body the application sent.

Usage::

    client = TestClient(HeaderRulesMiddleware(app, rules))
    response = await client.get("/assets/webfont.woff")
    assert response.headers["access-control-allow-origin"] == "*"
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from headerrules._internal.asgi import ASGIApp
from headerrules.http.headers import MutableHeaders


@dataclass(frozen=True, slots=True)
class TestResponse:
    __test__ = False  # Tell pytest this is not a test class
    """A captured response."""

    status: int
    headers: MutableHeaders = field(default_factory=MutableHeaders)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for ASGI applications."""

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        root_path: str = "",
    ) -> TestResponse:
        """Send an arbitrary request through the ASGI app.

        *path* is sent percent-encoded as ``raw_path`` and decoded as
        ``path``, the way an ASGI server fills in the scope.
        """
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        raw_headers: list[tuple[bytes, bytes]] = []
        for name, value in (headers or {}).items():
            raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": unquote(path_part),
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": root_path,
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        response_status = 500
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        return TestResponse(
            status=response_status,
            headers=MutableHeaders(response_headers),
            body=b"".join(response_body_parts),
        )
