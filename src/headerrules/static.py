"""Static file origin.

An ASGI application that serves files from a directory, meant to sit
behind ``HeaderRulesMiddleware`` as the origin a CDN pulls from. Knows
the webfont content types that ``mimetypes`` leaves out on many systems.

Usage::

    app = HeaderRulesMiddleware(StaticFiles("./public"), config)
"""

import mimetypes
from pathlib import Path

import anyio

from headerrules._internal.asgi import Receive, Scope, Send

FONT_TYPES: dict[str, str] = {
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".eot": "application/vnd.ms-fontobject",
    ".svg": "image/svg+xml",
}


def guess_type(path: Path) -> str:
    """Content type for *path*, falling back to ``application/octet-stream``."""
    font_type = FONT_TYPES.get(path.suffix.lower())
    if font_type is not None:
        return font_type
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


class StaticFiles:
    """ASGI app serving files under ``directory`` for paths under ``prefix``.

    Security: resolves symlinks and verifies the final path is within the
    configured directory to prevent path traversal.
    """

    __slots__ = ("_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/",
        *,
        index: str = "index.html",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index

        # Normalize prefix: ensure leading slash, strip trailing.
        # Root prefix "/" normalizes to "".
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        method = scope.get("method", "GET")
        if method not in ("GET", "HEAD"):
            await _respond(send, 405, b"Method Not Allowed", extra=((b"allow", b"GET, HEAD"),))
            return

        path = scope["path"]
        if self._prefix:
            if not path.startswith(self._prefix + "/") and path != self._prefix:
                await _respond(send, 404, b"Not Found")
                return
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        if "\x00" in relative:
            await _respond(send, 400, b"Bad Request")
            return

        status, file_path = self._locate(relative)
        if file_path is None:
            await _respond(send, status, b"Forbidden" if status == 403 else b"Not Found")
            return

        body = await anyio.Path(file_path).read_bytes()
        await _respond(
            send,
            200,
            b"" if method == "HEAD" else body,
            content_type=guess_type(file_path),
            content_length=len(body),
        )

    def _locate(self, relative: str) -> tuple[int, Path | None]:
        """Resolve *relative* to a served file, or a 403/404 status."""
        try:
            file_path = (self._directory / relative).resolve() if relative else self._directory
            if not file_path.is_relative_to(self._directory):
                return 403, None
            if file_path.is_dir():
                file_path = file_path / self._index
            if not file_path.is_file():
                return 404, None
        except (OSError, ValueError):
            return 404, None
        return 200, file_path


async def _respond(
    send: Send,
    status: int,
    body: bytes,
    *,
    content_type: str = "text/plain; charset=utf-8",
    content_length: int | None = None,
    extra: tuple[tuple[bytes, bytes], ...] = (),
) -> None:
    """Send a complete, single-chunk response."""
    length = len(body) if content_length is None else content_length
    headers = [
        (b"content-type", content_type.encode("latin-1")),
        (b"content-length", str(length).encode("latin-1")),
        *extra,
    ]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body, "more_body": False})
