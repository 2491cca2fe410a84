"""Tests for HeaderRulesMiddleware — rules applied to ASGI responses."""

import logging
from typing import Any

import pytest

from headerrules._internal.asgi import HTTPScope
from headerrules.config import HeaderRulesConfig
from headerrules.matchers import MatchAll, PathPrefix, Shortcut
from headerrules.middleware import HeaderRulesMiddleware, request_path
from headerrules.rules import DELETE, Rule, RuleSet
from headerrules.testing import TestClient

CACHE = "public, max-age=31536000"

WEBFONT_RULES = RuleSet.of(
    (MatchAll(), {"Cache-Control": CACHE}),
    (Shortcut("fonts"), {"Access-Control-Allow-Origin": "*", "Vary": DELETE}),
)


def _origin(headers: list[tuple[bytes, bytes]] | None = None):
    """An ASGI app that answers every request with fixed headers."""
    raw = headers if headers is not None else [(b"content-type", b"text/plain"), (b"vary", b"Origin")]

    async def app(scope: dict[str, Any], receive, send) -> None:
        await send({"type": "http.response.start", "status": 200, "headers": list(raw)})
        await send({"type": "http.response.body", "body": b"ok", "more_body": False})

    return app


class TestWebfontScenario:
    @pytest.mark.anyio
    async def test_font_response(self) -> None:
        client = TestClient(HeaderRulesMiddleware(_origin(), WEBFONT_RULES))
        response = await client.get("/assets/webfont.woff")

        assert response.status == 200
        assert response.body == b"ok"
        assert response.headers["cache-control"] == CACHE
        assert response.headers["access-control-allow-origin"] == "*"
        assert "vary" not in response.headers
        assert response.headers["content-type"] == "text/plain"

    @pytest.mark.anyio
    async def test_non_font_response(self) -> None:
        client = TestClient(HeaderRulesMiddleware(_origin(), WEBFONT_RULES))
        response = await client.get("/assets/app.js")

        assert response.headers["cache-control"] == CACHE
        assert response.headers["vary"] == "Origin"
        assert "access-control-allow-origin" not in response.headers

    @pytest.mark.anyio
    async def test_accepts_full_config(self) -> None:
        app = HeaderRulesMiddleware(_origin(), HeaderRulesConfig(rules=WEBFONT_RULES))
        response = await TestClient(app).get("/f.ttf")
        assert response.headers["access-control-allow-origin"] == "*"


class TestPath:
    @pytest.mark.anyio
    async def test_percent_encoded_path_is_unescaped(self) -> None:
        rules = RuleSet.of((PathPrefix("/my fonts"), {"X-Match": "yes"}))
        client = TestClient(HeaderRulesMiddleware(_origin(), rules))
        response = await client.get("/my%20fonts/a.woff")
        assert response.headers["x-match"] == "yes"

    @pytest.mark.anyio
    async def test_encoded_extension_matches(self) -> None:
        client = TestClient(HeaderRulesMiddleware(_origin(), WEBFONT_RULES))
        response = await client.get("/assets/webfont%2Ewoff")
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.anyio
    async def test_query_string_ignored(self) -> None:
        client = TestClient(HeaderRulesMiddleware(_origin(), WEBFONT_RULES))
        response = await client.get("/assets/webfont.woff?v=3")
        assert response.headers["access-control-allow-origin"] == "*"

    def test_request_path_without_unescape_uses_scope_path(self) -> None:
        scope = HTTPScope(method="GET", path="/a b", raw_path=b"/a%20b", root_path="")
        config = HeaderRulesConfig(unescape_path=False)
        assert request_path(scope, config) == "/a b"

    def test_request_path_falls_back_without_raw_path(self) -> None:
        scope = HTTPScope(method="GET", path="/a.woff", raw_path=b"", root_path="")
        assert request_path(scope, HeaderRulesConfig()) == "/a.woff"

    def test_request_path_with_root_path(self) -> None:
        scope = HTTPScope(method="GET", path="/a.woff", raw_path=b"/a.woff", root_path="/cdn")
        config = HeaderRulesConfig(include_root_path=True)
        assert request_path(scope, config) == "/cdn/a.woff"

    def test_request_path_root_path_already_present(self) -> None:
        scope = HTTPScope(method="GET", path="/cdn/a.woff", raw_path=b"/cdn/a.woff", root_path="/cdn")
        config = HeaderRulesConfig(include_root_path=True)
        assert request_path(scope, config) == "/cdn/a.woff"

    def test_request_path_root_path_segment_boundary(self) -> None:
        scope = HTTPScope(method="GET", path="/cdnx/a.woff", raw_path=b"/cdnx/a.woff", root_path="/cdn")
        config = HeaderRulesConfig(include_root_path=True)
        assert request_path(scope, config) == "/cdn/cdnx/a.woff"

    def test_request_path_equal_to_root_path(self) -> None:
        scope = HTTPScope(method="GET", path="/cdn", raw_path=b"/cdn", root_path="/cdn/")
        config = HeaderRulesConfig(include_root_path=True)
        assert request_path(scope, config) == "/cdn"

    @pytest.mark.anyio
    async def test_root_path_matching(self) -> None:
        rules = RuleSet.of((PathPrefix("/cdn"), {"X-Match": "yes"}))
        config = HeaderRulesConfig(rules=rules, include_root_path=True)
        client = TestClient(HeaderRulesMiddleware(_origin(), config))
        response = await client.request("GET", "/a.woff", root_path="/cdn")
        assert response.headers["x-match"] == "yes"


class TestPassThrough:
    @pytest.mark.anyio
    async def test_non_http_scope_untouched(self) -> None:
        seen: list[dict[str, Any]] = []

        async def app(scope, receive, send) -> None:
            await send({"type": "lifespan.startup.complete"})

        async def send(message: dict[str, Any]) -> None:
            seen.append(message)

        async def receive() -> dict[str, Any]:
            return {"type": "lifespan.startup"}

        await HeaderRulesMiddleware(app, WEBFONT_RULES)({"type": "lifespan"}, receive, send)
        assert seen == [{"type": "lifespan.startup.complete"}]

    @pytest.mark.anyio
    async def test_empty_rules_send_original_message(self) -> None:
        client = TestClient(HeaderRulesMiddleware(_origin(), RuleSet()))
        response = await client.get("/a.woff")
        assert response.headers.raw == [(b"content-type", b"text/plain"), (b"vary", b"Origin")]

    @pytest.mark.anyio
    async def test_app_errors_propagate(self) -> None:
        async def broken(scope, receive, send) -> None:
            raise RuntimeError("boom")

        client = TestClient(HeaderRulesMiddleware(broken, WEBFONT_RULES))
        with pytest.raises(RuntimeError, match="boom"):
            await client.get("/")


class TestFailOpen:
    @pytest.mark.anyio
    async def test_rule_failure_sends_original_headers(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        # A header value that cannot be latin-1 encoded makes the rewrite fail
        rules = RuleSet(rules=(Rule.of(MatchAll(), {"X-Title": "☃"}),))
        client = TestClient(HeaderRulesMiddleware(_origin(), rules))

        with caplog.at_level(logging.ERROR, logger="headerrules.middleware"):
            response = await client.get("/index.html")

        assert response.status == 200
        assert response.body == b"ok"
        assert response.headers.raw == [(b"content-type", b"text/plain"), (b"vary", b"Origin")]
        assert "Header rules failed" in caplog.text

    @pytest.mark.anyio
    async def test_log_changes(self, caplog: pytest.LogCaptureFixture) -> None:
        config = HeaderRulesConfig(rules=WEBFONT_RULES, log_changes=True)
        client = TestClient(HeaderRulesMiddleware(_origin(), config))

        with caplog.at_level(logging.DEBUG, logger="headerrules.middleware"):
            await client.get("/a.woff")

        assert "shortcut 'fonts'" in caplog.text
