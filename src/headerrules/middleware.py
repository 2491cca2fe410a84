"""Header rules middleware — rewrite response headers by request path.

Wraps any ASGI application. When the wrapped app starts an HTTP
response, the rules that match the request path add, override, or remove
headers on the ``http.response.start`` message before it is sent.

Usage::

    from headerrules import HeaderRulesMiddleware, load_config

    app = HeaderRulesMiddleware(app, load_config("headers.toml"))

Rule evaluation never breaks a response: if computing the path or
applying the rules raises, the error is logged and the original headers
are sent unchanged.
"""

import logging
from urllib.parse import unquote

from headerrules._internal.asgi import ASGIApp, HTTPScope, Message, Receive, Scope, Send
from headerrules.config import HeaderRulesConfig
from headerrules.http.headers import MutableHeaders
from headerrules.rules import RuleSet

logger = logging.getLogger("headerrules.middleware")


def request_path(scope: HTTPScope, config: HeaderRulesConfig) -> str:
    """The percent-decoded path the rules are matched against."""
    if config.unescape_path and scope.raw_path:
        path = unquote(scope.raw_path.decode("latin-1"))
    else:
        path = scope.path
    root = scope.root_path.rstrip("/")
    if config.include_root_path and root and path != root and not path.startswith(root + "/"):
        path = root + path
    return path


class HeaderRulesMiddleware:
    """Apply a rule set to the headers of every HTTP response.

    Non-HTTP scopes (``websocket``, ``lifespan``) pass straight through.
    Accepts a full ``HeaderRulesConfig`` or a bare ``RuleSet``::

        app = HeaderRulesMiddleware(app, RuleSet.of(
            (MatchAll(), {"Cache-Control": "public, max-age=31536000"}),
            (Shortcut("fonts"), {"Access-Control-Allow-Origin": "*", "Vary": DELETE}),
        ))
    """

    __slots__ = ("app", "config")

    def __init__(self, app: ASGIApp, config: HeaderRulesConfig | RuleSet) -> None:
        self.app = app
        self.config = config if isinstance(config, HeaderRulesConfig) else HeaderRulesConfig(rules=config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.config.rules.rules:
            await self.app(scope, receive, send)
            return

        async def send_with_rules(message: Message) -> None:
            if message["type"] == "http.response.start":
                message = self._rewrite(scope, message)
            await send(message)

        await self.app(scope, receive, send_with_rules)

    def _rewrite(self, scope: Scope, message: Message) -> Message:
        """Return a copy of *message* with the matching rules applied."""
        try:
            path = request_path(HTTPScope.from_scope(scope), self.config)
            headers = MutableHeaders(message.get("headers", ()))
            for rule in self.config.rules.matching(path):
                rule.apply_to(headers)
                if self.config.log_changes:
                    logger.debug("%s matched %s: %r", path, rule.matcher, rule.changes)
        except Exception:
            logger.exception(
                "Header rules failed for %r; sending original headers",
                scope.get("path"),
            )
            return message
        return {**message, "headers": headers.raw}
