"""headerrules — path-based response header rules for ASGI apps.

Adds, overrides, and removes response headers according to an ordered
set of rules matched against the request path. Built for serving
webfonts through a CDN: CORS headers on font files, no ``Vary``, long
cache lifetimes everywhere.

Basic usage::

    from headerrules import DELETE, HeaderRulesMiddleware, MatchAll, RuleSet, Shortcut

    rules = RuleSet.of(
        (MatchAll(), {"Cache-Control": "public, max-age=31536000"}),
        (Shortcut("fonts"), {"Access-Control-Allow-Origin": "*", "Vary": DELETE}),
    )
    app = HeaderRulesMiddleware(app, rules)

From a rules file::

    from headerrules import HeaderRulesMiddleware, load_config

    app = HeaderRulesMiddleware(app, load_config("headers.toml"))
"""

__version__ = "0.1.0"
__all__ = [
    "DELETE",
    "ConfigurationError",
    "ExtensionSet",
    "HeaderRulesConfig",
    "HeaderRulesError",
    "HeaderRulesMiddleware",
    "MatchAll",
    "Matcher",
    "MutableHeaders",
    "PathPattern",
    "PathPrefix",
    "Rule",
    "RuleSet",
    "Shortcut",
    "StaticFiles",
    "Unrecognized",
    "apply",
    "config_from_mapping",
    "load_config",
    "matches",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import headerrules`` fast while providing a clean top-level API.
    """
    if name in ("DELETE", "Rule", "RuleSet", "apply"):
        from headerrules import rules as _rules

        return getattr(_rules, name)

    if name in (
        "ExtensionSet",
        "MatchAll",
        "Matcher",
        "PathPattern",
        "PathPrefix",
        "Shortcut",
        "Unrecognized",
        "matches",
    ):
        from headerrules import matchers as _matchers

        return getattr(_matchers, name)

    if name in ("HeaderRulesConfig", "config_from_mapping", "load_config"):
        from headerrules import config as _config

        return getattr(_config, name)

    if name == "HeaderRulesMiddleware":
        from headerrules.middleware import HeaderRulesMiddleware

        return HeaderRulesMiddleware

    if name == "MutableHeaders":
        from headerrules.http.headers import MutableHeaders

        return MutableHeaders

    if name == "StaticFiles":
        from headerrules.static import StaticFiles

        return StaticFiles

    if name in ("ConfigurationError", "HeaderRulesError"):
        from headerrules import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
