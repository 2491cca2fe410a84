"""Rule configuration.

HeaderRulesConfig is a frozen dataclass — immutable after creation, built
once at process start and handed to the middleware explicitly.

Rules can be written inline or loaded from static data. A TOML file::

    [shortcuts]
    images = ["png", "jpg", "gif"]

    [[rules]]
    match = "*"
    headers = { "Cache-Control" = "public, max-age=31536000" }

    [[rules]]
    match = "fonts"
    headers = { "Access-Control-Allow-Origin" = "*", "Vary" = false }

``match`` accepts:

- ``"*"`` -- every path
- a shortcut name (``"fonts"``, ``"fonts2"``, or one from ``[shortcuts]``)
- any other string -- a folder prefix
- a list of strings -- file extensions
- a table with one of ``all``, ``prefix``, ``extensions``, ``regex``,
  ``shortcut``

Header values are strings or integers; ``false`` (TOML) or ``null``
(JSON) removes the header.
"""

import json
import logging
import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from headerrules.errors import ConfigurationError
from headerrules.matchers import (
    SHORTCUTS,
    ExtensionSet,
    MatchAll,
    Matcher,
    PathPattern,
    PathPrefix,
    Shortcut,
    Unrecognized,
)
from headerrules.rules import DELETE, HeaderValue, Rule, RuleSet

logger = logging.getLogger("headerrules.config")

# RFC 9110 token characters
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


@dataclass(frozen=True, slots=True)
class HeaderRulesConfig:
    """Middleware configuration. Immutable after creation.

    Only ``rules`` is required. Override what you need::

        config = HeaderRulesConfig(rules=rules, log_changes=True)
    """

    rules: RuleSet = RuleSet()

    # Match against the percent-decoded raw_path instead of the server's path
    unescape_path: bool = True

    # Prefix the mount point (scope["root_path"]) before matching
    include_root_path: bool = False

    # Debug-log every rule applied to a response
    log_changes: bool = False


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------


def _extensions(values: Any) -> frozenset[str] | None:
    """Normalize a list of extensions, or None if it isn't one."""
    if not isinstance(values, (list, tuple, set, frozenset)):
        return None
    if not all(isinstance(v, str) and v.removeprefix(".") for v in values):
        return None
    return frozenset(v.removeprefix(".") for v in values)


def _compile(expression: str) -> re.Pattern[str]:
    try:
        return re.compile(expression)
    except re.error as exc:
        msg = f"Invalid regular expression {expression!r}: {exc}"
        raise ConfigurationError(msg) from exc


def parse_matcher(
    value: Any,
    shortcuts: Mapping[str, frozenset[str]] = SHORTCUTS,
) -> Matcher:
    """Turn a configuration value into a matcher.

    Values that don't describe a matcher become ``Unrecognized`` and a
    warning is logged; only an invalid regular expression raises.
    """
    match value:
        case "*":
            return MatchAll()
        case str() if value in shortcuts:
            return Shortcut(value)
        case str() if value:
            return PathPrefix(value)
        case re.Pattern():
            return PathPattern(value)
        case list() | tuple() | set() | frozenset():
            extensions = _extensions(value)
            if extensions is not None:
                return ExtensionSet(extensions)
        case Mapping() if len(value) == 1:
            key, arg = next(iter(value.items()))
            if key == "all" and arg is True:
                return MatchAll()
            if key == "prefix" and isinstance(arg, str) and arg:
                return PathPrefix(arg)
            if key == "extensions" and (extensions := _extensions(arg)) is not None:
                return ExtensionSet(extensions)
            if key == "regex" and isinstance(arg, str):
                return PathPattern(_compile(arg))
            if key == "shortcut" and isinstance(arg, str):
                return Shortcut(arg)

    logger.warning("Unrecognized matcher %r; rule will never match", value)
    return Unrecognized(repr(value))


def parse_header_value(name: str, value: Any) -> HeaderValue:
    """Turn a configuration value into a header value or ``DELETE``."""
    if value is None or value is False or value is DELETE:
        return DELETE
    if isinstance(value, bool):
        msg = f"Header {name!r}: use false or null to delete, not {value!r}"
        raise ConfigurationError(msg)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        if any(ch in value for ch in "\r\n\x00"):
            msg = f"Header {name!r}: value must not contain CR, LF or NUL"
            raise ConfigurationError(msg)
        try:
            value.encode("latin-1")
        except UnicodeEncodeError as exc:
            msg = f"Header {name!r}: value must be latin-1 encodable, got {value!r}"
            raise ConfigurationError(msg) from exc
        return value
    msg = f"Header {name!r}: value must be a string, integer, false or null, got {type(value).__name__}"
    raise ConfigurationError(msg)


def parse_rule(
    data: Mapping[str, Any],
    shortcuts: Mapping[str, frozenset[str]] = SHORTCUTS,
) -> Rule:
    """Build one rule from a ``{"match": ..., "headers": {...}}`` mapping."""
    if "match" not in data:
        msg = f"Rule is missing 'match': {dict(data)!r}"
        raise ConfigurationError(msg)
    headers = data.get("headers", {})
    if not isinstance(headers, Mapping):
        msg = f"Rule 'headers' must be a table, got {type(headers).__name__}"
        raise ConfigurationError(msg)

    changes: list[tuple[str, HeaderValue]] = []
    for name, value in headers.items():
        if not isinstance(name, str) or not _TOKEN_RE.match(name):
            msg = f"Invalid header name {name!r}"
            raise ConfigurationError(msg)
        changes.append((name, parse_header_value(name, value)))

    return Rule(matcher=parse_matcher(data["match"], shortcuts), changes=tuple(changes))


def _parse_shortcuts(data: Any) -> dict[str, frozenset[str]]:
    if not isinstance(data, Mapping):
        msg = f"'shortcuts' must be a table, got {type(data).__name__}"
        raise ConfigurationError(msg)
    parsed: dict[str, frozenset[str]] = {}
    for name, values in data.items():
        extensions = _extensions(values)
        if extensions is None:
            msg = f"Shortcut {name!r} must be a list of extensions"
            raise ConfigurationError(msg)
        parsed[name] = extensions
    return parsed


def config_from_mapping(
    data: Mapping[str, Any],
    *,
    shortcuts: Mapping[str, frozenset[str]] | None = None,
) -> HeaderRulesConfig:
    """Build a config from parsed static data (TOML, JSON, or a literal).

    Top-level keys besides ``rules`` and ``shortcuts`` set the matching
    ``HeaderRulesConfig`` fields (``unescape_path``, ``include_root_path``,
    ``log_changes``).
    """
    registry = dict(SHORTCUTS)
    registry.update(shortcuts or {})
    registry.update(_parse_shortcuts(data.get("shortcuts", {})))
    frozen_registry = MappingProxyType(registry)

    raw_rules = data.get("rules", [])
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigurationError(msg)
    for entry in raw_rules:
        if not isinstance(entry, Mapping):
            msg = f"Each rule must be a table, got {type(entry).__name__}"
            raise ConfigurationError(msg)

    rules = RuleSet(
        rules=tuple(parse_rule(entry, frozen_registry) for entry in raw_rules),
        shortcuts=frozen_registry,
    )

    options: dict[str, bool] = {}
    for key in ("unescape_path", "include_root_path", "log_changes"):
        if key in data:
            if not isinstance(data[key], bool):
                msg = f"{key!r} must be true or false"
                raise ConfigurationError(msg)
            options[key] = data[key]

    unknown = set(data) - {"rules", "shortcuts", *options}
    if unknown:
        msg = f"Unknown configuration keys: {', '.join(sorted(unknown))}"
        raise ConfigurationError(msg)

    logger.debug("Loaded %d header rules", len(rules))
    return HeaderRulesConfig(rules=rules, **options)


def load_config(
    path: str | Path,
    *,
    shortcuts: Mapping[str, frozenset[str]] | None = None,
) -> HeaderRulesConfig:
    """Load a config from a ``.toml`` or ``.json`` file."""
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigurationError(msg) from exc

    try:
        if suffix == ".toml":
            data = tomllib.loads(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            msg = f"Unsupported config format {suffix or path.name!r} (use .toml or .json)"
            raise ConfigurationError(msg)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        msg = f"Cannot parse {path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, Mapping):
        msg = f"{path}: top level must be a table"
        raise ConfigurationError(msg)
    return config_from_mapping(data, shortcuts=shortcuts)
