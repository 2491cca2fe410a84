"""Path matchers — one frozen dataclass per matcher kind.

A matcher is a predicate over a percent-decoded request path. The kinds
form a closed union (``Matcher``) and ``matches()`` dispatches over it
with a single ``match`` statement:

    MatchAll        -- ``"*"``, accepts every path
    PathPrefix      -- folder prefix, with or without a leading slash
    ExtensionSet    -- literal, case-sensitive ``.ext`` suffix
    PathPattern     -- compiled regular expression, ``search`` semantics
    Shortcut        -- named extension set (``"fonts"``)
    Unrecognized    -- configuration value nothing else understood

``Unrecognized`` never matches. Rules built from malformed configuration
become no-ops instead of failures.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

FONT_EXTENSIONS: frozenset[str] = frozenset({"ttf", "otf", "eot", "woff", "svg"})

# Built-in named shortcuts; extra ones are passed to ``matches()`` explicitly
SHORTCUTS: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "fonts": FONT_EXTENSIONS,
        "fonts2": FONT_EXTENSIONS | {"woff2"},
    }
)


@dataclass(frozen=True, slots=True)
class MatchAll:
    """Accepts every path."""

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class PathPrefix:
    """Accepts paths under ``prefix``.

    Leading slashes are ignored on both sides: ``PathPrefix("/fonts")`` and
    ``PathPrefix("fonts")`` both accept ``"/fonts/a.eot"`` and ``"fonts/a.eot"``.
    ``PathPrefix("/")`` accepts every path.
    """

    prefix: str

    def __str__(self) -> str:
        return f"prefix {self.prefix!r}"


@dataclass(frozen=True, slots=True)
class ExtensionSet:
    """Accepts paths ending in ``"." + ext`` for any configured extension."""

    extensions: frozenset[str]

    def __str__(self) -> str:
        return "extensions " + ", ".join(sorted(self.extensions))


@dataclass(frozen=True, slots=True)
class PathPattern:
    """Accepts paths the compiled expression finds a match in."""

    pattern: re.Pattern[str]

    def __str__(self) -> str:
        return f"regex {self.pattern.pattern!r}"


@dataclass(frozen=True, slots=True)
class Shortcut:
    """A named extension set, resolved against the shortcut registry."""

    name: str

    def __str__(self) -> str:
        return f"shortcut {self.name!r}"


@dataclass(frozen=True, slots=True)
class Unrecognized:
    """A configuration value that does not describe any matcher."""

    raw: str = ""

    def __str__(self) -> str:
        return f"unrecognized {self.raw}"


type Matcher = MatchAll | PathPrefix | ExtensionSet | PathPattern | Shortcut | Unrecognized


def _has_extension(path: str, extensions: frozenset[str]) -> bool:
    return any(path.endswith("." + ext) for ext in extensions)


def matches(
    matcher: Matcher,
    path: str,
    shortcuts: Mapping[str, frozenset[str]] = SHORTCUTS,
) -> bool:
    """True if *matcher* accepts the percent-decoded *path*.

    Never raises for well-formed matcher values; an unknown shortcut name
    and ``Unrecognized`` simply don't match.
    """
    match matcher:
        case MatchAll():
            return True
        case PathPrefix(prefix=prefix):
            return path.lstrip("/").startswith(prefix.lstrip("/"))
        case ExtensionSet(extensions=extensions):
            return _has_extension(path, extensions)
        case PathPattern(pattern=pattern):
            return pattern.search(path) is not None
        case Shortcut(name=name):
            extensions = shortcuts.get(name)
            return extensions is not None and _has_extension(path, extensions)
        case Unrecognized():
            return False
        case _:
            return False
