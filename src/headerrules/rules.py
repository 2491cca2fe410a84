"""Header rule engine.

A ``RuleSet`` is an ordered, immutable sequence of ``Rule`` values. Each
rule pairs a matcher with the header changes to make when the matcher
accepts the request path::

    rules = RuleSet.of(
        (MatchAll(), {"Cache-Control": "public, max-age=31536000"}),
        (Shortcut("fonts"), {"Access-Control-Allow-Origin": "*", "Vary": DELETE}),
    )
    apply("/assets/webfont.woff", rules, headers)

Rules are applied in order and are not mutually exclusive. A later rule
overwrites a value set by an earlier one; ``DELETE`` removes the header
whatever set it. An empty string sets the header to an empty value.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from headerrules.matchers import SHORTCUTS, Matcher, matches


class _Delete(Enum):
    DELETE = "DELETE"

    def __repr__(self) -> str:
        return "DELETE"


DELETE = _Delete.DELETE
"""Header change value meaning "remove this header"."""

type HeaderValue = str | Literal[_Delete.DELETE]


@dataclass(frozen=True, slots=True)
class Rule:
    """A matcher and the ordered header changes it triggers."""

    matcher: Matcher
    changes: tuple[tuple[str, HeaderValue], ...] = ()

    @classmethod
    def of(cls, matcher: Matcher, changes: Mapping[str, HeaderValue]) -> "Rule":
        """Build a rule from a ``{header: value}`` mapping."""
        return cls(matcher=matcher, changes=tuple(changes.items()))

    def apply_to(self, headers: MutableMapping[str, str]) -> None:
        """Make this rule's changes to *headers*, ignoring the matcher."""
        for name, value in self.changes:
            if value is DELETE:
                headers.pop(name, None)
            else:
                headers[name] = value


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Ordered, immutable rules plus the shortcut names they may refer to.

    Built once from static configuration and shared read-only by every
    request.
    """

    rules: tuple[Rule, ...] = ()
    shortcuts: Mapping[str, frozenset[str]] = SHORTCUTS

    @classmethod
    def of(
        cls,
        *pairs: tuple[Matcher, Mapping[str, HeaderValue]],
        shortcuts: Mapping[str, frozenset[str]] = SHORTCUTS,
    ) -> "RuleSet":
        """Build a rule set from ``(matcher, changes)`` pairs."""
        return cls(rules=tuple(Rule.of(m, c) for m, c in pairs), shortcuts=shortcuts)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def matching(self, path: str) -> Iterator[Rule]:
        """Yield the rules whose matcher accepts *path*, in order."""
        for rule in self.rules:
            if matches(rule.matcher, path, self.shortcuts):
                yield rule

    def resolve(self, path: str) -> dict[str, HeaderValue]:
        """Net header changes for *path* after all matching rules.

        Keys keep the spelling of the last rule that touched the header.
        """
        net: dict[str, tuple[str, HeaderValue]] = {}
        for rule in self.matching(path):
            for name, value in rule.changes:
                net.pop(name.lower(), None)
                net[name.lower()] = (name, value)
        return dict(net.values())

    def apply(self, path: str, headers: MutableMapping[str, str]) -> MutableMapping[str, str]:
        """Apply every matching rule to *headers* in order and return them."""
        for rule in self.matching(path):
            rule.apply_to(headers)
        return headers


def apply(
    path: str,
    rules: RuleSet | Iterable[Rule],
    headers: MutableMapping[str, str],
) -> MutableMapping[str, str]:
    """Mutate *headers* according to the rules that match *path*.

    *path* must already be percent-decoded. Returns the same mapping.
    """
    if not isinstance(rules, RuleSet):
        rules = RuleSet(rules=tuple(rules))
    return rules.apply(path, headers)
