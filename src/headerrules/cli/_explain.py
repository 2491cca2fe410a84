"""``headerrules explain`` — preview the headers a path would receive."""

import argparse
import sys
from urllib.parse import unquote

from headerrules.cli._load import load_or_exit
from headerrules.http.headers import MutableHeaders
from headerrules.rules import DELETE


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        print(f"Error: header must be NAME:VALUE, got {raw!r}", file=sys.stderr)
        raise SystemExit(2)
    return name.strip(), value.strip()


def run_explain(args: argparse.Namespace) -> None:
    """Print the matching rules for ``args.path`` and the final headers."""
    config = load_or_exit(args.config)
    path = args.path.partition("?")[0]
    if config.unescape_path:
        path = unquote(path)

    headers = MutableHeaders()
    for raw in args.header:
        name, value = _parse_header(raw)
        headers[name] = value

    matched = list(config.rules.matching(path))
    if not matched:
        print(f"No rules match {path}.")
    for rule in matched:
        print(f"match  {rule.matcher}")
        for name, value in rule.changes:
            action = "delete" if value is DELETE else f"set {value!r}"
            print(f"         {name}: {action}")
        rule.apply_to(headers)

    print()
    for name in headers:
        for value in headers.get_list(name):
            print(f"{name}: {value}")
