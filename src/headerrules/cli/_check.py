"""``headerrules check`` — validate a rules file.

Loads the file, prints each rule, and fails when any rule's matcher
was not understood (such rules would silently never match).
"""

import argparse
import sys

from headerrules.cli._load import load_or_exit
from headerrules.matchers import Unrecognized


def run_check(args: argparse.Namespace) -> None:
    """Validate ``args.config`` and print a summary of its rules."""
    config = load_or_exit(args.config)
    rules = config.rules

    if not rules.rules:
        print("No rules defined.")
        return

    problems = 0
    for index, rule in enumerate(rules, start=1):
        names = ", ".join(name for name, _ in rule.changes) or "(no headers)"
        print(f"{index:>3}  {rule.matcher}  ->  {names}")
        if isinstance(rule.matcher, Unrecognized):
            problems += 1

    if problems:
        print(
            f"Error: {problems} rule(s) have an unrecognized matcher and will never match.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    print(f"OK: {len(rules)} rule(s).")
