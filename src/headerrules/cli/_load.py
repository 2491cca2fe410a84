"""Shared config loading for CLI subcommands."""

import sys

from headerrules.config import HeaderRulesConfig, load_config
from headerrules.errors import ConfigurationError


def load_or_exit(path: str) -> HeaderRulesConfig:
    """Load a rules file, or print the problem and exit with status 1."""
    try:
        return load_config(path)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
