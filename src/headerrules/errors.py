"""headerrules exception hierarchy.

Shared across config loading, the CLI, and the middleware so every
module raises and catches the same types.
"""


class HeaderRulesError(Exception):
    """Base for all headerrules-specific errors."""


class ConfigurationError(HeaderRulesError):
    """Raised when a rule configuration is invalid.

    Always raised while loading rules at startup, never while a
    request is being handled.
    """
