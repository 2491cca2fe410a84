"""headerrules CLI — validate rules, preview headers, serve an origin.

Entry point registered as ``headerrules`` in ``pyproject.toml``::

    [project.scripts]
    headerrules = "headerrules.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``headerrules`` command."""
    parser = argparse.ArgumentParser(
        prog="headerrules",
        description="headerrules — path-based response header rules for ASGI apps.",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=("debug", "info", "warning", "error"),
        help="Logging level (default: warning)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- headerrules check ------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate a rules file")
    check_parser.add_argument("config", help="Rules file (.toml or .json)")

    # -- headerrules explain ----------------------------------------------
    explain_parser = subparsers.add_parser(
        "explain", help="Show which rules match a path and the resulting headers"
    )
    explain_parser.add_argument("config", help="Rules file (.toml or .json)")
    explain_parser.add_argument("path", help="Request path (percent-encoding allowed)")
    explain_parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Starting response header (repeatable)",
    )

    # -- headerrules serve ------------------------------------------------
    serve_parser = subparsers.add_parser(
        "serve", help="Serve a directory with the rules applied (requires pounce)"
    )
    serve_parser.add_argument("directory", help="Directory to serve")
    serve_parser.add_argument("--config", default=None, help="Rules file (.toml or .json)")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        from headerrules.cli._check import run_check

        run_check(args)
    elif args.command == "explain":
        from headerrules.cli._explain import run_explain

        run_explain(args)
    elif args.command == "serve":
        from headerrules.cli._serve import run_serve

        run_serve(args)
