"""``headerrules serve`` — run a static origin behind the header rules."""

import argparse
import logging
import sys
from pathlib import Path

from headerrules.cli._load import load_or_exit
from headerrules.config import HeaderRulesConfig
from headerrules.middleware import HeaderRulesMiddleware
from headerrules.static import StaticFiles

logger = logging.getLogger("headerrules.server")


def run_serve(args: argparse.Namespace) -> None:
    """Serve ``args.directory`` through ``HeaderRulesMiddleware`` with pounce."""
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"Error: {directory} is not a directory", file=sys.stderr)
        raise SystemExit(1)

    config = load_or_exit(args.config) if args.config else HeaderRulesConfig()
    app = HeaderRulesMiddleware(StaticFiles(directory), config)

    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        print(
            "Error: 'headerrules serve' requires pounce. "
            "Install it with: pip install headerrules[serve]",
            file=sys.stderr,
        )
        raise SystemExit(1) from exc

    logger.info(
        "Serving %s on http://%s:%d with %d rule(s)",
        directory,
        args.host,
        args.port,
        len(config.rules),
    )
    Server(ServerConfig(host=args.host, port=args.port, workers=1), app).run()
