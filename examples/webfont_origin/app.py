"""Webfont origin — static files behind header rules.

Serve ``app`` with any ASGI server, or use the bundled command::

    headerrules serve public --config headers.toml
"""

from pathlib import Path

from headerrules import HeaderRulesMiddleware, StaticFiles, load_config

HERE = Path(__file__).parent

app = HeaderRulesMiddleware(
    StaticFiles(HERE / "public"),
    load_config(HERE / "headers.toml"),
)
