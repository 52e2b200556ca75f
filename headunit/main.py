"""Command-line entry point that loads the head unit."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from headunit.hudloader import HUDLoader
from headunit.settingsloader import Settings

log = logging.getLogger(__name__)

_VERSION = "0.1.0"
_DESCRIPTION = "HeadUnit Desktop"


def _default_settings_path() -> Path:
    return Path.home() / ".config" / "headunit" / "settings.json"


def _default_themes_dir() -> Path:
    return Path(sys.argv[0]).resolve().parent / "themes"


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the command line; ``plugins`` is an empty list when all are wanted."""
    parser = argparse.ArgumentParser(prog="headunit", description=_DESCRIPTION)
    parser.add_argument("--version", action="version", version=_VERSION)
    parser.add_argument(
        "-p", "--plugins", metavar="plugins",
        help="Plugins to enable (defaults to all)",
    )
    parser.add_argument(
        "-l", "--lazy-loading", action="store_true",
        help="Load plugins and theme in separate threads (experimental)",
    )
    parser.add_argument(
        "--themes-dir", type=Path, default=None,
        help="Directory that holds the themes",
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="File the settings are kept in",
    )
    args = parser.parse_args(argv)
    args.plugins = args.plugins.split() if args.plugins is not None else []
    return args


def main(argv: Sequence[str] | None = None) -> int:
    started = time.perf_counter()
    args = parse_arguments(argv)
    store = Settings(args.settings if args.settings is not None else _default_settings_path())
    themes_dir = args.themes_dir if args.themes_dir is not None else _default_themes_dir()

    loader = HUDLoader(args.lazy_loading, args.plugins, themes_dir=themes_dir, store=store)
    log.info("%d ms : Loading theme loader", (time.perf_counter() - started) * 1000)
    loader.load()
    loader.wait()
    log.info(
        "%d ms : Loaded %d plugins",
        (time.perf_counter() - started) * 1000,
        len(loader.plugin_list),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())