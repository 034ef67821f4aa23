from __future__ import annotations

import argparse
import functools
import sys
from typing import List, Optional, TextIO

from . import __version__
from .config import Settings, load_settings
from .errors import Aborted, SbmError
from .fetch import fetch_title
from .interpreter import Interpreter
from .log import LogConfig, get_logger, setup_logging
from .opener import open_url
from .parser import parse_args
from .prompt import make_confirm
from .render import print_listing, print_message
from .store import load_store, save_store

log = get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 2

USAGE_EPILOG = """commands:
  add <url> [-c comment] [-t title] [-tg "tag ..."]
  update <id> [-c comment] [-t title] [-tg "tag ..."]   (-tg toggles tags)
  remove <id>
  open <id>
  list <term|all>
  list -tg <tag-id|tag-name> ...
  tag add <name>
  tag rename <id|name> <new-name>
  tag remove <id|name>
  tag list all
  tag <bookmark-id> <tag-id|tag-name>
"""


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sbm",
        description="Simple bookmark manager: URLs, titles, comments and tags in one JSON file.",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-V", "--version", action="version", version=f"sbm {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Its keys override SBM_* env vars; flags override both.")
    p.add_argument("--store", default=None, help="Bookmark store JSON file (default: ~/.config/sbm/data.json).")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored logging.")
    p.add_argument("--no-fetch", action="store_true", help="Do not download pages to fill in missing titles.")
    p.add_argument("-y", "--yes", action="store_true", help="Answer yes to every confirmation.")
    p.add_argument("command", nargs=argparse.REMAINDER, help="Command and its arguments (see below).")
    return p


def main(argv: Optional[List[str]] = None, *, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    args = build_arg_parser().parse_args(argv)
    cfg = load_settings(args.config)
    if args.store:
        cfg.store_path = args.store
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    if args.no_fetch:
        cfg.fetch_titles = False
    if args.yes:
        cfg.assume_yes = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color))

    try:
        return _run(args.command, cfg, out)
    except Aborted as e:
        log.info("Aborted. %s", e)
        return EXIT_OK
    except SbmError as e:
        log.error("%s", e)
        return EXIT_ERROR


def _run(tokens: List[str], cfg: Settings, out: TextIO) -> int:
    op = parse_args(tokens)
    confirm = make_confirm(cfg.assume_yes)
    store_path = cfg.resolved_store_path()
    tags, table = load_store(store_path, confirm=confirm)

    interp = Interpreter(
        tags,
        table,
        fetch_title=_title_fetcher(cfg),
        open_url=functools.partial(open_url, command=cfg.opener or None),
        confirm=confirm,
        list_unique=cfg.list_unique,
    )
    result = interp.execute(op)

    if result.listing is not None:
        shown = print_listing(result.listing, out)
        log.debug("Listed %d entries", shown)
    print_message(result.message, out)
    if result.changed:
        save_store(store_path, tags, table)
    return EXIT_OK


def _title_fetcher(cfg: Settings):
    if not cfg.fetch_titles:
        return None
    return functools.partial(
        fetch_title,
        timeout_s=cfg.fetch_timeout_s,
        user_agent=cfg.fetch_user_agent,
        max_bytes=cfg.fetch_max_bytes,
    )
