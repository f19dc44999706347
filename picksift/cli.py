"""Command line interface for picksift.

The interactive terminal UI lives elsewhere; these commands run the
ranking engine non-interactively (filter stdin, list clipboard matches)
and manage the usage history.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import MATCH_MODES, EngineConfig, SettingsError, parse_column_spec
from .search.columns import ColumnProjector
from .search.handlers import ClipboardError, ClipboardSource, DmenuSource
from .search.session import SearchSession
from .services.history import HistoryStore, MemoryHistoryStore
from .utils.helpers import default_history_path, load_settings

MODES = ("apps", "dmenu", "clip")


def setup_logging(verbosity: int = 0, debug_log: Optional[str] = None) -> None:
    """Send warnings (or more with -v/-vv) to stderr, everything to debug_log."""
    logger.remove()
    level = {0: "WARNING", 1: "INFO"}.get(verbosity, "DEBUG")
    logger.add(sys.stderr, level=level, format="<level>{level}</level>: {message}")
    if debug_log:
        logger.add(debug_log, level="DEBUG", rotation="1 MB", retention=3)


def _history_path(settings: dict) -> Path:
    configured = settings.get("history", {}).get("path")
    return Path(configured).expanduser() if configured else default_history_path()


def _open_history(settings: dict, mode: str, disabled: bool = False):
    if disabled:
        return MemoryHistoryStore(namespace=mode)
    return HistoryStore(_history_path(settings), namespace=mode)


def _engine_config(args: argparse.Namespace, settings: dict) -> EngineConfig:
    match_mode = "exact" if getattr(args, "exact", False) else getattr(args, "match_mode", None)
    return EngineConfig.from_settings(settings).with_overrides(
        prefix_depth=getattr(args, "prefix_depth", None),
        match_mode=match_mode,
        delimiter=getattr(args, "delimiter", None),
        match_fields=parse_column_spec(getattr(args, "match_nth", None)),
        display_fields=parse_column_spec(getattr(args, "with_nth", None)),
        output_fields=parse_column_spec(getattr(args, "accept_nth", None)),
    )


def _run_session(session: SearchSession, query: str, first: bool, render) -> int:
    results = session.set_query(query)
    if not results:
        logger.info(f"No matches for {query!r}")
        return 1
    if first:
        print(render(results[0].candidate, session.select(0)))
        return 0
    for item in results:
        print(render(item.candidate, None))
    return 0


def cmd_dmenu(args: argparse.Namespace, settings: dict) -> int:
    config = _engine_config(args, settings)
    source = DmenuSource(ColumnProjector.from_config(config.dmenu))
    candidates = source.read(sys.stdin, null_separated=args.read0)
    logger.debug(f"Read {len(candidates)} lines from stdin")

    def render(candidate, payload):
        return str(candidate.line_number) if args.index else candidate.payload

    with _open_history(settings, source.name, args.no_history) as history:
        session = SearchSession(candidates, history, config)
        return _run_session(session, args.query, args.first, render)


def cmd_clip(args: argparse.Namespace, settings: dict) -> int:
    config = _engine_config(args, settings)
    source = ClipboardSource(tag=args.tag)
    candidates = source.load()

    with _open_history(settings, source.name, args.no_history) as history:
        session = SearchSession(candidates, history, config)
        return _run_session(
            session, args.query, args.first,
            lambda candidate, payload: payload if payload is not None else f"{candidate.rowid}\t{candidate.display}",
        )


def cmd_history(args: argparse.Namespace, settings: dict) -> int:
    with _open_history(settings, args.mode) as history:
        if args.action == "list":
            for identity, frecency, record in history.get_top(limit=args.limit, min_uses=0):
                pin = "*" if record.pinned else " "
                print(f"{pin} {record.use_count:>5} {frecency:>10.1f}  {identity}")
            return 0

        if args.action == "clear":
            history.clear_all()
            logger.info(f"Cleared {args.mode} history")
            return 0

        if not args.identity:
            print(f"error: history {args.action} needs an identity", file=sys.stderr)
            return 2

        if args.action == "pin":
            history.set_pinned(args.identity, True)
        elif args.action == "unpin":
            history.set_pinned(args.identity, False)
        elif args.action == "forget":
            history.forget(args.identity)
        return 0


def _add_matching_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-q", "--query", default="", help="Query to rank against")
    parser.add_argument("--match-mode", choices=MATCH_MODES, help="Matching mode")
    parser.add_argument("--exact", action="store_true", help="Shorthand for --match-mode exact")
    parser.add_argument("--prefix-depth", type=int, help="Query length up to which prefix matches win")
    parser.add_argument("--first", action="store_true", help="Print only the best match and record it")
    parser.add_argument("--no-history", action="store_true", help="Neither read nor write history")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="picksift", description=__doc__.splitlines()[0])
    parser.add_argument("--config", type=Path, help="Settings file (TOML)")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--debug-log", help="Also write debug logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    dmenu = sub.add_parser("dmenu", help="Rank lines read from stdin")
    _add_matching_args(dmenu)
    dmenu.add_argument("--delimiter", help="Column delimiter (default: space)")
    dmenu.add_argument("--match-nth", help="Columns to match against, e.g. 1,3")
    dmenu.add_argument("--with-nth", help="Columns to display")
    dmenu.add_argument("--accept-nth", help="Columns to output on selection")
    dmenu.add_argument("--read0", action="store_true", help="Input is NUL separated")
    dmenu.add_argument(
        "--index", action="store_true",
        help="Print the 1-based input line number instead of the line",
    )
    dmenu.set_defaults(func=cmd_dmenu)

    clip = sub.add_parser("clip", help="Rank clipboard history from cclip")
    _add_matching_args(clip)
    clip.add_argument("--tag", help="Only rows carrying this tag")
    clip.set_defaults(func=cmd_clip)

    history = sub.add_parser("history", help="Inspect or edit usage history")
    history.add_argument("action", choices=("list", "pin", "unpin", "forget", "clear"))
    history.add_argument("identity", nargs="?", help="Desktop id, line or row id")
    history.add_argument(
        "--mode", choices=MODES, default="apps",
        help="History namespace (apps is recorded by the launcher UI, not by a command here)",
    )
    history.add_argument("--limit", type=int, default=50)
    history.set_defaults(func=cmd_history)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.debug_log)

    settings = load_settings(args.config)
    try:
        return args.func(args, settings)
    except SettingsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except ClipboardError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
