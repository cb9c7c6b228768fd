"""
Kanban CLI — Launch the Board for a Project
=============================================
Usage:
    python -m kanban                        # Serve ./.planning/todos on :3333
    python -m kanban --port 4000 --no-open
    python -m kanban --cwd ../myproject --host 0.0.0.0
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from kanban.config import KanbanConfig, parse_port


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _port(value: str) -> int:
    try:
        return parse_port(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser(defaults: KanbanConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kanban",
        description="Todo Kanban — visual board for .planning/todos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Reads/writes:\n"
            "  <cwd>/.planning/todos/{pending,done}/*.md\n"
            "\n"
            "Environment:\n"
            "  KANBAN_HOST, KANBAN_PORT, KANBAN_OPEN, KANBAN_CWD, KANBAN_LOG_LEVEL\n"
        ),
    )
    parser.add_argument("--host", default=defaults.host,
                        help=f"Bind address (default: {defaults.host})")
    parser.add_argument("--port", "-p", type=_port, default=defaults.port,
                        help=f"Port number (default: {defaults.port})")
    parser.add_argument("--open", dest="open_browser", action="store_true",
                        default=defaults.open_browser, help="Open a browser (default)")
    parser.add_argument("--no-open", dest="open_browser", action="store_false",
                        help="Don't auto-open a browser")
    parser.add_argument("--cwd", "-C", default=defaults.cwd,
                        help="Project root containing .planning/ (default: current directory)")
    parser.add_argument("--log-level", default=defaults.log_level, choices=LOG_LEVELS,
                        type=str.upper, help="Logging level (default: INFO)")
    return parser


def parse_config(argv: Optional[list[str]] = None) -> KanbanConfig:
    """Merge command-line flags over the environment."""
    try:
        defaults = KanbanConfig.from_env()
    except ValueError as e:
        print(f"✘ {e}", file=sys.stderr)
        defaults = KanbanConfig()

    args = build_parser(defaults).parse_args(argv)
    return KanbanConfig(
        host=args.host,
        port=args.port,
        open_browser=args.open_browser,
        cwd=args.cwd,
        log_level=args.log_level,
    )


def main(argv: Optional[list[str]] = None) -> int:
    config = parse_config(argv)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from kanban.server import run_server
    run_server(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
