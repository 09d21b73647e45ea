#!/usr/bin/env python3
"""Main entry point for gather."""

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .dashboard import WatchApp
from .hosts import HostStatus
from .layout import render_text
from .refresh import refresh_view
from .view import ViewState


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Watch per-host command output and show where hosts agree and differ"
    )
    parser.add_argument("output_dir", type=Path, help="Run output directory to watch")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between refreshes (overrides config)",
    )
    parser.add_argument(
        "--no-tail",
        action="store_true",
        help="Start with the cursor at the top instead of following new output",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write debug logs to this file",
    )
    parser.add_argument(
        "--text",
        action="store_true",
        help="Print the consensus once as plain text and exit",
    )
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.interval is not None:
        if args.interval <= 0:
            print("Error: --interval must be positive", file=sys.stderr)
            return 1
        config.refresh_interval = args.interval
    if args.no_tail:
        config.tail = False
    if args.log_file:
        config.log_file = args.log_file.expanduser()

    if config.log_file:
        try:
            handler = logging.FileHandler(config.log_file)
        except OSError as e:
            print(f"Error: cannot open log file {config.log_file}: {e}", file=sys.stderr)
            return 1
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        package_logger = logging.getLogger("gather")
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)

    output_dir = args.output_dir.expanduser()

    if args.text or not sys.stdout.isatty():
        return _run_text(output_dir, config.prompt_detection)

    app = WatchApp(output_dir, config)
    app.run()

    return _report_failures(app.view)


def _run_text(output_dir: Path, prompt_detection: bool) -> int:
    """Render once without the TUI (pipes, tests, scripts)."""
    view = ViewState(tail=False)
    refresh_view(view, output_dir, prompt_detection=prompt_detection)
    print(f"Watching: {output_dir}")
    for line in render_text(view):
        print(line)

    if view.error:
        return 1
    return _report_failures(view)


def _report_failures(view: ViewState) -> int:
    failed_hosts = [
        name for name in view.hosts if view.status_of(name) == HostStatus.FAILED
    ]
    if failed_hosts:
        print(f"\nFailed hosts: {', '.join(failed_hosts)}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
