"""Terminal entry point — draw the CPU topology panel once or on a timer.

Usage:
    cpuview
    cpuview --watch --rate 5
"""

from __future__ import annotations

import argparse
import sys
import time

from cpuview.config import (
    DEFAULT_CONFIG,
    InvalidConfiguration,
    Style,
    get_style,
    validate_refresh_rate,
)
from cpuview.metrics import (
    MetricsSource,
    MetricsUnavailable,
    PsutilMetricsSource,
    build_snapshot,
)
from cpuview.render import format_panel

CLEAR_SCREEN = "\033[H\033[2J"


def clear_console() -> None:
    print(CLEAR_SCREEN, end="", flush=True)


def draw_once(source: MetricsSource, style: Style, interval: float) -> None:
    """Sample *source* and print one complete panel."""
    snapshot = build_snapshot(source, interval)
    print(format_panel(snapshot, style), flush=True)


def watch(source: MetricsSource, style: Style, interval: float, rate: int) -> None:
    """Redraw the panel every *rate* seconds until interrupted."""
    while True:
        snapshot = build_snapshot(source, interval)
        clear_console()
        print(format_panel(snapshot, style), flush=True)
        time.sleep(rate)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Draw the CPU's cores and threads with live usage bars.",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep refreshing the panel instead of drawing it once",
    )
    parser.add_argument(
        "--rate",
        type=int,
        default=DEFAULT_CONFIG["refresh_rate"],
        help="Refresh rate in seconds, 1-10 (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None, source: MetricsSource | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        rate = validate_refresh_rate(args.rate)
        style = get_style(DEFAULT_CONFIG["style"])
    except InvalidConfiguration as e:
        print(f"cpuview: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    if source is None:
        source = PsutilMetricsSource()
    interval = float(DEFAULT_CONFIG["sample_interval"])

    try:
        if args.watch:
            watch(source, style, interval, rate)
        else:
            draw_once(source, style, interval)
    except MetricsUnavailable as e:
        print(f"cpuview: {e}", file=sys.stderr)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
