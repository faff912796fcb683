"""Box layout engine for the CPU topology panel.

A panel is built top-down for one snapshot: the panel asks the row
compositor for each row of (up to two) cores, each core box stacks its
thread boxes, and each thread box carries a usage bar. Every box is a plain
``list[str]`` of lines; nothing is cached between calls.
"""

from __future__ import annotations

import re
from typing import Callable

from cpuview.config import BAR_STYLE, Style
from cpuview.metrics import Snapshot

# ── Glyphs ─────────────────────────────────────────────────────────────────

H_LINE = "─"
V_LINE = "│"
BAR_FILL = "█"

# ── Usage bands ────────────────────────────────────────────────────────────

# Inclusive upper bound of each band; anything above the last is "critical"
BAND_LIMITS: tuple[tuple[str, float], ...] = (
    ("low", 25.0),
    ("medium", 50.0),
    ("high", 75.0),
)

RESET = "\033[0m"
BAND_COLORS: dict[str, str] = {
    "low": "\033[32m",  # green
    "medium": "\033[33m",  # yellow
    "high": "\033[91m",  # bright red, reads as orange
    "critical": "\033[31m",  # red
}

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

Colorizer = Callable[[str, float], str]


def usage_band(usage: float) -> str:
    """Name of the band a usage percentage falls into."""
    for band, limit in BAND_LIMITS:
        if usage <= limit:
            return band
    return "critical"


def band_color(run: str, usage: float) -> str:
    """Wrap a glyph run in the colour of its usage band."""
    return f"{BAND_COLORS[usage_band(usage)]}{run}{RESET}"


def no_color(run: str, usage: float) -> str:
    return run


# ── Geometry helpers ───────────────────────────────────────────────────────


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    """Length of *text* as drawn, ignoring colour escapes."""
    return len(strip_ansi(text))


def center(text: str, width: int) -> str:
    """Center *text* in *width* columns; the odd space goes to the right.

    Text at least as wide as *width* is returned unchanged and may overflow
    the surrounding border.
    """
    if len(text) >= width:
        return text
    left = (width - len(text)) // 2
    right = width - len(text) - left
    return " " * left + text + " " * right


def horizontal_rule(width: int, glyph: str = H_LINE) -> str:
    return glyph * width


def border_top(width: int) -> str:
    return f"┌{horizontal_rule(width - 2)}┐"


def border_bottom(width: int) -> str:
    return f"└{horizontal_rule(width - 2)}┘"


# ── Thread box ─────────────────────────────────────────────────────────────


def bar_width(usage: float, inner: int) -> int:
    """Filled cells for *usage* percent of *inner* cells.

    Never less than one cell, so idle threads stay visible, and never more
    than *inner*.
    """
    width = int((usage / 100) * inner)
    if width < 1:
        return 1
    if width > inner:
        return inner
    return width


def thread_box(
    index: int,
    width: int,
    usage: float,
    colorize: Colorizer = band_color,
    show_bar: bool = True,
) -> list[str]:
    """Render the box for one hardware thread.

    Args:
        index: Global thread number, used for the label only.
        width: Outer width of the box including borders.
        usage: Utilisation percentage; not clamped before sizing the bar.
        colorize: Applied to the filled run only.
        show_bar: Without a bar the box is just border, label, border.
    """
    inner = width - 2
    box = [
        border_top(width),
        f"{V_LINE}{center(f'Thread {index}', inner)}{V_LINE}",
    ]
    if show_bar:
        filled = bar_width(usage, inner)
        run = colorize(BAR_FILL * filled, usage)
        box.append(f"{V_LINE}{run}{' ' * (inner - filled)}{V_LINE}")
    box.append(border_bottom(width))
    return box


# ── Core box ───────────────────────────────────────────────────────────────


def core_box(
    core_index: int,
    threads_per_core: int,
    width: int,
    thread_width: int,
    usage: list[float],
    colorize: Colorizer = band_color,
    show_bars: bool = True,
) -> list[str]:
    """Render one physical core with its thread boxes stacked inside.

    Raises:
        IndexError: If *usage* has no sample for one of this core's threads.
    """
    box = [
        border_top(width),
        f"{V_LINE}{center(f'Core {core_index}', width - 2)}{V_LINE}",
    ]
    padding = " " * ((width - thread_width - 2) // 2)
    for t in range(threads_per_core):
        thread_num = core_index * threads_per_core + t
        if thread_num >= len(usage):
            raise IndexError(
                f"no usage sample for thread {thread_num} "
                f"({len(usage)} samples for core {core_index})"
            )
        for line in thread_box(
            thread_num, thread_width, usage[thread_num], colorize, show_bars
        ):
            box.append(f"{V_LINE}{padding}{line}{padding}{V_LINE}")
    box.append(border_bottom(width))
    return box


# ── Row compositor ─────────────────────────────────────────────────────────


def core_row(
    row: int,
    cores_in_row: int,
    threads_per_core: int,
    style: Style,
    usage: list[float],
    colorize: Colorizer = band_color,
) -> list[str]:
    """Lay out up to two core boxes side by side inside the panel borders.

    The row is left-aligned and padded on the right, so a lone core in the
    last row sits under the left core of the rows above.
    """
    boxes = [
        core_box(
            row * 2 + i,
            threads_per_core,
            style.core_width,
            style.thread_width,
            usage,
            colorize,
            style.show_bars,
        )
        for i in range(cores_in_row)
    ]
    max_height = max((len(b) for b in boxes), default=0)

    lines: list[str] = []
    for line_num in range(max_height):
        parts = [box[line_num] for box in boxes if line_num < len(box)]
        line = f"{V_LINE} " + " ".join(parts)
        line += " " * max(0, style.panel_width - 2 - visible_len(line))
        lines.append(f"{line} {V_LINE}")
    return lines


# ── Panel ──────────────────────────────────────────────────────────────────


def render_panel(
    snapshot: Snapshot,
    style: Style = BAR_STYLE,
    colorize: Colorizer = band_color,
) -> list[str]:
    """Render the whole processor panel for one snapshot."""
    width = style.panel_width
    lines = [
        border_top(width),
        f"{V_LINE}{center(snapshot.name, width - 2)}{V_LINE}",
        f"{V_LINE}{center(f'{snapshot.clock_mhz:2.0f}MHz', width - 2)}{V_LINE}",
    ]
    rows = (snapshot.core_count + 1) // 2
    for row in range(rows):
        cores_in_row = min(snapshot.core_count - row * 2, 2)
        lines.extend(
            core_row(
                row,
                cores_in_row,
                snapshot.threads_per_core,
                style,
                snapshot.usage,
                colorize,
            )
        )
    lines.append(border_bottom(width))
    return lines


def format_panel(
    snapshot: Snapshot,
    style: Style = BAR_STYLE,
    colorize: Colorizer = band_color,
) -> str:
    return "\n".join(render_panel(snapshot, style, colorize))
