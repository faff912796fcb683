"""Settings and panel styles for cpuview.

Everything here is a fixed default or comes from the command line; there is
no config file. Styles bundle the three box widths so the bar and narrow
layouts can coexist without separate renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class InvalidConfiguration(ValueError):
    """A setting is outside the range cpuview can render with."""


DEFAULT_CONFIG: dict[str, Any] = {
    "refresh_rate": 2,
    "refresh_bounds": {"min": 1, "max": 10},
    "sample_interval": 1.0,
    "style": "bars",
}


@dataclass(frozen=True)
class Style:
    """Fixed widths for the panel, each core box and each thread box."""

    name: str
    panel_width: int
    core_width: int
    thread_width: int
    show_bars: bool = True


BAR_STYLE = Style("bars", panel_width=61, core_width=28, thread_width=24)
# Bar-less layout from before usage bars existed
NARROW_STYLE = Style(
    "narrow", panel_width=49, core_width=22, thread_width=16, show_bars=False
)

STYLES: dict[str, Style] = {s.name: s for s in (BAR_STYLE, NARROW_STYLE)}


def get_style(name: str) -> Style:
    """Look up a built-in style by name.

    Raises:
        InvalidConfiguration: If no style has that name.
    """
    try:
        return STYLES[name]
    except KeyError:
        known = ", ".join(sorted(STYLES))
        raise InvalidConfiguration(
            f"unknown style: {name!r} (expected one of: {known})"
        ) from None


def validate_refresh_rate(rate: int) -> int:
    """Return *rate* if it lies within the allowed refresh bounds.

    Raises:
        InvalidConfiguration: If the rate is outside the inclusive bounds.
    """
    bounds = DEFAULT_CONFIG["refresh_bounds"]
    if rate < bounds["min"] or rate > bounds["max"]:
        raise InvalidConfiguration(
            f"invalid refresh rate: {rate} "
            f"(expected {bounds['min']}-{bounds['max']} seconds)"
        )
    return rate
