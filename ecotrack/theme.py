"""Shared visual constants and helpers for ecotrack."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from ecotrack.achievements import BadgeState

# ── Color Palette ───────────────────────────────────────────────────────

SURFACE = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"

CYAN = "#58a6ff"
GREEN = "#39d353"
PURPLE = "#bc8cff"
YELLOW = "#e3b341"
RED = "#f85149"
ORANGE = "#f0883e"

ACCENT_CATEGORIES = PURPLE
ACCENT_TREND = GREEN
ACCENT_BADGES = YELLOW
ACCENT_TIPS = CYAN

CATEGORY_COLORS: dict[str, str] = {
    "transport": CYAN,
    "food": ORANGE,
    "energy": YELLOW,
    "lifestyle": PURPLE,
}

CATEGORY_ICONS: dict[str, str] = {
    "transport": "🚗",
    "food": "🍎",
    "energy": "⚡",
    "lifestyle": "🛍️",
}

PRIORITY_COLORS: dict[str, str] = {
    "high": RED,
    "medium": YELLOW,
    "low": GREEN,
}

BADGE_STATE_COLORS: dict[BadgeState, str] = {
    BadgeState.UNLOCKED: GREEN,
    BadgeState.IN_PROGRESS: CYAN,
    BadgeState.OVER_TARGET: RED,
    BadgeState.LOCKED: BORDER,
}

# ── Banner ──────────────────────────────────────────────────────────────

BANNER = r"""
                  _                  _
   ___  ___ ___  | |_ _ __ __ _  ___| | __
  / _ \/ __/ _ \ | __| '__/ _` |/ __| |/ /
 |  __/ (_| (_) || |_| | | (_| | (__|   <
  \___|\___\___/  \__|_|  \__,_|\___|_|\_\ """

TAGLINE = "your carbon footprint, one activity at a time"

SPARK_CHARS = "▁▂▃▄▅▆▇█"


def sparkline(values: list[int | float]) -> str:
    """Render a list of values as a sparkline string."""
    if not values:
        return ""
    lo, hi = min(values), max(values)
    spread = hi - lo or 1
    return "".join(
        SPARK_CHARS[min(int((v - lo) / spread * (len(SPARK_CHARS) - 1)), len(SPARK_CHARS) - 1)]
        for v in values
    )


def gradient_bar(value: float, max_val: float, width: int = 20, color: str = GREEN) -> Text:
    """Horizontal bar for a category's share of the largest category."""
    filled = int((value / max_val) * width) if max_val > 0 else 0
    text = Text()
    text.append("█" * filled, style=Style(color=color))
    text.append("░" * (width - filled), style=Style(color=BORDER))
    return text


def score_color(score: float) -> str:
    if score >= 80:
        return GREEN
    if score >= 50:
        return YELLOW
    return RED


def score_bar(score: float, width: int = 10) -> Text:
    """Render the 0-100 footprint score as a colored bar."""
    color = score_color(score)
    filled = min(width, int(score // (100 / width)))
    text = Text()
    text.append("█" * filled, style=Style(color=color))
    text.append("░" * (width - filled), style=Style(color=BORDER))
    text.append(f" {score:.0f}", style=Style(color=color, bold=True))
    return text


def progress_bar(progress: float, state: BadgeState, width: int = 10) -> Text:
    """Badge progress bar. Negative progress fills red to show overshoot."""
    color = BADGE_STATE_COLORS[state]
    filled = min(width, int(abs(progress) / 100 * width))
    text = Text()
    text.append("█" * filled, style=Style(color=color))
    text.append("░" * (width - filled), style=Style(color=BORDER))
    text.append(f" {progress:.0f}%", style=Style(color=color, bold=True))
    return text


def render_banner() -> Text:
    text = Text(justify="center")
    for line in BANNER.strip("\n").split("\n"):
        text.append(line + "\n", style=Style(color=GREEN, bold=True))
    text.append(f"  {TAGLINE}\n", style=Style(color=MUTED, italic=True))
    return text
