"""Export utilities — markdown footprint report and score badge SVG."""

from __future__ import annotations

from ecotrack.achievements import BadgeStatus
from ecotrack.analytics import Footprint
from ecotrack.theme import GREEN, RED, YELLOW, score_color
from ecotrack.tips import Tip


# ── Markdown Report ───────────────────────────────────────────────────

def generate_report_md(
    footprint: Footprint,
    statuses: list[BadgeStatus],
    tips: list[Tip],
) -> str:
    """Generate a markdown report for one footprint snapshot."""
    fp = footprint
    lines = [
        f"# ecotrack Report — {fp.now:%Y-%m-%d}",
        "",
        "## Overview",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Activities logged | {fp.activity_count} |",
        f"| Today | {fp.daily_total:.2f} kg CO₂ |",
        f"| Last 7 days | {fp.weekly_total:.2f} kg CO₂ |",
        f"| This month | {fp.monthly_total:.2f} kg CO₂ |",
        f"| Footprint score ({fp.timeframe.value}) | {fp.score:.0f}/100 |",
        "",
    ]

    total = sum(fp.breakdown.values())
    lines.append("## Emissions by Category")
    lines.append("")
    lines.append("| Category | kg CO₂ | Share |")
    lines.append("|----------|--------|-------|")
    for category, value in fp.breakdown.items():
        pct = value / total * 100 if total else 0.0
        lines.append(f"| {category.capitalize()} | {value:.2f} | {pct:.1f}% |")
    lines.append("")

    if fp.trend:
        lines.append("## This Week")
        lines.append("")
        lines.append("| " + " | ".join(d.day for d in fp.trend) + " |")
        lines.append("|" + "---|" * len(fp.trend))
        lines.append("| " + " | ".join(f"{d.emissions:.2f}" for d in fp.trend) + " |")
        lines.append("")

    unlocked = [s for s in statuses if s.unlocked]
    lines.append(f"## Badges ({len(unlocked)}/{len(statuses)})")
    lines.append("")
    for s in statuses:
        check = "x" if s.unlocked else " "
        b = s.badge
        lines.append(f"- [{check}] {b.icon} **{b.name}** — {b.description} ({s.progress:.0f}%)")
    lines.append("")

    if tips:
        lines.append("## Tips")
        lines.append("")
        for t in tips:
            lines.append(f"- **{t.title}** ({t.priority.value}) — {t.description} _{t.impact}_")
        lines.append("")

    lines.append("---")
    lines.append("*Generated by ecotrack*")
    lines.append("")

    return "\n".join(lines)


# ── Score Badge SVG ───────────────────────────────────────────────────

def generate_score_badge_svg(footprint: Footprint) -> str:
    """Generate a shields.io-style SVG badge with the footprint score."""
    label = "footprint"
    value = f"{footprint.score:.0f}/100 | {footprint.total:.1f}kg {footprint.timeframe.value}"
    color = {GREEN: "#2ea043", YELLOW: "#bf8700", RED: "#cf222e"}[score_color(footprint.score)]

    label_w = len(label) * 7 + 12
    value_w = len(value) * 7 + 12
    total_w = label_w + value_w

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{total_w}" height="20">
  <linearGradient id="a" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <clipPath id="r"><rect width="{total_w}" height="20" rx="3" fill="#fff"/></clipPath>
  <g clip-path="url(#r)">
    <rect width="{label_w}" height="20" fill="#555"/>
    <rect x="{label_w}" width="{value_w}" height="20" fill="{color}"/>
    <rect width="{total_w}" height="20" fill="url(#a)"/>
  </g>
  <g fill="#fff" text-anchor="middle" font-family="Verdana,Geneva,sans-serif" font-size="11">
    <text x="{label_w / 2}" y="15" fill="#010101" fill-opacity=".3">{label}</text>
    <text x="{label_w / 2}" y="14">{label}</text>
    <text x="{label_w + value_w / 2}" y="15" fill="#010101" fill-opacity=".3">{value}</text>
    <text x="{label_w + value_w / 2}" y="14">{value}</text>
  </g>
</svg>"""
