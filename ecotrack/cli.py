"""CLI entry point for ecotrack."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ecotrack import __version__
from ecotrack.achievements import Badge, BadgeStatus, badge_statuses, evaluate_badges, unlock_badges
from ecotrack.activity import Activity, InvalidArgument, parse_date
from ecotrack.analytics import Footprint, Timeframe, build_footprint, total_emissions
from ecotrack.emissions import log_activity
from ecotrack.factors import get_impact_description, get_unit
from ecotrack.store import JsonBadgeStore, StoreError, append_activity, load_activities
from ecotrack.tips import Tip, generate_tips

logger = logging.getLogger("ecotrack")

DEFAULT_DATA = "activities.json"
DEFAULT_USER = "default"


@dataclass
class Report:
    footprint: Footprint
    statuses: list[BadgeStatus]
    newly_unlocked: list[Badge]
    tips: list[Tip]


def _setup_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _timestamp(value: str) -> datetime:
    """argparse type for --now / --date."""
    ts = parse_date(value)
    if ts is None:
        raise argparse.ArgumentTypeError(f"not an ISO date/time: {value!r}")
    return ts


def _build_report(
    activities: list[Activity],
    timeframe: Timeframe,
    now: datetime,
    *,
    user: str,
    badges_file: Optional[str],
) -> Report:
    """Compute everything the summary and JSON views show."""
    if badges_file:
        store = JsonBadgeStore(badges_file)
        newly = unlock_badges(store, user, activities, now)
        unlocked = store.get_unlocked(user)
    else:
        newly = evaluate_badges(activities, (), now)
        unlocked = {b.id for b in newly}

    return Report(
        footprint=build_footprint(activities, timeframe, now),
        statuses=badge_statuses(activities, unlocked, now),
        newly_unlocked=newly,
        # Tips key off today's total, as on the dashboard
        tips=generate_tips(activities, total_emissions(activities, Timeframe.DAILY, now)),
    )


def print_summary(report: Report) -> None:
    """Print a one-shot Rich summary to stdout."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.rule import Rule
    from rich.table import Table
    from rich.text import Text

    from ecotrack.theme import (
        ACCENT_BADGES,
        ACCENT_CATEGORIES,
        ACCENT_TIPS,
        ACCENT_TREND,
        CATEGORY_COLORS,
        CATEGORY_ICONS,
        CYAN,
        GREEN,
        MUTED,
        PRIORITY_COLORS,
        SURFACE,
        YELLOW,
        gradient_bar,
        progress_bar,
        render_banner,
        score_bar,
        sparkline,
    )

    console = Console()
    console.print(render_banner())

    fp = report.footprint

    overview = Text()
    overview.append(f"  {fp.activity_count}", style=f"bold {CYAN}")
    overview.append(" activities", style=MUTED)
    overview.append(f"    {fp.daily_total:.2f}", style=f"bold {CYAN}")
    overview.append(" kg today", style=MUTED)
    overview.append(f"    {fp.weekly_total:.2f}", style=f"bold {CYAN}")
    overview.append(" kg last 7 days", style=MUTED)
    overview.append(f"    {fp.monthly_total:.2f}", style=f"bold {CYAN}")
    overview.append(" kg this month", style=MUTED)
    overview.append(f"\n  🌍 Score ({fp.timeframe.value}, {fp.total:.2f} kg): ", style=MUTED)
    overview.append_text(score_bar(fp.score))

    console.print(Panel(
        overview,
        title=f"[bold {GREEN}]🌱 ecotrack[/bold {GREEN}]",
        subtitle=f"[{MUTED}]{fp.now:%Y-%m-%d %H:%M}[/{MUTED}]",
        border_style=GREEN,
        padding=(1, 1),
    ))

    # Categories
    console.print(Rule(f"[bold {ACCENT_CATEGORIES}]📦 Categories[/bold {ACCENT_CATEGORIES}]", style=ACCENT_CATEGORIES))
    table = Table(border_style=SURFACE, show_edge=True, pad_edge=True)
    table.add_column("Category", style=f"bold {CYAN}")
    table.add_column("kg CO₂", justify="right", style=f"bold {GREEN}")
    table.add_column("", min_width=24, no_wrap=True)

    total = sum(fp.breakdown.values())
    top = max(fp.breakdown.values(), default=0.0)
    for category, value in fp.breakdown.items():
        bar = gradient_bar(value, top, color=CATEGORY_COLORS[category])
        pct = value / total * 100 if total else 0.0
        bar.append(f" {pct:.0f}%", style=f"bold {MUTED}")
        table.add_row(f"{CATEGORY_ICONS[category]} {category.capitalize()}", f"{value:.2f}", bar)

    console.print(table)
    console.print()

    # Week
    console.print(Rule(f"[bold {ACCENT_TREND}]📊 This Week[/bold {ACCENT_TREND}]", style=ACCENT_TREND))
    week = Text()
    week.append("  ")
    week.append(sparkline([d.emissions for d in fp.trend]), style=f"bold {GREEN}")
    week.append("  Mon→Sun   ", style=MUTED)
    week.append("  ".join(f"{d.day} {d.emissions:.1f}" for d in fp.trend), style=MUTED)
    console.print(week)
    console.print()

    # Badges
    console.print(Rule(f"[bold {ACCENT_BADGES}]🏅 Badges[/bold {ACCENT_BADGES}]", style=ACCENT_BADGES))
    newly = {b.id for b in report.newly_unlocked}
    badge_table = Table(border_style=SURFACE, show_edge=True, pad_edge=True)
    badge_table.add_column("Badge", style=f"bold {CYAN}")
    badge_table.add_column("Description", style=MUTED)
    badge_table.add_column("Progress", no_wrap=True)
    for s in report.statuses:
        name = f"{s.badge.icon} {s.badge.name}"
        if s.badge.id in newly:
            name += f" [bold {YELLOW}]NEW[/bold {YELLOW}]"
        badge_table.add_row(name, s.badge.description, progress_bar(s.progress, s.state))
    console.print(badge_table)
    console.print()

    # Tips
    console.print(Rule(f"[bold {ACCENT_TIPS}]💡 Tips[/bold {ACCENT_TIPS}]", style=ACCENT_TIPS))
    tips = Text()
    for i, t in enumerate(report.tips):
        if i:
            tips.append("\n")
        color = PRIORITY_COLORS[t.priority.value]
        tips.append(f"  ● {t.title}", style=f"bold {color}")
        tips.append(f"  {t.description}", style=MUTED)
    console.print(Panel(tips, border_style=ACCENT_TIPS, padding=(0, 1)))
    console.print()


def report_to_dict(report: Report) -> dict:
    fp = report.footprint
    return {
        "now": fp.now.isoformat(),
        "timeframe": fp.timeframe.value,
        "activity_count": fp.activity_count,
        "total": fp.total,
        "totals": {
            "daily": fp.daily_total,
            "weekly": fp.weekly_total,
            "monthly": fp.monthly_total,
        },
        "score": fp.score,
        "breakdown": fp.breakdown,
        "chart": [{"category": c.label, "emissions": c.emissions} for c in fp.chart],
        "trend": [
            {"day": d.day, "date": d.date.isoformat(), "emissions": d.emissions}
            for d in fp.trend
        ],
        "badges": [
            {
                "id": s.badge.id,
                "name": s.badge.name,
                "unlocked": s.unlocked,
                "progress": s.progress,
                "state": s.state.value,
            }
            for s in report.statuses
        ],
        "newly_unlocked": [b.id for b in report.newly_unlocked],
        "tips": [
            {
                "id": t.id,
                "title": t.title,
                "description": t.description,
                "impact": t.impact,
                "category": t.category,
                "priority": t.priority.value,
            }
            for t in report.tips
        ],
    }


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ecotrack CLI."""
    parser = argparse.ArgumentParser(
        prog="ecotrack",
        description="Personal carbon footprint tracker — emissions, score, badges and tips.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=os.environ.get("ECOTRACK_DATA", DEFAULT_DATA),
        help=f"JSON file of logged activities (default: $ECOTRACK_DATA or {DEFAULT_DATA})",
    )
    parser.add_argument(
        "--timeframe",
        choices=[t.value for t in Timeframe],
        default=Timeframe.DAILY.value,
        help="Window for the total and footprint score (default: daily)",
    )
    parser.add_argument(
        "--now",
        type=_timestamp,
        metavar="DATETIME",
        help="Evaluate as of this ISO date/time instead of the current time",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the report as JSON",
    )
    parser.add_argument(
        "--user",
        default=os.environ.get("ECOTRACK_USER", DEFAULT_USER),
        help="User id for badge persistence (default: $ECOTRACK_USER or 'default')",
    )
    parser.add_argument(
        "--badges",
        metavar="FILE",
        default=os.environ.get("ECOTRACK_BADGES"),
        help="JSON file recording unlocked badges per user (default: $ECOTRACK_BADGES)",
    )
    parser.add_argument(
        "--log",
        nargs=3,
        metavar=("CATEGORY", "TYPE", "AMOUNT"),
        help="Log a new activity to PATH before reporting (e.g. --log transport car 12)",
    )
    parser.add_argument(
        "--date",
        type=_timestamp,
        metavar="DATETIME",
        help="When the --log activity happened (default: --now)",
    )
    parser.add_argument("--report", metavar="FILE", help="Write a markdown report to FILE")
    parser.add_argument("--badge-svg", metavar="FILE", help="Write a footprint score SVG badge to FILE")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument(
        "--version",
        action="version",
        version=f"ecotrack {__version__}",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    now = args.now or datetime.now()

    try:
        if args.log:
            category, activity_type, raw_amount = args.log
            try:
                amount = float(raw_amount)
            except ValueError:
                parser.error(f"--log AMOUNT must be a number, got {raw_amount!r}")
            try:
                activity = log_activity(category, activity_type, amount, args.date or now)
            except InvalidArgument as exc:
                parser.error(str(exc))
            append_activity(args.path, activity)
            unit = get_unit(category, activity_type) or "units"
            print(
                f"  Logged {activity.amount:g} {unit} of {category}/{activity_type}: "
                f"{activity.emissions:.2f} kg CO₂ ({get_impact_description(category, activity_type)})",
                file=sys.stderr,
            )

        activities = load_activities(args.path)
        report = _build_report(
            activities,
            Timeframe(args.timeframe),
            now,
            user=args.user,
            badges_file=args.badges,
        )
    except StoreError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    if args.report:
        from ecotrack.export import generate_report_md

        with open(args.report, "w", encoding="utf-8") as f:
            f.write(generate_report_md(report.footprint, report.statuses, report.tips))
        print(f"  Report written to {args.report}", file=sys.stderr)

    if args.badge_svg:
        from ecotrack.export import generate_score_badge_svg

        with open(args.badge_svg, "w", encoding="utf-8") as f:
            f.write(generate_score_badge_svg(report.footprint))
        print(f"  Badge written to {args.badge_svg}", file=sys.stderr)

    if args.json_output:
        print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
    else:
        print_summary(report)


if __name__ == "__main__":
    main()
