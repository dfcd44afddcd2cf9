"""Tests for the command-line entry point and exports."""

import json
from datetime import datetime

import pytest

from ecotrack.achievements import badge_statuses
from ecotrack.analytics import build_footprint
from ecotrack.cli import main
from ecotrack.emissions import log_activity
from ecotrack.export import generate_report_md, generate_score_badge_svg
from ecotrack.tips import generate_tips

NOW = "2025-03-12T15:00:00"


def _write_activities(path, records) -> str:
    path.write_text(json.dumps(records))
    return str(path)


def _sample(tmp_path) -> str:
    return _write_activities(tmp_path / "acts.json", [
        {"category": "transport", "type": "car", "amount": 10, "emissions": 1.92, "date": "2025-03-12T08:00:00"},
        {"category": "food", "type": "beef", "amount": 1, "emissions": 27.0, "date": "2025-03-10T19:00:00"},
        {"category": "energy", "type": "electricity", "amount": 300, "emissions": 0.12, "date": "2025-03-01T10:00:00"},
    ])


def _run_json(capsys, argv) -> dict:
    main(argv + ["--json", "--now", NOW])
    return json.loads(capsys.readouterr().out)


# --- JSON output ---

def test_json_report(tmp_path, capsys):
    data = _run_json(capsys, [_sample(tmp_path)])
    assert data["activity_count"] == 3
    assert data["timeframe"] == "daily"
    assert data["totals"]["daily"] == pytest.approx(1.92)
    assert data["totals"]["weekly"] == pytest.approx(28.92)
    assert data["totals"]["monthly"] == pytest.approx(29.04)
    assert set(data["breakdown"]) == {"transport", "food", "energy", "lifestyle"}
    assert [t["priority"] for t in data["tips"]][:2] == ["high", "high"]
    assert data["newly_unlocked"] == ["first-steps", "low-carbon"]
    assert len(data["trend"]) == 7


def test_json_timeframe(tmp_path, capsys):
    data = _run_json(capsys, [_sample(tmp_path), "--timeframe", "monthly"])
    assert data["total"] == pytest.approx(29.04)
    assert data["score"] == pytest.approx(100 - (16.5 - 29.04 / 30) * 2)


def test_missing_file_is_empty_log(tmp_path, capsys):
    data = _run_json(capsys, [str(tmp_path / "none.json")])
    assert data["activity_count"] == 0
    assert data["score"] == 67


# --- Logging activities ---

def test_log_appends_activity(tmp_path, capsys):
    path = str(tmp_path / "acts.json")
    data = _run_json(capsys, [path, "--log", "food", "beef", "2", "--date", "2025-03-12T12:00:00"])
    assert data["activity_count"] == 1
    assert data["totals"]["daily"] == 54.0
    saved = json.loads((tmp_path / "acts.json").read_text())
    assert saved[0]["emissions"] == 54.0


def test_log_rejects_negative_amount(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "acts.json"), "--log", "food", "beef", "-2", "--now", NOW])
    assert exc.value.code == 2
    assert not (tmp_path / "acts.json").exists()


def test_log_rejects_non_numeric_amount(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "acts.json"), "--log", "food", "beef", "lots", "--now", NOW])
    assert exc.value.code == 2


def test_bad_now_rejected(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "acts.json"), "--now", "tomorrow"])
    assert exc.value.code == 2


# --- Badge persistence ---

def test_badges_file_persists_unlocks(tmp_path, capsys):
    path = _sample(tmp_path)
    badges = str(tmp_path / "badges.json")
    first = _run_json(capsys, [path, "--badges", badges, "--user", "alice"])
    assert first["newly_unlocked"] == ["first-steps", "low-carbon"]
    second = _run_json(capsys, [path, "--badges", badges, "--user", "alice"])
    assert second["newly_unlocked"] == []
    unlocked = {b["id"] for b in second["badges"] if b["unlocked"]}
    assert unlocked == {"first-steps", "low-carbon"}
    assert json.loads((tmp_path / "badges.json").read_text()) == {"alice": ["first-steps", "low-carbon"]}


# --- Errors ---

def test_invalid_json_exits_1(tmp_path):
    path = tmp_path / "acts.json"
    path.write_text("[{")
    with pytest.raises(SystemExit) as exc:
        main([str(path), "--now", NOW])
    assert exc.value.code == 1


def test_non_utf8_file_exits_1(tmp_path):
    path = tmp_path / "acts.json"
    path.write_bytes(b'[{"category":"food","type":"\xff","amount":1}]')
    with pytest.raises(SystemExit) as exc:
        main([str(path), "--json", "--now", NOW])
    assert exc.value.code == 1


# --- Summary and exports ---

def test_summary_output(tmp_path, capsys):
    main([_sample(tmp_path), "--now", NOW])
    out = capsys.readouterr().out
    assert "Categories" in out
    assert "Badges" in out
    assert "Tips" in out


def test_report_and_svg_written(tmp_path, capsys):
    report = tmp_path / "report.md"
    svg = tmp_path / "badge.svg"
    main([_sample(tmp_path), "--now", NOW, "--json", "--report", str(report), "--badge-svg", str(svg)])
    assert report.read_text().startswith("# ecotrack Report — 2025-03-12")
    assert "<svg" in svg.read_text()


def test_report_markdown_content():
    now = datetime(2025, 3, 12, 15, 0)
    acts = [log_activity("transport", "car", 10, datetime(2025, 3, 12, 9, 0))]
    fp = build_footprint(acts, "daily", now)
    md = generate_report_md(fp, badge_statuses(acts, set(), now), generate_tips(acts, fp.daily_total))
    assert "| Today | 1.92 kg CO₂ |" in md
    assert "## Badges (2/5)" in md
    assert "- [x] 🌱 **First Steps**" in md
    assert "**Reduce Car Usage** (high)" in md


def test_score_badge_svg():
    now = datetime(2025, 3, 12, 15, 0)
    fp = build_footprint([], "daily", now)
    svg = generate_score_badge_svg(fp)
    assert "67/100" in svg
    assert "#cf222e" not in svg
