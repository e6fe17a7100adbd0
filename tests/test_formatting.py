"""Tests for hubsync/formatting.py - snapshot rendering."""

from __future__ import annotations

from hubsync.formatting import (
    build_row_values,
    clip_cell,
    format_percent,
    humanize_duration,
    render_snapshot_lines,
)
from hubsync.models import Alert, Container, Snapshot, System, SystemDetails, SystemInfo


def sample_snapshot() -> Snapshot:
    alpha = System(
        id="s1",
        name="alpha",
        status="up",
        info=SystemInfo(
            cpu=12.4, memory_percent=55.6, disk_percent=70.0, temperature=48.2, uptime=7200
        ),
    )
    beta = System(id="s2", name="beta", status="down")
    alert = Alert(
        id="a1", name="CPU", system="s1", metric="CPU", threshold=80, enabled=True, triggered=True
    )
    return Snapshot(
        version=4,
        instance_id="inst-1",
        systems=(alpha, beta),
        system_details={"s1": SystemDetails(id="d1", system="s1", os_name="Debian", arch="arm64")},
        containers={"s1": (Container(id="c1", name="web", system="s1"),)},
        active_alerts=(alert,),
    )


def test_clip_cell_truncation() -> None:
    assert clip_cell("abcdef", 5) == "ab..."
    assert clip_cell("abc", 5) == "abc  "
    assert clip_cell("abc", 0) == ""


def test_format_percent() -> None:
    assert format_percent(None) == "-"
    assert format_percent(12.6) == "13%"


def test_humanize_duration() -> None:
    assert humanize_duration(None) == "-"
    assert humanize_duration(42) == "42s"
    assert humanize_duration(600) == "10m"
    assert humanize_duration(7260) == "2h 01m"
    assert humanize_duration(90000) == "1d 01h"


def test_build_row_values_uses_details_and_containers() -> None:
    snapshot = sample_snapshot()
    values = build_row_values(snapshot.systems[0], snapshot)
    assert values["status"] == "Online"
    assert values["cpu"] == "12%"
    assert values["temp"] == "48C"
    assert values["uptime"] == "2h 00m"
    assert values["ctrs"] == "1"
    assert values["os"] == "Debian (arm64)"


def test_build_row_values_missing_info() -> None:
    snapshot = sample_snapshot()
    values = build_row_values(snapshot.systems[1], snapshot)
    assert values["status"] == "Offline"
    assert values["cpu"] == "-"
    assert values["ctrs"] == "-"
    assert values["os"] == "-"


def test_render_snapshot_lines() -> None:
    lines = render_snapshot_lines(sample_snapshot(), hub_name="home")
    assert lines[0] == "home: 1/2 online, 1 active alert(s)"
    assert lines[1].startswith("NAME")
    assert lines[2].startswith("alpha")
    assert lines[3].startswith("beta")
    assert "ALERTS" in lines
    assert lines[-1] == "  alpha: CPU (CPU > 80)"


def test_render_snapshot_lines_with_error() -> None:
    lines = render_snapshot_lines(Snapshot(), hub_name="home", error="HTTP 500 error")
    assert lines[0] == "home: 0/0 online"
    assert lines[1] == "ERROR: HTTP 500 error"
    assert len(lines) == 3
