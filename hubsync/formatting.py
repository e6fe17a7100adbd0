"""Text rendering of snapshots for the CLI."""

from __future__ import annotations

from .models import Snapshot, System


def clip_cell(value: str, width: int) -> str:
    """Clip and pad a cell to width using ASCII ellipsis."""
    if width <= 0:
        return ""
    if len(value) <= width:
        return value.ljust(width)
    if width <= 3:
        return value[:width]
    return f"{value[: width - 3]}..."


def format_percent(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:.0f}%"


def humanize_duration(seconds_value: float | None) -> str:
    """Return a humanized duration from seconds."""
    if seconds_value is None:
        return "-"
    seconds_value = max(int(seconds_value), 0)
    if seconds_value < 60:
        return f"{seconds_value}s"
    minutes, _ = divmod(seconds_value, 60)
    if minutes < 60:
        return f"{minutes}m"
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes:02d}m"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours:02d}h"


COLUMNS = ["name", "status", "cpu", "mem", "disk", "temp", "uptime", "ctrs", "os"]
LABELS = {
    "name": "NAME",
    "status": "STATUS",
    "cpu": "CPU",
    "mem": "MEM",
    "disk": "DISK",
    "temp": "TEMP",
    "uptime": "UPTIME",
    "ctrs": "CTRS",
    "os": "OS",
}
CAPS = {"name": 40, "os": 30}


def build_row_values(system: System, snapshot: Snapshot) -> dict[str, str]:
    """Build display values for one system row."""
    info = system.info
    details = snapshot.system_details.get(system.id)
    containers = snapshot.containers.get(system.id, ())
    temp = "-"
    if info and info.temperature is not None:
        temp = f"{info.temperature:.0f}C"
    os_label = "-"
    if details and details.os_name:
        os_label = details.os_name
        if details.arch:
            os_label = f"{os_label} ({details.arch})"
    return {
        "name": system.name,
        "status": system.display_status,
        "cpu": format_percent(info.cpu if info else None),
        "mem": format_percent(info.memory_percent if info else None),
        "disk": format_percent(info.disk_percent if info else None),
        "temp": temp,
        "uptime": humanize_duration(info.uptime if info else None),
        "ctrs": str(len(containers)) if containers else "-",
        "os": os_label,
    }


def render_snapshot_lines(
    snapshot: Snapshot,
    *,
    hub_name: str | None = None,
    col_sep: str = "  ",
    error: str | None = None,
) -> list[str]:
    """Render a snapshot as a title line, a systems table and alert lines."""
    lines: list[str] = []
    online = sum(1 for s in snapshot.systems if s.is_online)
    title = f"{hub_name or 'hub'}: {online}/{len(snapshot.systems)} online"
    if snapshot.active_alerts:
        title += f", {len(snapshot.active_alerts)} active alert(s)"
    lines.append(title)
    if error:
        lines.append(f"ERROR: {error}")

    rows = [build_row_values(s, snapshot) for s in snapshot.systems]
    widths = {col: len(LABELS[col]) for col in COLUMNS}
    for values in rows:
        for col in COLUMNS:
            widths[col] = max(widths[col], len(values[col]))
    for col, cap in CAPS.items():
        widths[col] = min(widths[col], cap)

    lines.append(col_sep.join(clip_cell(LABELS[c], widths[c]) for c in COLUMNS).rstrip())
    for values in rows:
        lines.append(col_sep.join(clip_cell(values[c], widths[c]) for c in COLUMNS).rstrip())

    if snapshot.active_alerts:
        names = {s.id: s.name for s in snapshot.systems}
        lines.append("")
        lines.append("ALERTS")
        for alert in snapshot.active_alerts:
            system_name = names.get(alert.system or "", alert.system or "?")
            lines.append(
                f"  {system_name}: {alert.name} "
                f"({alert.display_metric} > {alert.display_threshold})"
            )
    return lines
