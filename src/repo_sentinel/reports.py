"""Saved reports on disk and the history window derived from them."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

REPORT_PREFIX = "report-"
REPORT_SUFFIX = ".md"
# Sorts lexicographically in time order and is safe in filenames on every platform.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%SZ"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def report_filename(when: datetime) -> str:
    return f"{REPORT_PREFIX}{when.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)}{REPORT_SUFFIX}"


def parse_report_timestamp(filename: str) -> datetime | None:
    """Timestamp encoded in a report filename, or None if the name is not a report."""
    if not (filename.startswith(REPORT_PREFIX) and filename.endswith(REPORT_SUFFIX)):
        return None
    stamp = filename[len(REPORT_PREFIX) : -len(REPORT_SUFFIX)]
    try:
        return datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def list_report_filenames(reports_dir: Path) -> list[str]:
    """Report filenames in ``reports_dir``, newest first. A missing directory has none."""
    if not reports_dir.is_dir():
        return []
    names = [
        p.name
        for p in reports_dir.iterdir()
        if p.is_file() and p.name.startswith(REPORT_PREFIX) and p.name.endswith(REPORT_SUFFIX)
    ]
    return sorted(names, reverse=True)


def calculate_fetch_hours(
    reports_dir: Path,
    max_fetch_hours: int,
    now: datetime | None = None,
) -> int:
    """
    How many hours of history the next run should cover.

    Counts the whole hours since the newest report with a readable timestamp,
    rounded up and capped at ``max_fetch_hours``. Without such a report the
    full ``max_fetch_hours`` window is used.

    Raises:
        ValueError: if the newest report is timestamped now or in the future.
    """
    now = now or _utcnow()
    for filename in list_report_filenames(reports_dir):
        timestamp = parse_report_timestamp(filename)
        if timestamp is None:
            continue
        hours_since = (now - timestamp).total_seconds() / 3600
        if hours_since <= 0:
            raise ValueError(
                f"Report timestamp {timestamp.isoformat()} is in the future or now"
            )
        return min(math.ceil(hours_since), max_fetch_hours)
    return max_fetch_hours


def save_report(reports_dir: Path, content: str, now: datetime | None = None) -> Path:
    """Write ``content`` to a new timestamped report file and return its path."""
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / report_filename(now or _utcnow())
    path.write_text(content, encoding="utf-8")
    logger.info("Saved report to %s", path)
    return path
