"""
Duration values as the upstream services emit them.

Work and overtime hours arrive as ISO-8601 durations ("PT8H30M", "PT0S"),
as clock strings ("08:30") or as plain numbers. Everything is converted to
float hours here so the aggregation code never parses strings.
"""

import logging
import math
import re

logger = logging.getLogger(__name__)

_ISO_DURATION_RE = re.compile(
    r"^(?P<sign>-)?P"
    r"(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T"
    r"(?:(?P<hours>\d+(?:\.\d+)?)H)?"
    r"(?:(?P<minutes>\d+(?:\.\d+)?)M)?"
    r"(?:(?P<seconds>\d+(?:\.\d+)?)S)?"
    r")?$",
    re.IGNORECASE,
)
_CLOCK_RE = re.compile(r"^(?P<hours>\d+):(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}(?:\.\d+)?))?$")


def _finite(hours: float, raw: object) -> float:
    if not math.isfinite(hours):
        logger.warning("Non-finite duration %r, counted as 0 hours", raw)
        return 0.0
    return hours


def parse_duration_hours(value: object) -> float:
    """Convert an upstream duration value to hours.

    Empty values count as zero. Unparseable strings are logged and also
    count as zero, so one bad record never breaks a whole dataset.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        logger.warning("Boolean duration %r, counted as 0 hours", value)
        return 0.0
    if isinstance(value, (int, float)):
        return _finite(float(value), value)

    text = str(value).strip()
    if not text:
        return 0.0

    match = _ISO_DURATION_RE.match(text)
    if match and text.upper() not in ("P", "PT"):
        hours = (
            float(match["days"] or 0) * 24
            + float(match["hours"] or 0)
            + float(match["minutes"] or 0) / 60
            + float(match["seconds"] or 0) / 3600
        )
        return _finite(-hours if match["sign"] else hours, text)

    match = _CLOCK_RE.match(text)
    if match:
        return (
            int(match["hours"])
            + int(match["minutes"]) / 60
            + float(match["seconds"] or 0) / 3600
        )

    try:
        return _finite(float(text), text)
    except ValueError:
        logger.warning("Unparseable duration '%s', counted as 0 hours", text)
        return 0.0


def format_duration_hours(hours: float) -> str:
    """Render hours as an ISO-8601 duration, e.g. 8.5 -> 'PT8H30M'."""
    total_seconds = round(abs(hours) * 3600)
    if total_seconds == 0:
        return "PT0S"
    h, rest = divmod(total_seconds, 3600)
    m, s = divmod(rest, 60)
    parts = ["-PT" if hours < 0 else "PT"]
    if h:
        parts.append(f"{h}H")
    if m:
        parts.append(f"{m}M")
    if s:
        parts.append(f"{s}S")
    return "".join(parts)
