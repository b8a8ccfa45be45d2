from __future__ import annotations

import re
from datetime import datetime, timezone

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp as returned by Replicate.

    Accepts a trailing ``Z`` and fractional seconds of any precision
    (truncated to microseconds). Naive values are taken as UTC. Returns
    None for anything that does not parse.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    raw = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw, count=1)
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_since(value: object, now: datetime | None = None) -> float | None:
    """Seconds elapsed since ``value``; None when it is not a timestamp."""
    created = parse_timestamp(value)
    if created is None:
        return None
    now = now or datetime.now(timezone.utc)
    return (now - created).total_seconds()
