# -*- coding: utf-8 -*-

import time
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time as ISO8601 string (no microseconds)."""
    return iso_from_ts(time.time())


def iso_from_ts(ts: float) -> str:
    return (
        datetime.fromtimestamp(int(ts), tz=timezone.utc).isoformat()
    )


def ts_from_iso(text: str) -> float:
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def format_time(seconds: int) -> str:
    m = max(0, int(seconds)) // 60
    s = max(0, int(seconds)) % 60
    return f"{m:02d}:{s:02d}"


def format_duration(sec: int) -> str:
    sec = max(0, int(sec))
    h = sec // 3600
    m = (sec % 3600) // 60
    s = sec % 60
    if h > 0:
        return f"{h}h {m:02d}m"
    return f"{m}m {s:02d}s"
