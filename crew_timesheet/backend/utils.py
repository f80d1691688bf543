from __future__ import annotations

import math


def format_hours(hours: float | None) -> str:
    """Two-decimal hours for CSV and reports; blank when hours are unknown."""
    if hours is None:
        return ""
    return f"{hours:.2f}"


def compact_hours(hours: float | None) -> str:
    """Hours without trailing zeros: 4.0 -> "4", 7.5 -> "7.5", 8.25 -> "8.25"."""
    return _strip_trailing_zero(hours or 0.0)


def parse_hours(value: object) -> float | None:
    """Coerce a cell value to hours; blank, non-numeric or non-finite gives None."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        hours = float(value)
    else:
        s = str(value).strip()
        if not s:
            return None
        try:
            hours = float(s)
        except ValueError:
            return None
    return hours if math.isfinite(hours) else None


def strip_commas(value: str | None) -> str:
    """Replace commas so a free-text cell cannot split a CSV line."""
    return (value or "").replace(",", " ").strip()


def append_text(existing: str | None, addition: str | None) -> str:
    """Append a new transcript chunk to what was already dictated."""
    base = (existing or "").strip()
    extra = (addition or "").strip()
    if not base:
        return extra
    if not extra:
        return base
    return f"{base} {extra}"


def _strip_trailing_zero(x: float) -> str:
    s = f"{x:.2f}"
    if s.endswith(".00"):
        return s[:-3]
    if s.endswith("0"):
        return s[:-1]
    return s
