"""Date utilities for export queries."""

from __future__ import annotations

from datetime import date, timedelta


def export_date_range(num_days: int, today: date | None = None) -> tuple[str, str]:
    """Return the (from_date, to_date) window ending today.

    The window spans ``num_days`` days back from ``today``; both ends are
    inclusive on the Mixpanel side, so the export covers ``num_days + 1``
    calendar days.

    Args:
        num_days: Number of days to look back. Must not be negative.
        today: Reference date. Defaults to ``date.today()``.

    Returns:
        Tuple of YYYY-MM-DD strings.

    Raises:
        ValueError: If num_days is negative.

    Example:
        ```python
        export_date_range(30, today=date(2024, 1, 31))
        # ("2024-01-01", "2024-01-31")
        ```
    """
    if num_days < 0:
        raise ValueError("num_days must not be negative")

    to_date = today or date.today()
    from_date = to_date - timedelta(days=num_days)
    return from_date.strftime("%Y-%m-%d"), to_date.strftime("%Y-%m-%d")
