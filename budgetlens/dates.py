"""Date utilities for budgetlens.

Pure functions for month arithmetic and formatting. Months are plain
``YYYY-MM`` strings; transaction dates are bucketed by string slicing only.
"""

from datetime import datetime, timedelta

from budgetlens.domain.models import Month


def month_range(month: Month) -> tuple[str, str, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (since_date, until_date, label) where:
        - since_date: First day of month (YYYY-MM-DD)
        - until_date: First day of next month (YYYY-MM-DD)
        - label: Human-readable month (e.g., "January 2025")
    """
    dt = datetime.strptime(month, "%Y-%m")
    since = dt.strftime("%Y-%m-01")
    following = (dt.replace(day=28) + timedelta(days=4)).replace(day=1)
    until = following.strftime("%Y-%m-%d")
    label = dt.strftime("%B %Y")
    return since, until, label


def shift_month(month: Month, offset: int) -> Month:
    """Move a month forwards or backwards by whole calendar months.

    Args:
        month: Month in YYYY-MM format.
        offset: Number of months to move (negative moves backwards).

    Returns:
        Shifted month in YYYY-MM format.

    Raises:
        ValueError: If month is not a valid YYYY-MM string.
    """
    dt = datetime.strptime(month, "%Y-%m")
    index = dt.year * 12 + (dt.month - 1) + offset
    year, month_index = divmod(index, 12)
    return Month(f"{year:04d}-{month_index + 1:02d}")


def next_month(month: Month) -> Month:
    """Return the calendar month after ``month``."""
    return shift_month(month, 1)


def previous_month(month: Month) -> Month:
    """Return the calendar month before ``month``."""
    return shift_month(month, -1)


def month_label(month: Month, short: bool = False) -> str:
    """Format a month for display ("January 2025" or "Jan 2025")."""
    dt = datetime.strptime(month, "%Y-%m")
    return dt.strftime("%b %Y" if short else "%B %Y")


def month_of(date: str) -> Month:
    """Extract the YYYY-MM bucket from an ISO date string."""
    return Month(date[:7])


def current_month(now: datetime | None = None) -> Month:
    """Get the current month in YYYY-MM format."""
    if now is None:
        now = datetime.now()
    return Month(now.strftime("%Y-%m"))


def period_tag(date: str) -> str:
    """Bucket a date into its week of the month.

    Args:
        date: ISO date string (only the YYYY-MM-DD prefix is read).

    Returns:
        One of "1st-7th", "8th-14th", "15th-21st", "22nd-31st",
        or an empty string when the date cannot be parsed.
    """
    try:
        day = datetime.strptime(date[:10], "%Y-%m-%d").day
    except ValueError:
        return ""

    if day <= 7:
        return "1st-7th"
    if day <= 14:
        return "8th-14th"
    if day <= 21:
        return "15th-21st"
    return "22nd-31st"
