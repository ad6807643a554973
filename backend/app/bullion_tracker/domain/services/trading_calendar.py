"""Trading calendar for day-over-day price comparisons.

Metals trade Monday through Friday. The comparison baseline for a given day
is the close of the previous trading day, so Monday compares against Friday
and a weekend day compares against the Friday before it.

Exchange holidays are not modelled: the day before a holiday is treated as
an ordinary trading day.
"""

from datetime import date, datetime, time, timedelta, timezone

_END_OF_DAY = time(23, 59, 59)


def last_trading_day(current: date) -> date:
    """Return the trading day whose close is the baseline for ``current``.

    Args:
        current: The day a change is being computed for.

    Returns:
        Friday for Sunday and Monday, the previous calendar day otherwise.
    """
    weekday = current.weekday()
    if weekday == 6:  # Sunday
        return current - timedelta(days=2)
    if weekday == 0:  # Monday
        return current - timedelta(days=3)
    return current - timedelta(days=1)


def end_of_day(day: date) -> datetime:
    """Last second of a calendar day in UTC."""
    return datetime.combine(day, _END_OF_DAY, tzinfo=timezone.utc)
