"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def format_relative(moment: datetime, now: datetime | None = None) -> str:
    """Short relative label for history lists.

    'Just now', '5m ago', '3h ago', '2d ago'; a week or older falls back to
    the calendar date, e.g. 'Mar 4'.
    """
    now = now or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    elapsed = int((now - moment).total_seconds())
    minutes = elapsed // 60
    hours = elapsed // 3600
    days = elapsed // 86400

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return f"{moment:%b} {moment.day}"
