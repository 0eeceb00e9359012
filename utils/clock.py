from datetime import datetime
from zoneinfo import ZoneInfo


def local_now(tz_name: str = None) -> datetime:
    """Facility wall-clock time as a naive datetime."""
    if not tz_name:
        return datetime.now()
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
