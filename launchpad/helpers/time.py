from datetime import datetime, timezone
from zoneinfo import ZoneInfo
from typing import Optional

DEFAULT_TZ = "Asia/Dhaka"


def utc_to_local(dt: Optional[datetime], tz_name: str = DEFAULT_TZ) -> Optional[datetime]:
    if not dt:
        return None

    # Treat naive DB values as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(ZoneInfo(tz_name or DEFAULT_TZ))
