from datetime import datetime, timezone


def get_current_time() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)
