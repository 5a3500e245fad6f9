from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")
