from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time used for every stored timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value):
    """Attach UTC to naive datetimes read back from the document store."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimestampMixin:
    """Mixin for documents carrying creation and modification timestamps."""

    @staticmethod
    def stamp_new(document: dict, created_field: str = "created_at") -> dict:
        now = utcnow()
        document.setdefault(created_field, now)
        document.setdefault("updated_at", now)
        return document

    @staticmethod
    def stamp_update(changes: dict) -> dict:
        return {**changes, "updated_at": utcnow()}


__all__ = ["utcnow", "as_utc", "TimestampMixin"]
