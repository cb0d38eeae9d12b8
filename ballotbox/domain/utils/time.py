"""日時ユーティリティ."""

from datetime import UTC, datetime


def as_utc(value: datetime) -> datetime:
    """タイムゾーン情報のない日時をUTCとみなし、UTCの日時に揃える.

    SQLiteなどタイムゾーンを保持しないストレージから読み戻した日時と、
    時計から得た日時を比較できるようにするために使う。
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)
