from collections.abc import Callable
from datetime import datetime, timedelta, timezone

UTC = timezone.utc
ISO_FMT = "%Y-%m-%dT%H:%M:%S"

Clock = Callable[[], datetime]

_DAY = timedelta(days=1)


def now_utc() -> datetime:
    return truncate_ms(datetime.now(UTC))


def truncate_ms(dt: datetime) -> datetime:
    # 可搬形式 (ISO文字列) はミリ秒精度なので、内部表現もそれに揃える
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def parse_datetime(value: datetime | str | None) -> datetime | None:
    """datetime または ISO-8601 文字列を UTC の aware datetime に正規化する。

    naive な値は UTC とみなす。空文字列と None は None を返す。
    パースできない文字列は ValueError を送出する。
    """
    if value is None:
        return None
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        value = datetime.fromisoformat(s)
    if not isinstance(value, datetime):
        _msg = f"Unsupported datetime value: {value!r}"
        raise TypeError(_msg)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return truncate_ms(value.astimezone(UTC))


def to_iso(dt: datetime | None) -> str | None:
    """`2024-01-02T03:04:05.678Z` 形式の文字列にする。"""
    if dt is None:
        return None
    dt = dt.astimezone(UTC)
    return f"{dt.strftime(ISO_FMT)}.{dt.microsecond // 1000:03d}Z"


def days_between(start: datetime, end: datetime) -> int:
    """start から end までの経過日数 (切り捨て)."""
    return (end - start) // _DAY
