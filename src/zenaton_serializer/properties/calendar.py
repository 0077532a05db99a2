"""Field layout and reconstruction of calendar values.

`datetime`, `date` and `time` instances keep their state in C-level storage:
they expose no `__dict__`, and a blank instance cannot be populated afterwards.
They are therefore written with a fixed two-field layout::

    {"date": "<naive ISO 8601 text>", "timezone": "<IANA key>" | "+HH:MM" | null}

and rebuilt in two steps: the naive primitive is parsed from ``date`` and the
time zone attached afterwards. Subclasses are then wrapped into their own type.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from zenaton_serializer.errors import MalformedPayloadError, UnsupportedValueError

FIELD_DATE = "date"
FIELD_TIMEZONE = "timezone"

CALENDAR_TYPES: tuple[type, ...] = (dt.datetime, dt.date, dt.time)

_OFFSET_RE = re.compile(r"([+-])(\d{2}):(\d{2})(?::(\d{2}))?")


def calendar_base(cls: type) -> type | None:
    """Return the built-in calendar type `cls` derives from, if any.

    `datetime` is checked before `date` since it subclasses it.
    """

    for base in CALENDAR_TYPES:
        if issubclass(cls, base):
            return base
    return None


def calendar_fields(value: dt.date | dt.time) -> dict[str, Any]:
    if isinstance(value, dt.datetime):
        return {
            FIELD_DATE: value.replace(tzinfo=None).isoformat(),
            FIELD_TIMEZONE: _encode_timezone(value.tzinfo, value),
        }
    if isinstance(value, dt.date):
        return {FIELD_DATE: value.isoformat(), FIELD_TIMEZONE: None}
    return {
        FIELD_DATE: value.replace(tzinfo=None).isoformat(),
        FIELD_TIMEZONE: _encode_timezone(value.tzinfo, None),
    }


def build_calendar(cls: type, fields: dict[str, Any]) -> Any:
    base = calendar_base(cls)
    if base is None:
        raise TypeError(f"{cls!r} is not a calendar type")

    text = fields.get(FIELD_DATE)
    if not isinstance(text, str):
        raise MalformedPayloadError(f"Calendar value {cls.__qualname__} is missing its date text")

    try:
        primitive = base.fromisoformat(text)
    except ValueError as exc:
        raise MalformedPayloadError(f"Invalid calendar date text: {text!r}") from exc

    tzinfo = _decode_timezone(fields.get(FIELD_TIMEZONE))
    if tzinfo is not None and base is not dt.date:
        primitive = primitive.replace(tzinfo=tzinfo)

    if cls is base:
        return primitive
    return _wrap(cls, base, primitive)


def _wrap(cls: type, base: type, primitive: Any) -> Any:
    if base is dt.datetime:
        return cls.combine(primitive.date(), primitive.timetz())
    if base is dt.date:
        return cls.fromordinal(primitive.toordinal())
    return cls(
        primitive.hour,
        primitive.minute,
        primitive.second,
        primitive.microsecond,
        tzinfo=primitive.tzinfo,
    )


def _encode_timezone(tzinfo: dt.tzinfo | None, moment: dt.datetime | None) -> str | None:
    if tzinfo is None:
        return None
    if isinstance(tzinfo, ZoneInfo) and tzinfo.key:
        return tzinfo.key

    offset = tzinfo.utcoffset(moment)
    if offset is None:
        raise UnsupportedValueError(f"Time zone {tzinfo!r} has no fixed offset")

    seconds = int(offset.total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, rest = divmod(abs(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}"
    if secs:
        text += f":{secs:02d}"
    return text


def _decode_timezone(value: Any) -> dt.tzinfo | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedPayloadError(f"Invalid calendar time zone: {value!r}")

    match = _OFFSET_RE.fullmatch(value)
    if match is not None:
        sign, hours, minutes, seconds = match.groups()
        offset = dt.timedelta(hours=int(hours), minutes=int(minutes), seconds=int(seconds or 0))
        if offset == dt.timedelta(0):
            return dt.timezone.utc
        return dt.timezone(-offset if sign == "-" else offset)

    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise MalformedPayloadError(f"Unknown calendar time zone: {value!r}") from exc
