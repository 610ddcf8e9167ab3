"""
Strict timestamp parsing for SigV4 request dates.

SigV4 clients send the request time either in X-Amz-Date, usually in the
ISO 8601 basic format (20130524T000000Z), or in the HTTP Date header
(Fri, 24 May 2013 00:00:00 GMT). Both are accepted here; anything else is
rejected rather than guessed at.
"""
from datetime import datetime
from re import compile as re_compile

from pytz import FixedOffset, UTC

# Month-name to month-value map
_month_names = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

# Zone names allowed by RFC 2822 section 4.3, in minutes east of UTC.
_zone_names = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5 * 60,
    "EDT": -4 * 60,
    "CST": -6 * 60,
    "CDT": -5 * 60,
    "MST": -7 * 60,
    "MDT": -6 * 60,
    "PST": -8 * 60,
    "PDT": -7 * 60,
}

# ISO 8601 timestamp format regex (includes RFC 3339)
_iso_8601_regex = re_compile(
    r"^(?P<year>[0-9]{4})-?"
    r"(?P<month>0[1-9]|1[0-2])-?"
    r"(?P<day>0[1-9]|[12][0-9]|3[01])"
    r"[Tt ]"
    r"(?P<hour>[01][0-9]|2[0-3]):?"
    r"(?P<minute>[0-5][0-9]):?"
    r"(?P<second>[0-5][0-9])"
    r"(?P<frac_sec>[\.,][0-9]+)?"
    r"(?P<timezone>[-+][01][0-9]:?[0-5][0-9]|[Zz])$")

# RFC 2822 timestamp format regex (RFC 1123 HTTP dates are a subset)
_rfc_2822_regex = re_compile(
    r"^(?:(?P<dow>Mon|Tue|Wed|Thu|Fri|Sat|Sun)\s*,)?\s*"
    r"(?P<day>0?[1-9]|[12][0-9]|3[01])\s+"
    r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+"
    r"(?P<year>[0-9]{4})\s+"
    r"(?P<hour>[01][0-9]|2[0-3]):"
    r"(?P<minute>[0-5][0-9])"
    r"(?::(?P<second>[0-5][0-9]))?\s+"
    r"(?P<timezone>[-+][01][0-9][0-5][0-9]|[A-Z]{1,3})$"
)

def _offset(minutes):
    if minutes == 0:
        return UTC
    return FixedOffset(minutes)

def _numeric_offset_minutes(zone):
    zone = zone.replace(":", "")
    sign = zone[0]
    offset_minutes = int(zone[1:3]) * 60 + int(zone[3:5])

    if sign == "-":
        offset_minutes = -offset_minutes

    return offset_minutes

def _build(m, month, offset_minutes, second):
    try:
        return datetime(
            year=int(m.group("year")),
            month=month,
            day=int(m.group("day")),
            hour=int(m.group("hour")),
            minute=int(m.group("minute")),
            second=second,
            tzinfo=_offset(offset_minutes))
    except ValueError:
        # Well-formed but impossible, e.g. 30 Feb.
        return None

def parse_iso8601(s):
    """
    Parse a timestamp formatted in ISO 8601 timestamp format and return a
    timezone-aware datetime. If the string is not a valid ISO 8601
    timestamp, None is returned.

    ISO 8601 timestamps include the forms:
        2018-12-25T14:00:00-08:00
        20181225T140000-0800            (Condensed)
        2018-12-25T22:00:00Z            (Z == +0000, UTC)
        20181225T220000Z                (Condensed; the SigV4 form)
        20181225 220000Z                (Space instead of T)

    Fractional seconds are accepted and ignored.
    """
    m = _iso_8601_regex.match(s)
    if not m:
        return None

    zone = m.group("timezone")
    if zone in ("Z", "z"):
        offset_minutes = 0
    else:
        offset_minutes = _numeric_offset_minutes(zone)

    return _build(m, int(m.group("month")), offset_minutes,
                  int(m.group("second")))

def parse_rfc2822(s):
    """
    Parse a timestamp formatted in RFC 2822 format and return a
    timezone-aware datetime. If the string is not a valid RFC 2822
    timestamp, None is returned.

    RFC 2822 timestamps are of the form:
        Tue, 25 Dec 2018 14:00:00 -0800
        25 Dec 2018 14:00 -0800
        Tue, 25 Dec 2018 22:00:00 GMT   (RFC 1123, as used by HTTP)
    """
    m = _rfc_2822_regex.match(s)
    if not m:
        return None

    zone = m.group("timezone")
    if zone[0] in "+-":
        offset_minutes = _numeric_offset_minutes(zone)
    else:
        offset_minutes = _zone_names.get(zone)
        if offset_minutes is None:
            return None

    second = m.group("second")
    return _build(m, _month_names[m.group("month")], offset_minutes,
                  int(second) if second else 0)

def parse_timestamp(s):
    """
    parse_timestamp(s) -> datetime or None

    Parse s as ISO 8601, falling back to RFC 2822. Leading and trailing
    whitespace is ignored.
    """
    s = s.strip()
    return parse_iso8601(s) or parse_rfc2822(s)
