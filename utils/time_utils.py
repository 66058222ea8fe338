# utils/time_utils.py
import time
from datetime import datetime, timezone

from dateutil import parser as date_parser
from flask_babel import format_date as babel_format_date

INVALID_DATE = "Invalid date"


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_iso(value):
    """ISO8601 문자열 → aware datetime. 실패 시 None"""
    if isinstance(value, datetime):
        dt = value
    else:
        raw = (value or "").strip() if isinstance(value, str) else ""
        if not raw:
            return None
        try:
            dt = date_parser.isoparse(raw)
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date(value, fmt: str = "MMMM d, yyyy") -> str:
    """만료일 표시용 (예: January 31, 2025). 파싱 실패 시 'Invalid date'"""
    dt = parse_iso(value)
    if dt is None:
        return INVALID_DATE
    return babel_format_date(dt, fmt, rebase=False)
