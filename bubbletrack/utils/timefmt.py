import math
from datetime import date, datetime
from typing import Optional, Union

import pendulum

from bubbletrack.utils.constants import MS_PER_DAY

Timestamp = Union[int, float, str, datetime, date, None]


def to_epoch_ms(value: Timestamp) -> Optional[float]:
    '''Best-effort conversion to epoch milliseconds; None when unparseable.'''
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    try:
        if isinstance(value, datetime):
            return value.timestamp() * 1000
        if isinstance(value, date):
            return pendulum.datetime(value.year, value.month, value.day).timestamp() * 1000
    except (ValueError, OverflowError, OSError):
        return None
    if isinstance(value, str):
        try:
            parsed = pendulum.parse(value.strip(), strict=False)
        except (ValueError, TypeError, OverflowError):
            return None
        if isinstance(parsed, (datetime, date)):
            return to_epoch_ms(parsed)
    return None


def elapsed_label(since: Timestamp, now: Timestamp) -> str:
    '''Human label for the whole days between `since` and `now`.

    Never raises: an unparseable `since` (or `now`) reads as "Today".
    '''
    since_ms = to_epoch_ms(since)
    now_ms = to_epoch_ms(now)
    if since_ms is None or now_ms is None:
        return 'Today'

    delta = max(0.0, now_ms - since_ms)
    days = math.floor(delta / MS_PER_DAY)

    if days <= 0:
        return 'Today'
    if days == 1:
        return '1 day ago'
    return f'{days} days ago'
