from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def dt_to_epoch_ms(dt: datetime) -> int:
    # naive datetimes coming out of x509 are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // _ONE_MS


def now_ms() -> int:
    return time.time_ns() // 1_000_000
