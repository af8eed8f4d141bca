from __future__ import annotations

import itertools
import math
import secrets
import threading
import time
from datetime import datetime, timezone
from typing import Any, Optional, Union

import pandas as pd

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_counter = itertools.count()
_id_lock = threading.Lock()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_base36(n: int, width: int) -> str:
    """Encode a non-negative int as zero-padded base-36."""
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_ALPHABET[r])
    return "".join(reversed(out)).rjust(width, "0")


def new_id(*, clock=time.time) -> str:
    """Opaque, fixed-width id whose lexical order follows creation order.

    Layout: 'c' + ms timestamp (8) + process counter (4) + random (8). The
    timestamp prefix matches the bundled sample ids, so both sort by age.
    """
    with _id_lock:
        seq = next(_counter) % (36 ** 4)
    millis = int(clock() * 1000)
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(8))
    return f"c{to_base36(millis, 8)}{to_base36(seq, 4)}{rand}"


def is_valid_number(v: Optional[float]) -> bool:
    """Check if value is a real number (not None/NaN/inf)."""
    try:
        return v is not None and math.isfinite(float(v))
    except (TypeError, ValueError):
        return False


def parse_number(raw: Any, name: str) -> Optional[float]:
    """Parse an optional numeric query value; blank means absent."""
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be a number, got {raw!r}")
    if not is_valid_number(value):
        raise ValueError(f"'{name}' must be a finite number, got {raw!r}")
    return value


def parse_int(raw: Any, name: str) -> Optional[int]:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValueError(f"'{name}' must be an integer, got {raw!r}")


def to_aware_utc(v: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """Convert input to an aware UTC datetime; None stays None.

    Raises ValueError on strings pandas cannot read as a timestamp.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.astimezone(timezone.utc) if v.tzinfo else v.replace(tzinfo=timezone.utc)
    ts = pd.to_datetime(v, errors="coerce", utc=True)
    if pd.isna(ts):
        raise ValueError(f"Invalid timestamp: {v!r}")
    return ts.to_pydatetime()
