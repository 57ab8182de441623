from __future__ import annotations

import random
import time
import unicodedata
from datetime import datetime, timezone

_B36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def norm(s: str) -> str:
    """
    Normalise a string for fuzzy matching:
    - lowercase
    - strip accents
    - remove extra spaces
    """
    s = s.lower()
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return " ".join(s.split())


def base36(n: int) -> str:
    n = abs(int(n))
    out = ""
    while n:
        n, r = divmod(n, 36)
        out = _B36[r] + out
    return out or "0"


def time_token(suffix_len: int = 5) -> str:
    """Millisecond timestamp in base36 followed by a random base36 suffix."""
    stamp = base36(int(time.time() * 1000))
    return stamp + "".join(random.choices(_B36, k=suffix_len))


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
