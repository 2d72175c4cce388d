import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

import httpx


def safe_float(x: Any) -> Optional[float]:
    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return None
        if isinstance(x, str):
            x = x.strip().rstrip("%")
            if not x:
                return None
        value = float(x)
        return None if math.isnan(value) else value
    except Exception:
        return None


def safe_int(x: Any) -> Optional[int]:
    f = safe_float(x)
    return None if f is None else int(f)


def round_half_up(x: float, d: int = 0) -> float:
    """Round like JavaScript's Math.round (halves go up, not to even)."""
    factor = 10 ** d
    return math.floor(float(x) * factor + 0.5) / factor


def round_int(x: float) -> int:
    return int(round_half_up(x))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def iso_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def safe_json(resp: httpx.Response) -> Any:
    """Decoded JSON body, or None when the body is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return None


def parse_symbols(raw: Optional[str], default: list[str]) -> list[str]:
    if raw is None:
        return list(default)
    out = [s.strip() for s in raw.split(",") if s.strip()]
    return out or list(default)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int(raw: Optional[str], default: int) -> int:
    """Leading integer of a query value ("25", "25abc"); default when there is none."""
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else default


def parse_flag(raw: Optional[str]) -> bool:
    """Query flags are on only for an explicit true value; anything else is off."""
    return (raw or "").strip().lower() in ("true", "1", "yes", "on")
