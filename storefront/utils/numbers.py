import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """Coerce a client-supplied value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    return numeric if math.isfinite(numeric) else None


def non_negative(value: Any, default: float = 0) -> float:
    numeric = to_number(value)
    if numeric is None or numeric < 0:
        return default
    return numeric


def round_amount(value: float) -> int:
    # half-up, so 0.5 rounds to 1 like the gateway's own rounding
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
