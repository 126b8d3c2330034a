from datetime import datetime
from typing import Optional

from storefront.models.order import Order


def history_entry(status: str, actor_id: Optional[int], memo: Optional[str] = None) -> dict:
    entry = {
        "status": status,
        "changed_at": datetime.utcnow().isoformat(),
        "changed_by": actor_id,
    }
    if memo:
        entry["memo"] = memo
    return entry


def record_status_change(
    order: Order,
    new_status: str,
    actor_id: Optional[int],
    memo: Optional[str] = None,
) -> bool:
    """
    Append-only status log. Returns False when the status did not change.
    """
    if new_status == order.status:
        return False

    order.status = new_status
    # assign a new list so the JSON column is flagged dirty
    order.status_history = [*(order.status_history or []), history_entry(new_status, actor_id, memo)]
    return True
