"""Append-only change history for buyer records."""
import logging
from typing import Any, Dict, Optional

from django.conf import settings

from authentication.models import UserIdentity
from buyers.models import Buyer, BuyerHistory

logger = logging.getLogger(__name__)

CREATED = "Created buyer record"
UPDATED = "Updated buyer"
DELETED = "Deleted buyer"
IMPORTED = "Created via import"


def build_history(buyer_id, actor: Optional[UserIdentity], action: str, **extra: Any) -> BuyerHistory:
    """Build an unsaved history entry; ``extra`` is merged into the diff payload."""
    diff: Dict[str, Any] = {"action": action}
    diff.update(extra)
    return BuyerHistory(buyer_id=buyer_id, changed_by=actor, diff=diff)


def record_change(buyer_id, actor: Optional[UserIdentity], action: str, **extra: Any) -> BuyerHistory:
    """
    Append one history entry for a mutation that has already been written.

    Usage:
        record_change(buyer.id, owner, UPDATED, changes={"city": {"from": "Pune", "to": "Mohali"}})
    """
    entry = build_history(buyer_id, actor, action, **extra)
    entry.save()
    logger.info(
        f"Audit entry: {action} on buyer {buyer_id} "
        f"by {actor.email if actor else 'system'}"
    )
    return entry


def recent_history(buyer: Buyer, limit: Optional[int] = None):
    """Newest entries first, at most BUYER_HISTORY_LIMIT of them by default"""
    if limit is None:
        limit = settings.BUYER_HISTORY_LIMIT
    return BuyerHistory.objects.filter(buyer_id=buyer.pk).order_by("-changed_at", "-id")[:limit]
