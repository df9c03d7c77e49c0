"""Owner-or-admin authorization for buyer mutations."""
import logging

from authentication.models import UserIdentity
from buyers.models import Buyer
from services.exceptions import AuthorizationError

logger = logging.getLogger(__name__)

UPDATE = "update"
DELETE = "delete"

DENIED_MESSAGES = {
    UPDATE: "Unauthorized to update this buyer info",
    DELETE: "Unauthorized to delete this buyer",
}


def can_mutate(actor: UserIdentity, buyer: Buyer) -> bool:
    """Admins may change any buyer, everyone else only the buyers they own."""
    return actor.role == UserIdentity.Role.ADMIN or actor.id == buyer.owner_id


def check_can_mutate(actor: UserIdentity, buyer: Buyer, action: str) -> None:
    """Raise AuthorizationError if ``actor`` may not perform ``action`` on ``buyer``."""
    if not can_mutate(actor, buyer):
        logger.warning(
            f"Permission denied: {actor.email} (role: {actor.role}) "
            f"attempted {action} on buyer {buyer.id}"
        )
        raise AuthorizationError(DENIED_MESSAGES.get(action, "Unauthorized"))
