import logging
from typing import Optional

from authentication.models import UserIdentity
from services.exceptions import OwnerNotFoundError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def resolve_identity(email: Optional[str]) -> UserIdentity:
    """
    Look up the acting identity by email.

    Raises:
        OwnerNotFoundError: no identity has been recorded for this email
    """
    if not email:
        raise OwnerNotFoundError()
    try:
        return UserIdentity.objects.get(email=normalize_email(email))
    except UserIdentity.DoesNotExist:
        raise OwnerNotFoundError()


def get_or_create_identity(
    email: str, name: Optional[str] = None, role: Optional[str] = None
) -> UserIdentity:
    """Upsert by email. An identity that already exists is returned unchanged."""
    identity, created = UserIdentity.objects.get_or_create(
        email=normalize_email(email),
        defaults={
            "name": name,
            "role": role or UserIdentity.Role.USER,
        },
    )
    if created:
        logger.info(f"Created identity {identity.email} with role {identity.role}")
    return identity
