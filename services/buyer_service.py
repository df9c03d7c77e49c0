"""
Create, update, delete and query buyer records.

A mutation runs: field validation, cross-field rules, identity resolution,
record lookup, authorization, rate limiting (updates only), the write, and
finally the audit entry.
"""
import logging
import math
import uuid
from typing import Any, Dict, Mapping, Optional, Union

from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from pydantic.alias_generators import to_camel

from authentication.identity import resolve_identity
from buyers.models import Buyer, Status
from buyers.schemas import BuyerInSchema, BuyerOutSchema
from services import audit_service
from services.authorization import DELETE, UPDATE, check_can_mutate
from services.exceptions import NotFoundError
from services.rate_limiter import get_update_rate_limiter
from services.validation import plain, plain_amount, validate_buyer

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = (
    "id",
    "full_name",
    "phone",
    "city",
    "property_type",
    "budget_min",
    "budget_max",
    "timeline",
    "status",
    "updated_at",
)


def record_values(data: BuyerInSchema) -> Dict[str, Any]:
    """
    Model field values for a validated record.

    Optional fields the record leaves out are cleared, except ``status`` which
    the caller decides on.
    """
    return {
        "full_name": data.full_name,
        "email": data.email,
        "phone": data.phone,
        "city": data.city,
        "property_type": plain(data.property_type),
        "bhk": plain(data.bhk),
        "purpose": plain(data.purpose),
        "budget_min": data.budget_min,
        "budget_max": data.budget_max,
        "timeline": plain(data.timeline),
        "source": plain(data.source),
        "notes": data.notes,
        "tags": list(data.tags or []),
    }


def serialize_buyer(buyer: Buyer) -> Dict[str, Any]:
    """JSON-safe camelCase snapshot of a buyer"""
    return BuyerOutSchema.from_orm(buyer).model_dump(mode="json", by_alias=True)


def get_buyer(buyer_id) -> Buyer:
    try:
        pk = uuid.UUID(str(buyer_id))
    except ValueError:
        raise NotFoundError("Buyer not found")
    try:
        return Buyer.objects.get(pk=pk)
    except Buyer.DoesNotExist:
        raise NotFoundError("Buyer not found")


def create_buyer(raw: Union[Mapping[str, Any], BuyerInSchema], owner_email: Optional[str]) -> Buyer:
    data = validate_buyer(raw)
    owner = resolve_identity(owner_email)

    buyer = Buyer.objects.create(
        owner=owner,
        status=plain(data.status or Status.NEW),
        **record_values(data),
    )
    audit_service.record_change(buyer.id, owner, audit_service.CREATED)

    logger.info(f"Buyer {buyer.id} created by {owner.email}")
    return buyer


def update_buyer(
    buyer_id, raw: Union[Mapping[str, Any], BuyerInSchema], owner_email: Optional[str]
) -> Buyer:
    """
    Replace the editable fields of a buyer.

    Absent optional fields are cleared; an absent status keeps the stored one.
    """
    data = validate_buyer(raw)
    actor = resolve_identity(owner_email)
    buyer = get_buyer(buyer_id)
    check_can_mutate(actor, buyer, UPDATE)
    get_update_rate_limiter().consume(actor.id)

    values = record_values(data)
    values["status"] = plain(data.status) if data.status else buyer.status

    changes = {}
    for field, value in values.items():
        current = getattr(buyer, field)
        if current != value:
            changes[to_camel(field)] = {"from": plain_amount(current), "to": plain_amount(value)}
        setattr(buyer, field, value)
    buyer.save()

    audit_service.record_change(buyer.id, actor, audit_service.UPDATED, changes=changes)

    logger.info(f"Buyer {buyer.id} updated by {actor.email} ({len(changes)} fields changed)")
    return buyer


def delete_buyer(buyer_id, owner_email: Optional[str]) -> None:
    """Delete a buyer, leaving a final history entry with its last state."""
    actor = resolve_identity(owner_email)
    buyer = get_buyer(buyer_id)
    check_can_mutate(actor, buyer, DELETE)

    snapshot = serialize_buyer(buyer)
    with transaction.atomic():
        audit_service.record_change(buyer.id, actor, audit_service.DELETED, previousData=snapshot)
        buyer.delete()

    logger.info(f"Buyer {snapshot['id']} deleted by {actor.email}")


def filter_buyers(
    city: Optional[str] = None,
    property_type: Optional[str] = None,
    status: Optional[str] = None,
    timeline: Optional[str] = None,
    search: Optional[str] = None,
) -> QuerySet:
    """Exact-match filters plus a case-insensitive search over name, phone and email"""
    query = Q()
    if city:
        query &= Q(city=city)
    if property_type:
        query &= Q(property_type=property_type)
    if status:
        query &= Q(status=status)
    if timeline:
        query &= Q(timeline=timeline)
    if search:
        query &= (
            Q(full_name__icontains=search)
            | Q(phone__icontains=search)
            | Q(email__icontains=search)
        )
    return Buyer.objects.filter(query).order_by("-updated_at", "id")


def list_buyers(page: int = 1, limit: Optional[int] = None, **filters) -> Dict[str, Any]:
    """One page of buyer summaries, newest update first"""
    if limit is None:
        limit = settings.BUYER_PAGE_SIZE
    limit = max(1, min(limit, settings.BUYER_MAX_PAGE_SIZE))
    page = max(1, page)

    queryset = filter_buyers(**filters)
    total = queryset.count()
    offset = (page - 1) * limit
    buyers = list(queryset.only(*SUMMARY_FIELDS)[offset:offset + limit])

    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
        "data": buyers,
    }
