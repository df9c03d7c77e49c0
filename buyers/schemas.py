from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from authentication.schemas import CamelSchema, EmailAddress
from buyers.models import BHK, PropertyType, Purpose, Source, Status, Timeline
from services.audit_service import recent_history


class BuyerInSchema(CamelSchema):
    """Field rules for a buyer record, shared by the API, the importer and the CLI"""
    full_name: str = Field(..., min_length=2, max_length=80)
    email: Optional[EmailAddress] = None
    phone: str = Field(..., min_length=10, max_length=15)
    city: str = Field(..., min_length=1, max_length=255)
    property_type: PropertyType
    bhk: Optional[BHK] = None
    purpose: Purpose
    budget_min: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    budget_max: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    timeline: Timeline
    source: Source
    status: Optional[Status] = None
    notes: Optional[str] = Field(None, max_length=1000)
    tags: Optional[List[str]] = None


class BuyerMutationSchema(BuyerInSchema):
    """Create/update request: the record plus the acting identity's email"""
    owner_email: EmailAddress


class OwnerSchema(CamelSchema):
    owner_email: EmailAddress


class BuyerSummarySchema(CamelSchema):
    """Projection used by the paginated listing and the CSV export"""
    id: UUID
    full_name: str
    phone: str
    city: str
    property_type: str
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    timeline: str
    status: str
    updated_at: datetime


class BuyerOutSchema(BuyerSummarySchema):
    email: Optional[str] = None
    bhk: Optional[str] = None
    purpose: str
    source: str
    notes: Optional[str] = None
    tags: List[str] = []
    owner_id: int
    created_at: datetime


class BuyerHistorySchema(CamelSchema):
    id: int
    buyer_id: UUID
    changed_by_id: Optional[int] = None
    diff: Dict[str, Any]
    changed_at: datetime


class BuyerDetailSchema(BuyerOutSchema):
    histories: List[BuyerHistorySchema] = []

    @staticmethod
    def resolve_histories(obj):
        return list(recent_history(obj))


class BuyerListResponseSchema(CamelSchema):
    page: int
    limit: int
    total: int
    pages: int
    data: List[BuyerSummarySchema]


class RowErrorSchema(CamelSchema):
    row: int
    message: str


class ImportResponseSchema(CamelSchema):
    message: str
    imported: int
    errors: List[RowErrorSchema]


class MessageSchema(CamelSchema):
    message: str
