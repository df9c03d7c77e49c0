from typing import Optional
from uuid import UUID

from django.conf import settings
from django.http import HttpResponse
from ninja import File, Form, Query, Router
from ninja.files import UploadedFile

from buyers.schemas import (
    BuyerDetailSchema,
    BuyerListResponseSchema,
    BuyerMutationSchema,
    BuyerOutSchema,
    ImportResponseSchema,
    MessageSchema,
    OwnerSchema,
)
from services import buyer_service, export_service, import_service


router = Router()


@router.get("", response=BuyerListResponseSchema, by_alias=True)
def list_buyers(
    request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.BUYER_PAGE_SIZE, ge=1, le=settings.BUYER_MAX_PAGE_SIZE),
    city: Optional[str] = None,
    property_type: Optional[str] = Query(None, alias="propertyType"),
    status: Optional[str] = None,
    timeline: Optional[str] = None,
    search: Optional[str] = None,
):
    """
    Paginated buyer summaries, most recently updated first.

    Filters on city, propertyType, status and timeline are exact matches;
    search looks for a case-insensitive substring of name, phone or email.
    """
    return buyer_service.list_buyers(
        page=page,
        limit=limit,
        city=city,
        property_type=property_type,
        status=status,
        timeline=timeline,
        search=search,
    )


@router.post("", response={201: BuyerOutSchema}, by_alias=True)
def create_buyer(request, payload: BuyerMutationSchema):
    """Create a buyer owned by ownerEmail"""
    buyer = buyer_service.create_buyer(payload, payload.owner_email)
    return 201, buyer


@router.get("/export")
def export_buyers(
    request,
    city: Optional[str] = None,
    property_type: Optional[str] = Query(None, alias="propertyType"),
    status: Optional[str] = None,
    timeline: Optional[str] = None,
    search: Optional[str] = None,
):
    """Download every buyer matching the listing filters as CSV"""
    content = export_service.export_buyers_csv(
        city=city,
        property_type=property_type,
        status=status,
        timeline=timeline,
        search=search,
    )
    response = HttpResponse(content, content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{export_service.export_filename()}"'
    return response


@router.post("/import", response=ImportResponseSchema, by_alias=True)
def import_buyers(
    request,
    file: Optional[UploadedFile] = File(None),
    owner_email: Optional[str] = Form(None, alias="ownerEmail"),
):
    """
    Bulk import buyers from a CSV upload.

    Valid rows are committed together; invalid rows are reported by line
    number in ``errors``.
    """
    content = file.read() if file is not None else None
    result = import_service.import_buyers(content, owner_email)
    return {
        "message": result.message,
        "imported": result.imported,
        "errors": result.errors,
    }


@router.get("/{uuid:buyer_id}", response=BuyerDetailSchema, by_alias=True)
def get_buyer(request, buyer_id: UUID):
    """A buyer with its five most recent history entries"""
    return buyer_service.get_buyer(buyer_id)


@router.put("/{uuid:buyer_id}", response=BuyerOutSchema, by_alias=True)
def update_buyer(request, buyer_id: UUID, payload: BuyerMutationSchema):
    """Replace a buyer's fields; only its owner or an admin may do this"""
    return buyer_service.update_buyer(buyer_id, payload, payload.owner_email)


@router.delete("/{uuid:buyer_id}", response=MessageSchema)
def delete_buyer(request, buyer_id: UUID, payload: OwnerSchema):
    """Delete a buyer; only its owner or an admin may do this"""
    buyer_service.delete_buyer(buyer_id, payload.owner_email)
    return {"message": "Buyer deleted successfully"}
