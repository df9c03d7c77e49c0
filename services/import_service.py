"""
Bulk CSV import of buyer records.

Each row is coerced from text, validated with the same rules as a single
create, and staged. Every staged row is then written in one transaction, so an
import is visible completely or not at all. Rows that fail validation are
reported with their line number and never block the others.
"""
import csv
import io
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple, Union

from django.conf import settings
from django.db import DatabaseError, transaction

from authentication.identity import normalize_email
from authentication.models import UserIdentity
from buyers.models import Buyer, BuyerHistory, Status
from services import audit_service
from services.buyer_service import record_values
from services.exceptions import BadRequestError, TransactionError, ValidationError
from services.validation import plain, validate_buyer

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = [
    "fullName",
    "email",
    "phone",
    "city",
    "propertyType",
    "bhk",
    "purpose",
    "budgetMin",
    "budgetMax",
    "timeline",
    "source",
    "status",
    "notes",
    "tags",
]

BUDGET_COLUMNS = ("budgetMin", "budgetMax")

# The header is line 1, so the first record is reported as row 2
FIRST_DATA_ROW = 2

STAGED_ROW_FAILED_MESSAGE = "Row was valid but the import transaction failed"


@dataclass
class ImportResult:
    imported: int
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Successfully imported {self.imported} buyers"


def decode_content(content: Union[bytes, str]) -> str:
    """Decode an uploaded file, tolerating a UTF-8 BOM and falling back to Latin-1"""
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def parse_csv(content: Union[bytes, str]) -> List[Dict[str, Optional[str]]]:
    """Parse CSV text into rows keyed by the header line; blank lines are skipped"""
    reader = csv.DictReader(io.StringIO(decode_content(content)))
    return list(reader)


def parse_budget(value: str, column: str) -> Decimal:
    """Parse a budget cell like '5000000', '50,00,000' or '75000.50'"""
    cleaned = value.replace(",", "").strip()
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError(f"{column} must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"{column} must be a number, got {value!r}")
    return amount


def parse_tags(value: str) -> List[str]:
    """Tags arrive as a JSON array of strings inside the cell; anything else means no tags"""
    try:
        tags = json.loads(value)
    except (ValueError, TypeError):
        return []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        return []
    return tags


def coerce_row(row: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """
    Turn an untyped CSV row into a candidate record.

    Strings are trimmed and empty cells count as absent. Raises ValidationError
    when a numeric cell cannot be read.
    """
    candidate: Dict[str, Any] = {}
    for column in IMPORT_COLUMNS:
        value = row.get(column)
        if value is None:
            continue
        value = value.strip()
        if value == "":
            continue
        if column in BUDGET_COLUMNS:
            candidate[column] = parse_budget(value, column)
        elif column == "tags":
            candidate[column] = parse_tags(value)
        else:
            candidate[column] = value
    return candidate


def stage_rows(
    rows: List[Dict[str, Optional[str]]], owner: UserIdentity
) -> Tuple[List[Tuple[int, Buyer, BuyerHistory]], List[Dict[str, Any]]]:
    """Validate every row independently; return the staged records and the row errors"""
    staged = []
    errors = []
    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        try:
            data = validate_buyer(coerce_row(row))
        except ValidationError as exc:
            errors.append({"row": row_number, "message": exc.message})
            continue

        buyer = Buyer(owner=owner, status=plain(data.status or Status.NEW), **record_values(data))
        history = audit_service.build_history(buyer.id, owner, audit_service.IMPORTED)
        staged.append((row_number, buyer, history))
    return staged, errors


def commit_staged(staged: List[Tuple[int, Buyer, BuyerHistory]]) -> None:
    with transaction.atomic():
        Buyer.objects.bulk_create([buyer for _, buyer, _ in staged])
        BuyerHistory.objects.bulk_create([history for _, _, history in staged])


def import_buyers(content: Union[bytes, str, None], owner_email: Optional[str]) -> ImportResult:
    """
    Import buyers from CSV content on behalf of ``owner_email``.

    Raises:
        BadRequestError: missing or unknown owner, missing or oversized file,
            or no row passed validation (``errors`` lists every row)
        TransactionError: the commit failed; nothing was written and
            ``errors`` lists every row
    """
    if not owner_email:
        raise BadRequestError("ownerEmail not provided")

    try:
        owner = UserIdentity.objects.get(email=normalize_email(owner_email))
    except UserIdentity.DoesNotExist:
        raise BadRequestError(f"Owner with email {owner_email} not found")

    if content is None:
        raise BadRequestError("CSV file is required")
    if len(content) > settings.BUYER_IMPORT_MAX_BYTES:
        limit_mb = settings.BUYER_IMPORT_MAX_BYTES // (1024 * 1024)
        raise BadRequestError(f"File size must be less than {limit_mb}MB")

    rows = parse_csv(content)
    staged, errors = stage_rows(rows, owner)

    if not staged:
        logger.info(f"Import by {owner.email} rejected: no valid rows out of {len(rows)}")
        raise BadRequestError("No valid rows to import", errors=errors)

    try:
        commit_staged(staged)
    except DatabaseError as exc:
        logger.error(f"Import transaction failed for {owner.email}: {exc}", exc_info=True)
        staged_errors = [
            {"row": row_number, "message": STAGED_ROW_FAILED_MESSAGE}
            for row_number, _, _ in staged
        ]
        all_errors = sorted(staged_errors + errors, key=lambda error: error["row"])
        raise TransactionError("Import transaction failed", errors=all_errors)

    logger.info(
        f"Imported {len(staged)} buyers for {owner.email}, "
        f"{len(errors)} rows rejected"
    )
    return ImportResult(imported=len(staged), errors=errors)
