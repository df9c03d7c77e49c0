import csv
import io
from typing import Iterable

from django.utils import timezone

from buyers.models import Buyer
from services.buyer_service import SUMMARY_FIELDS, filter_buyers
from services.validation import plain_amount

EXPORT_HEADERS = [
    "ID",
    "Full Name",
    "Phone",
    "City",
    "Property Type",
    "Budget Min",
    "Budget Max",
    "Timeline",
    "Status",
    "Updated At",
]


def write_buyers_csv(buyers: Iterable[Buyer]) -> str:
    """Render buyer summaries as CSV text, header first"""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADERS)
    for buyer in buyers:
        writer.writerow([
            str(buyer.id),
            buyer.full_name,
            buyer.phone,
            buyer.city,
            buyer.property_type,
            "" if buyer.budget_min is None else plain_amount(buyer.budget_min),
            "" if buyer.budget_max is None else plain_amount(buyer.budget_max),
            buyer.timeline,
            buyer.status,
            buyer.updated_at.isoformat(),
        ])
    return output.getvalue()


def export_buyers_csv(**filters) -> str:
    """Every buyer matching the listing filters, in listing order"""
    return write_buyers_csv(filter_buyers(**filters).only(*SUMMARY_FIELDS).iterator())


def export_filename() -> str:
    return f"buyers-export-{timezone.now().strftime('%Y-%m-%d-%H-%M-%S')}.csv"
