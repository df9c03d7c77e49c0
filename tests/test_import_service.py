"""
Tests for bulk CSV import
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import IntegrityError
from django.test import override_settings

from buyers.models import Buyer, BuyerHistory
from services import audit_service
from services.exceptions import BadRequestError, TransactionError, ValidationError
from services.import_service import (
    STAGED_ROW_FAILED_MESSAGE,
    coerce_row,
    import_buyers,
    parse_budget,
    parse_tags,
)
from services.validation import BHK_REQUIRED_MESSAGE, BUDGET_ORDER_MESSAGE


class TestCoercion:
    """Test turning CSV text into candidate records"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("5000000", 5000000),
            ("50,00,000", 5000000),
            (" 0 ", 0),
            ("1500000.0", 1500000),
            ("75000.50", Decimal("75000.50")),
        ],
    )
    def test_parse_budget(self, value, expected):
        assert parse_budget(value, "budgetMin") == expected

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", "1e400x"])
    def test_parse_budget_rejects(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_budget(value, "budgetMax")
        assert "budgetMax" in exc_info.value.message

    def test_parse_tags(self):
        assert parse_tags('["a", "b"]') == ["a", "b"]
        assert parse_tags("not json") == []
        assert parse_tags('{"a": 1}') == []

    @pytest.mark.parametrize("value", ["[1, 2]", '[{"a": 1}]', '["ok", 3]', "[null]"])
    def test_parse_tags_requires_strings(self, value):
        """Test an array holding anything but strings means no tags"""
        assert parse_tags(value) == []

    def test_empty_cells_are_absent(self, csv_row):
        csv_row["email"] = ""
        csv_row["notes"] = "   "
        csv_row["budgetMin"] = ""

        candidate = coerce_row(csv_row)

        assert "email" not in candidate
        assert "notes" not in candidate
        assert "budgetMin" not in candidate
        assert candidate["budgetMax"] == 80000
        assert candidate["tags"] == ["high-priority"]

    def test_strings_are_trimmed(self, csv_row):
        csv_row["city"] = "  Mohali "
        assert coerce_row(csv_row)["city"] == "Mohali"


@pytest.mark.django_db
class TestImportBuyers:
    """Test the import as a whole"""

    def test_import_valid_rows(self, owner, make_csv, csv_row):
        second = dict(csv_row, fullName="Rohit Mehta", propertyType="Plot", bhk="", status="")

        result = import_buyers(make_csv([csv_row, second]), owner.email)

        assert result.imported == 2
        assert result.errors == []
        assert result.message == "Successfully imported 2 buyers"

        neha = Buyer.objects.get(full_name="Neha Verma")
        assert neha.owner_id == owner.id
        assert neha.status == "Contacted"
        assert neha.budget_min == 50000
        assert neha.tags == ["high-priority"]
        assert Buyer.objects.get(full_name="Rohit Mehta").status == "New"

        entries = BuyerHistory.objects.all()
        assert entries.count() == 2
        assert {entry.diff["action"] for entry in entries} == {audit_service.IMPORTED}
        assert {entry.buyer_id for entry in entries} == set(Buyer.objects.values_list("id", flat=True))

    def test_partial_import(self, owner, make_csv, csv_row):
        """Test a bad middle row is reported by line number and skipped"""
        bad = dict(csv_row, fullName="Bad Row", bhk="")
        last = dict(csv_row, fullName="Last Row")

        result = import_buyers(make_csv([csv_row, bad, last]), owner.email)

        assert result.imported == 2
        assert result.errors == [{"row": 3, "message": BHK_REQUIRED_MESSAGE}]
        assert not Buyer.objects.filter(full_name="Bad Row").exists()

    def test_budget_inversion_in_second_record(self, owner, make_csv, csv_row):
        """Test the other records commit when one has budgetMax below budgetMin"""
        rows = [
            dict(csv_row, fullName="First Row"),
            dict(csv_row, fullName="Second Row", budgetMin="90000", budgetMax="10000"),
            dict(csv_row, fullName="Third Row"),
        ]

        result = import_buyers(make_csv(rows), owner.email)

        assert result.imported == 2
        assert result.errors == [{"row": 3, "message": BUDGET_ORDER_MESSAGE}]
        assert set(Buyer.objects.values_list("full_name", flat=True)) == {"First Row", "Third Row"}

    def test_non_string_tags_keep_the_row(self, owner, make_csv, csv_row):
        """Test a row whose tags are not strings is imported without tags"""
        result = import_buyers(make_csv([dict(csv_row, tags="[1, 2]")]), owner.email)

        assert result.imported == 1
        assert result.errors == []
        assert Buyer.objects.get(full_name="Neha Verma").tags == []

    def test_fractional_budget(self, owner, make_csv, csv_row):
        result = import_buyers(make_csv([dict(csv_row, budgetMin="50000.75")]), owner.email)

        assert result.imported == 1
        assert Buyer.objects.get(full_name="Neha Verma").budget_min == Decimal("50000.75")

    def test_row_numbers_count_the_header(self, owner, make_csv, csv_row):
        bad = dict(csv_row, phone="123")

        result = import_buyers(make_csv([bad, csv_row]), owner.email)

        assert result.errors[0]["row"] == 2
        assert "phone" in result.errors[0]["message"]

    def test_bad_budget_is_a_row_error(self, owner, make_csv, csv_row):
        bad = dict(csv_row, budgetMin="lots")

        result = import_buyers(make_csv([csv_row, bad]), owner.email)

        assert result.imported == 1
        assert result.errors[0]["row"] == 3

    def test_no_valid_rows(self, owner, make_csv, csv_row):
        """Test nothing is written when every row fails"""
        rows = [dict(csv_row, timeline="soon"), dict(csv_row, fullName="")]

        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(make_csv(rows), owner.email)

        assert exc_info.value.message == "No valid rows to import"
        assert [error["row"] for error in exc_info.value.errors] == [2, 3]
        assert Buyer.objects.count() == 0

    def test_header_only(self, owner, make_csv):
        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(make_csv([]), owner.email)
        assert exc_info.value.errors == []

    def test_commit_failure_writes_nothing(self, owner, make_csv, csv_row):
        """Test a failing commit reports every row and persists nothing"""
        bad = dict(csv_row, purpose="Lease")
        rows = [csv_row, bad, dict(csv_row, fullName="Third Row")]

        with patch.object(Buyer.objects, "bulk_create", side_effect=IntegrityError("boom")):
            with pytest.raises(TransactionError) as exc_info:
                import_buyers(make_csv(rows), owner.email)

        assert exc_info.value.status_code == 409
        errors = exc_info.value.errors
        assert [error["row"] for error in errors] == [2, 3, 4]
        assert errors[0]["message"] == STAGED_ROW_FAILED_MESSAGE
        assert errors[1]["message"] != STAGED_ROW_FAILED_MESSAGE
        assert Buyer.objects.count() == 0
        assert BuyerHistory.objects.count() == 0

    def test_history_failure_rolls_back_buyers(self, owner, make_csv, csv_row):
        with patch.object(BuyerHistory.objects, "bulk_create", side_effect=IntegrityError("boom")):
            with pytest.raises(TransactionError):
                import_buyers(make_csv([csv_row]), owner.email)

        assert Buyer.objects.count() == 0

    def test_missing_owner_email(self, db, make_csv, csv_row):
        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(make_csv([csv_row]), None)
        assert exc_info.value.message == "ownerEmail not provided"

    def test_unknown_owner(self, db, make_csv, csv_row):
        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(make_csv([csv_row]), "nobody@example.com")

        assert exc_info.value.message == "Owner with email nobody@example.com not found"
        assert Buyer.objects.count() == 0

    def test_missing_file(self, owner):
        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(None, owner.email)
        assert exc_info.value.message == "CSV file is required"

    @override_settings(BUYER_IMPORT_MAX_BYTES=1024 * 1024)
    def test_file_too_large(self, owner):
        with pytest.raises(BadRequestError) as exc_info:
            import_buyers(b"x" * (1024 * 1024 + 1), owner.email)
        assert exc_info.value.message == "File size must be less than 1MB"

    def test_utf8_bom_and_latin1(self, owner, make_csv, csv_row):
        bom = b"\xef\xbb\xbf" + make_csv([dict(csv_row, city="Chandigarh")])
        latin1 = make_csv([dict(csv_row, city="Mohali")]).replace(
            b"Neha Verma", "Nehá Verma".encode("latin-1")
        )

        assert import_buyers(bom, owner.email).imported == 1
        assert import_buyers(latin1, owner.email).imported == 1
        assert Buyer.objects.filter(full_name="Nehá Verma").exists()

    def test_unknown_columns_are_ignored(self, owner, make_csv, csv_row):
        columns = ["fullName", "phone", "city", "propertyType", "bhk", "purpose", "timeline", "source", "extra"]
        row = dict(csv_row, extra="ignored")

        result = import_buyers(make_csv([row], columns=columns), owner.email)
        assert result.imported == 1
