"""
Pytest configuration and fixtures
"""
import csv
import io

import pytest
from django.test import Client

from authentication.models import UserIdentity


@pytest.fixture
def owner(db):
    """Identity with the default user role"""
    return UserIdentity.objects.create(email="owner@example.com", name="Owner Agent")


@pytest.fixture
def other_user(db):
    return UserIdentity.objects.create(email="other@example.com", name="Other Agent")


@pytest.fixture
def admin_user(db):
    return UserIdentity.objects.create(
        email="admin@example.com", name="Admin Agent", role=UserIdentity.Role.ADMIN
    )


@pytest.fixture
def api_client():
    return Client()


@pytest.fixture
def sample_buyer_data():
    """Sample buyer payload as the browser client sends it"""
    return {
        "fullName": "Aman Sharma",
        "email": "aman.sharma@example.com",
        "phone": "9876543210",
        "city": "Chandigarh",
        "propertyType": "Apartment",
        "bhk": "Two",
        "purpose": "Buy",
        "budgetMin": 5000000,
        "budgetMax": 7000000,
        "timeline": "3-6 months",
        "source": "Website",
        "notes": "Looking for a ready-to-move-in property",
        "tags": ["premium", "urgent"],
    }


@pytest.fixture
def make_csv():
    """Build CSV bytes from a list of row dicts using the import header"""
    from services.import_service import IMPORT_COLUMNS

    def _make_csv(rows, columns=None):
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=columns or IMPORT_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
        return output.getvalue().encode("utf-8")

    return _make_csv


@pytest.fixture
def csv_row():
    """A valid import row, every cell as text"""
    return {
        "fullName": "Neha Verma",
        "email": "neha.verma@example.com",
        "phone": "9123456780",
        "city": "Mohali",
        "propertyType": "Villa",
        "bhk": "Four",
        "purpose": "Rent",
        "budgetMin": "50000",
        "budgetMax": "80000",
        "timeline": "0-3 months",
        "source": "Referral",
        "status": "Contacted",
        "notes": "Interested in pet-friendly villas",
        "tags": '["high-priority"]',
    }


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Reset the update rate limiter instance before each test"""
    from services import rate_limiter
    rate_limiter._update_limiter_instance = None
    yield
    rate_limiter._update_limiter_instance = None
