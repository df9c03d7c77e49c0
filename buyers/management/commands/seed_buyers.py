"""
Django management command to create sample buyers for local development
"""
from django.core.management.base import BaseCommand

from authentication.identity import get_or_create_identity
from authentication.models import UserIdentity
from services.buyer_service import create_buyer

SAMPLE_BUYERS = [
    {
        "fullName": "Aman Sharma",
        "email": "aman.sharma@example.com",
        "phone": "9876543210",
        "city": "Chandigarh",
        "propertyType": "Apartment",
        "bhk": "Two",
        "purpose": "Buy",
        "budgetMin": 3000000,
        "budgetMax": 5000000,
        "timeline": "3-6 months",
        "source": "Website",
        "status": "New",
        "notes": "Looking for a ready-to-move-in property",
        "tags": ["premium", "urgent"],
    },
    {
        "fullName": "Neha Verma",
        "email": "neha.verma@example.com",
        "phone": "9123456780",
        "city": "Mohali",
        "propertyType": "Villa",
        "bhk": "Four",
        "purpose": "Rent",
        "budgetMin": 50000,
        "budgetMax": 80000,
        "timeline": "0-3 months",
        "source": "Referral",
        "status": "Contacted",
        "notes": "Interested in pet-friendly villas",
        "tags": ["high-priority"],
    },
    {
        "fullName": "Rohit Mehta",
        "email": "rohit.mehta@example.com",
        "phone": "9012345678",
        "city": "Zirakpur",
        "propertyType": "Plot",
        "purpose": "Buy",
        "budgetMin": 1500000,
        "budgetMax": 2500000,
        "timeline": ">6 months",
        "source": "Walk-in",
        "status": "Visited",
        "notes": "Wants land for personal use",
        "tags": ["land"],
    },
    {
        "fullName": "Priya Kapoor",
        "email": "priya.kapoor@example.com",
        "phone": "9988776655",
        "city": "Panchkula",
        "propertyType": "Office",
        "purpose": "Rent",
        "budgetMin": 100000,
        "budgetMax": 150000,
        "timeline": "Exploring",
        "source": "Call",
        "status": "Qualified",
        "tags": [],
    },
]


class Command(BaseCommand):
    help = "Creates sample buyers owned by the given identity"

    def add_arguments(self, parser):
        parser.add_argument("--owner", required=True, help="Owner email (created if missing)")
        parser.add_argument(
            "--admin",
            action="store_true",
            help="Create the owner with the admin role if it does not exist yet",
        )

    def handle(self, *args, **options):
        role = UserIdentity.Role.ADMIN if options["admin"] else UserIdentity.Role.USER
        owner = get_or_create_identity(options["owner"], role=role)

        for data in SAMPLE_BUYERS:
            buyer = create_buyer(data, owner.email)
            self.stdout.write(f"  {buyer.full_name} ({buyer.property_type}, {buyer.city})")

        self.stdout.write(
            self.style.SUCCESS(f"✓ Created {len(SAMPLE_BUYERS)} buyers for {owner.email}")
        )
