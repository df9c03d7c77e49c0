from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from services.exceptions import BuyerServiceError
from services.import_service import import_buyers


class Command(BaseCommand):
    help = "Import buyers from a CSV file on behalf of an owner"

    def add_arguments(self, parser):
        parser.add_argument("csv_path", help="CSV file with a header row of buyer fields")
        parser.add_argument(
            "--owner",
            required=True,
            help="Email of the identity that will own the imported buyers",
        )

    def handle(self, *args, **options):
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file not found at {csv_path}")

        try:
            result = import_buyers(csv_path.read_bytes(), options["owner"])
        except BuyerServiceError as exc:
            for error in exc.errors or []:
                self.stdout.write(self.style.ERROR(f"Row {error['row']}: {error['message']}"))
            raise CommandError(exc.message)

        for error in result.errors:
            self.stdout.write(self.style.WARNING(f"Row {error['row']}: {error['message']}"))

        self.stdout.write(
            self.style.SUCCESS(
                f"Import complete: {result.imported} created, {len(result.errors)} errors"
            )
        )
