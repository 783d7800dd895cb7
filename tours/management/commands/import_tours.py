import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.errors import AppError
from core.storage import save_instance
from tours.models import Tour
from tours.views import apply_body

DEFAULT_FILE = Path(settings.BASE_DIR) / "dev-data" / "tours-simple.json"


class Command(BaseCommand):
    help = "Load tours from a JSON file of camelCase records, or delete every tour."

    def add_arguments(self, parser):
        parser.add_argument("--file", default=str(DEFAULT_FILE), help="JSON file to import")
        parser.add_argument(
            "--delete",
            action="store_true",
            help="Delete all tours instead of importing",
        )

    def handle(self, *args, **options):
        if options["delete"]:
            deleted, _ = Tour.objects.all().delete()
            self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} tours"))
            return

        path = Path(options["file"])
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CommandError(f"Cannot read {path}: {exc}")
        if not isinstance(records, list):
            raise CommandError(f"{path} must contain a JSON list of tours")

        # all or nothing
        with transaction.atomic():
            for index, record in enumerate(records):
                if not isinstance(record, dict):
                    raise CommandError(f"Record {index}: not an object")
                tour = apply_body(Tour(), record)
                try:
                    save_instance(tour)
                except AppError as exc:
                    raise CommandError(f"Record {index}: {exc.message}")

        self.stdout.write(self.style.SUCCESS(f"Imported {len(records)} tours from {path}"))
