"""Refresh stored depreciation values for every asset."""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from assets.services.lifecycle import recalculate_all_depreciation


class Command(BaseCommand):
    help = "Recalculate accumulated depreciation and residual value"

    def add_arguments(self, parser):
        parser.add_argument(
            "--as-of",
            default=None,
            help="Valuation date as YYYY-MM-DD (default: today)",
        )

    def handle(self, *args, **options):
        as_of = options["as_of"]
        if as_of is not None:
            try:
                as_of = date.fromisoformat(as_of)
            except ValueError as e:
                raise CommandError(f"Invalid --as-of date: {as_of}") from e
        count = recalculate_all_depreciation(as_of=as_of)
        self.stdout.write(f"Recalculated depreciation for {count} assets")
