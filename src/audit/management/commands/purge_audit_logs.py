"""Delete audit log entries past the retention window."""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from audit.services import purge_old_entries


class Command(BaseCommand):
    help = "Delete audit log entries older than the retention window"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help=(
                "Retention window in days "
                "(default: AUDIT_LOG_RETENTION_DAYS setting)"
            ),
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = getattr(settings, "AUDIT_LOG_RETENTION_DAYS", 90)
        try:
            deleted = purge_old_entries(retention_days=days)
        except ValueError as e:
            raise CommandError(str(e)) from e
        self.stdout.write(
            f"Deleted {deleted} audit log entries older than {days} days"
        )
