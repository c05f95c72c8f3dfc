from django.core.management.base import BaseCommand
from django.utils.dateparse import parse_date

from financials.ledger import mark_overdue


class Command(BaseCommand):
    help = "Mark PENDING payments for past months as OVERDUE"

    def add_arguments(self, parser):
        parser.add_argument("--as-of", help="Reference date (YYYY-MM-DD), defaults to today")

    def handle(self, *args, **options):
        today = None
        if options.get("as_of"):
            today = parse_date(options["as_of"])
            if today is None:
                self.stderr.write(self.style.ERROR("Invalid --as-of date"))
                return
        count = mark_overdue(today)
        self.stdout.write(self.style.SUCCESS(f"Marked {count} payments overdue"))
