from django.conf import settings
from django.core.management.base import BaseCommand
from django_rq import get_scheduler
from jobs.tasks import mark_overdue_payments

class Command(BaseCommand):
    help = "Apply rq-scheduler cron schedule for the overdue payment sweep"

    def handle(self, *args, **options):
        scheduler = get_scheduler("default")
        # Clear existing sweep jobs to avoid duplicates
        for job in scheduler.get_jobs():
            if job.func_name.endswith("mark_overdue_payments"):
                scheduler.cancel(job)
        cron = settings.OVERDUE_SWEEP_CRON
        scheduler.cron(cron, func=mark_overdue_payments, repeat=None, queue_name="default")
        self.stdout.write(self.style.SUCCESS(f"Scheduled overdue sweep with cron '{cron}'"))
