from django.core.management.base import BaseCommand

from invoices.services import cleanup_invoices


class Command(BaseCommand):
    help = "Delete period invoices without orders and recompute invoice amounts."

    def handle(self, *args, **options):
        result = cleanup_invoices()
        for number in result['deleted']:
            self.stdout.write(f"Deleted {number}")
        for number in result['updated']:
            self.stdout.write(f"Updated {number}")
        self.stdout.write(self.style.SUCCESS(
            f"Cleanup done: {len(result['deleted'])} deleted, {len(result['updated'])} updated."
        ))
