# accounting/management/commands/seed_chart_of_accounts.py

from django.core.management.base import BaseCommand

from accounting.services.chart_registry import seed_default_chart


class Command(BaseCommand):
    help = "Create the default chart of accounts (existing codes are left untouched)"

    def handle(self, *args, **options):
        self.stdout.write("Seeding default Chart of Accounts...")

        created, existing = seed_default_chart()

        self.stdout.write(
            self.style.SUCCESS(f"Chart of accounts ready ({created} created, {existing} already present)")
        )
