# accounting/management/commands/open_fiscal_year.py

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from accounting.services.exceptions import PeriodError
from accounting.services.period_service import create_fiscal_year


class Command(BaseCommand):
    help = "Create the twelve monthly fiscal periods of a year (existing months are kept)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--year",
            type=int,
            default=None,
            help="Calendar year (default: current year)",
        )

    def handle(self, *args, **options):
        year = options["year"] or timezone.localdate().year

        try:
            periods = create_fiscal_year(year)
        except PeriodError as exc:
            raise CommandError(str(exc)) from exc

        for period in periods:
            self.stdout.write(f"  {period.name}: {period.start_date} .. {period.end_date} [{period.status}]")

        self.stdout.write(self.style.SUCCESS(f"Fiscal year {year} ready ({len(periods)} periods)"))
