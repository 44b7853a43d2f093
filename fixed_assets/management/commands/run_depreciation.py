# fixed_assets/management/commands/run_depreciation.py

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError

from accounting.services.exceptions import AccountingServiceError
from fixed_assets.services.asset_service import run_depreciation


def _parse_date(s: str):
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError as exc:
        raise CommandError(f"Invalid date {s!r} (expected YYYY-MM-DD)") from exc


class Command(BaseCommand):
    help = "Charge depreciation for every schedule period ending on or before --period-end."

    def add_arguments(self, parser):
        parser.add_argument(
            "--period-end",
            dest="period_end",
            required=True,
            help="Period end date YYYY-MM-DD (usually a month end)",
        )

    def handle(self, *args, **options):
        period_end = _parse_date(options["period_end"])

        try:
            run = run_depreciation(period_end)
        except AccountingServiceError as exc:
            raise CommandError(str(exc)) from exc

        charges = run.charges.count()
        self.stdout.write(
            self.style.SUCCESS(
                f"Depreciation run {run.pk} for {run.period_end}: {charges} charge(s), total {run.total_amount}"
            )
        )
