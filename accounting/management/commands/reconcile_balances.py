# accounting/management/commands/reconcile_balances.py

from django.core.management.base import BaseCommand, CommandError

from accounting.services.balance_cache import rebuild_balance_cache, reconcile_balances


class Command(BaseCommand):
    help = "Compare the account balance cache with the journal; optionally rebuild it."

    def add_arguments(self, parser):
        parser.add_argument(
            "--rebuild",
            action="store_true",
            help="Overwrite the cache from the journal when mismatches are found",
        )

    def handle(self, *args, **options):
        report = reconcile_balances()

        self.stdout.write(f"Accounts checked: {report.accounts_checked}")

        if report.is_clean:
            self.stdout.write(self.style.SUCCESS("Balance cache matches the journal."))
            return

        for m in report.mismatches:
            self.stdout.write(
                self.style.WARNING(
                    f"  {m.account_code}: cache Dr {m.cached_debit} / Cr {m.cached_credit} "
                    f"vs journal Dr {m.ledger_debit} / Cr {m.ledger_credit}"
                )
            )

        if not options["rebuild"]:
            raise CommandError(f"{len(report.mismatches)} account(s) out of sync (run with --rebuild to fix)")

        written = rebuild_balance_cache()
        self.stdout.write(self.style.SUCCESS(f"Balance cache rebuilt ({written} accounts)."))
