# accounting/tests/test_api.py

from __future__ import annotations

from datetime import date

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from accounting.services.period_service import close_period, get_period_for_date
from accounting.tests.utils import post_simple, seed_ledger, user_with_perms

LEDGER_PERMS = (
    "accounting.view_journalentry",
    "accounting.add_journalentry",
    "accounting.change_journalentry",
    "accounting.delete_journalentry",
    "accounting.view_journalline",
)


def _draft_payload(amount="250.00", debit_code="6100", credit_code="1010"):
    return {
        "entry_date": "2024-02-10",
        "description": "Manual accrual",
        "lines": [
            {"account_code": debit_code, "debit": amount},
            {"account_code": credit_code, "credit": amount},
        ],
    }


class JournalEntryApiTests(TestCase):
    """
    GUARANTEES:
    - Manual entries go draft -> posted -> reversed through the API
    - Validator failures come back as 400 with an error kind
    - Model permissions gate every action
    """

    def setUp(self):
        seed_ledger(2024)
        self.client = APIClient()
        self.user = user_with_perms("accountant", *LEDGER_PERMS)
        self.client.force_authenticate(user=self.user)

    def test_unauthenticated_request_is_rejected(self):
        res = APIClient().get(reverse("journal-entry-list"))
        self.assertEqual(res.status_code, 401)

    def test_draft_post_reverse_flow(self):
        res = self.client.post(reverse("journal-entry-list"), _draft_payload(), format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "draft")
        entry_id = res.data["id"]

        res = self.client.post(reverse("journal-entry-post-entry", args=[entry_id]))
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "posted")

        res = self.client.post(
            reverse("journal-entry-reverse", args=[entry_id]),
            {"reversal_date": "2024-02-12", "reason": "wrong month"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["reverses_id"], entry_id)
        self.assertEqual(JournalEntry.objects.get(pk=entry_id).status, JournalEntry.Status.VOID)

        res = self.client.post(reverse("journal-entry-reverse", args=[entry_id]), {}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["kind"], "already-reversed")

    def test_unbalanced_draft_cannot_post(self):
        payload = _draft_payload()
        payload["lines"][1]["credit"] = "200.00"
        entry_id = self.client.post(reverse("journal-entry-list"), payload, format="json").data["id"]

        res = self.client.post(reverse("journal-entry-post-entry", args=[entry_id]))

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["kind"], "unbalanced")

    def test_unknown_entry_is_not_found(self):
        res = self.client.post(
            reverse("journal-entry-reverse", args=[999999]),
            {"reversal_date": "2024-02-12"},
            format="json",
        )
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["kind"], "not-found")

        res = self.client.post(reverse("journal-entry-post-entry", args=[999999]))
        self.assertEqual(res.status_code, 404)

    def test_draft_with_unknown_account(self):
        res = self.client.post(reverse("journal-entry-list"), _draft_payload(debit_code="9999"), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["kind"], "inactive-account")
        self.assertFalse(JournalEntry.objects.exists())

    def test_update_and_delete_draft(self):
        entry_id = self.client.post(reverse("journal-entry-list"), _draft_payload(), format="json").data["id"]

        res = self.client.put(
            reverse("journal-entry-detail", args=[entry_id]), _draft_payload("300.00"), format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["lines"][0]["debit"], "300.00")

        res = self.client.delete(reverse("journal-entry-detail", args=[entry_id]))
        self.assertEqual(res.status_code, 204)
        self.assertFalse(JournalEntry.objects.filter(pk=entry_id).exists())

    def test_posted_entry_cannot_be_deleted(self):
        entry = post_simple(date(2024, 2, 1), "6100", "1010", "10.00")

        res = self.client.delete(reverse("journal-entry-detail", args=[entry.id]))

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["kind"], "not-posted")

    def test_list_filters_by_status(self):
        post_simple(date(2024, 2, 1), "6100", "1010", "10.00")
        self.client.post(reverse("journal-entry-list"), _draft_payload(), format="json")

        res = self.client.get(reverse("journal-entry-list"), {"status": "posted"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["status"], "posted")

    def test_read_only_user_cannot_create(self):
        reader = user_with_perms("auditor", "accounting.view_journalentry")
        client = APIClient()
        client.force_authenticate(user=reader)

        self.assertEqual(client.get(reverse("journal-entry-list")).status_code, 200)
        res = client.post(reverse("journal-entry-list"), _draft_payload(), format="json")
        self.assertEqual(res.status_code, 403)


class DocumentApiTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        self.client = APIClient()
        self.client.force_authenticate(user=user_with_perms("clerk", *LEDGER_PERMS))

    def _issue(self, **overrides):
        payload = {
            "invoice_id": "INV-500",
            "invoice_date": "2024-03-15",
            "customer_name": "Acme Ltd",
            "tax_rate": "0.0625",
            "lines": [{"amount": "1000.00"}],
        }
        payload.update(overrides)
        return self.client.post(reverse("invoice-issue"), payload, format="json")

    def test_issue_invoice_then_replay(self):
        res = self._issue()
        self.assertEqual(res.status_code, 201, res.data)
        codes = {line["account_code"]: line for line in res.data["lines"]}
        self.assertEqual(codes["1200"]["debit"], "1062.50")
        self.assertEqual(codes["2200"]["credit"], "62.50")

        replay = self._issue()
        self.assertEqual(replay.status_code, 200)
        self.assertEqual(replay.data["id"], res.data["id"])

    def test_invoice_in_closed_period(self):
        close_period(get_period_for_date(date(2024, 3, 15)).id)

        res = self._issue()

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["kind"], "closed-period")

    def test_void_invoice_and_pay_void_invoice(self):
        self._issue()

        res = self.client.post(
            reverse("invoice-void", args=["INV-500"]), {"void_date": "2024-03-20"}, format="json"
        )
        self.assertEqual(res.status_code, 201, res.data)

        res = self.client.post(
            reverse("invoice-payment"),
            {"payment_id": "P-1", "invoice_id": "INV-500", "payment_date": "2024-03-25", "amount": "10.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_expense_and_bill_flow(self):
        res = self.client.post(
            reverse("expenses"),
            {
                "expense_id": "EXP-1",
                "expense_date": "2024-03-02",
                "amount": "40.00",
                "expense_account_code": "6200",
                "payment_account_code": "1000",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        res = self.client.post(
            reverse("bill-approve"),
            {
                "bill_id": "B-1",
                "bill_date": "2024-03-03",
                "vendor_name": "Supplier Co",
                "lines": [{"quantity": 1, "unit_cost": "120.00", "expense_account_code": "6300"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        res = self.client.post(
            reverse("bill-payment"),
            {"payment_id": "BP-1", "bill_id": "B-1", "payment_date": "2024-03-30", "amount": "120.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

    def test_document_posting_requires_add_permission(self):
        client = APIClient()
        client.force_authenticate(user=user_with_perms("viewer", "accounting.view_journalentry"))

        res = client.post(reverse("expenses"), {}, format="json")

        self.assertEqual(res.status_code, 403)


class ChartAndPeriodApiTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        self.client = APIClient()
        self.client.force_authenticate(
            user=user_with_perms(
                "controller",
                "accounting.view_account",
                "accounting.add_account",
                "accounting.change_account",
                "accounting.view_fiscalperiod",
                "accounting.add_fiscalperiod",
                "accounting.change_fiscalperiod",
            )
        )

    def test_create_and_deactivate_account(self):
        res = self.client.post(
            reverse("accounts"),
            {"code": "6400", "name": "Travel", "account_type": "EXPENSE", "subtype": "operating"},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["normal_balance"], "DEBIT")

        res = self.client.post(reverse("account-deactivate", args=["6400"]))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_active"])

        codes = [row["code"] for row in self.client.get(reverse("accounts")).data]
        self.assertNotIn("6400", codes)
        codes = [row["code"] for row in self.client.get(reverse("accounts"), {"include_inactive": "1"}).data]
        self.assertIn("6400", codes)

    def test_unknown_account_status_change_is_404(self):
        res = self.client.post(reverse("account-deactivate", args=["0000"]))
        self.assertEqual(res.status_code, 404)

    def test_fiscal_year_close_and_reopen(self):
        res = self.client.post(reverse("fiscal-year"), {"year": 2025}, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(len(res.data), 12)

        period_id = res.data[0]["id"]
        res = self.client.post(reverse("fiscal-period-close", args=[period_id]), {}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "closed")

        res = self.client.post(reverse("fiscal-period-close", args=[period_id]), {}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.post(reverse("fiscal-period-reopen", args=[period_id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "open")

    def test_overlapping_period_is_rejected(self):
        res = self.client.post(
            reverse("fiscal-periods"),
            {"start_date": "2024-06-15", "end_date": "2024-07-15"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)


class ReportApiTests(TestCase):
    def setUp(self):
        seed_ledger(2024)
        post_simple(date(2024, 1, 2), "1010", "3000", "5000.00")
        post_simple(date(2024, 1, 9), "6100", "1010", "750.00")
        self.client = APIClient()
        self.client.force_authenticate(
            user=user_with_perms("analyst", "accounting.view_journalline", "accounting.view_accountbalance")
        )

    def test_trial_balance(self):
        res = self.client.get(reverse("trial-balance"), {"as_of": "2024-01-31"})

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["totals"]["balanced"])
        self.assertEqual(res.data["totals"]["debit_minor"], 500000)

    def test_profit_and_loss_and_balance_sheet(self):
        pl = self.client.get(reverse("profit-and-loss"), {"start": "2024-01-01", "end": "2024-01-31"})
        self.assertEqual(pl.status_code, 200)
        self.assertEqual(pl.data["net_income_minor"], -75000)

        bs = self.client.get(reverse("balance-sheet"), {"as_of": "2024-01-31"})
        self.assertEqual(bs.status_code, 200)
        self.assertTrue(bs.data["is_balanced"])

    def test_ledger_and_balance(self):
        ledger = self.client.get(
            reverse("account-ledger", args=["1010"]), {"start": "2024-01-01", "end": "2024-01-31"}
        )
        self.assertEqual(ledger.status_code, 200)
        self.assertEqual(ledger.data["closing_balance_minor"], 425000)

        balance = self.client.get(reverse("account-balance", args=["1010"]))
        self.assertEqual(balance.data["balance"], "4250.00")

        missing = self.client.get(reverse("account-balance", args=["0000"]))
        self.assertEqual(missing.status_code, 404)

    def test_bad_query_params(self):
        self.assertEqual(self.client.get(reverse("balance-sheet"), {"as_of": "31/01/2024"}).status_code, 400)
        self.assertEqual(self.client.get(reverse("aging", args=["stock"])).status_code, 400)
        self.assertEqual(self.client.get(reverse("trial-balance"), {"period": "x"}).status_code, 400)

    def test_aging_and_reconciliation(self):
        self.assertEqual(self.client.get(reverse("aging", args=["receivable"])).status_code, 200)

        res = self.client.get(reverse("reconciliation"))
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["is_clean"])

    def test_reports_require_permission(self):
        client = APIClient()
        client.force_authenticate(user=user_with_perms("nobody"))

        self.assertEqual(client.get(reverse("trial-balance")).status_code, 403)
