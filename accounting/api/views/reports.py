# PATH: accounting/api/views/reports.py

"""
PATH: accounting/api/views/reports.py

FINANCIAL REPORT API VIEWS (READ-ONLY)

GET /api/accounting/trial-balance/?period=<id>|as_of=YYYY-MM-DD
GET /api/accounting/profit-and-loss/?start=YYYY-MM-DD&end=YYYY-MM-DD
GET /api/accounting/balance-sheet/?as_of=YYYY-MM-DD
GET /api/accounting/account-ledger/<code>/?start=...&end=...
GET /api/accounting/aging/<receivable|payable>/?as_of=...
GET /api/accounting/account-balance/<code>/?as_of=...
GET /api/accounting/reconciliation/

Every report reads one consistent snapshot of the journal. Dates default to
today where omitted.

Permissions:
- statements and ledgers require accounting.view_journalline
- balance cache reconciliation requires accounting.view_accountbalance
"""

from __future__ import annotations

from django.utils import timezone
from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import DOMAIN_ERRORS, domain_error_response, forbidden
from accounting.services.aging_service import PAYABLE, RECEIVABLE, generate_aging_report
from accounting.services.balance_cache import reconcile_balances
from accounting.services.balance_service import get_account_balance, get_account_ledger
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.profit_and_loss_service import generate_profit_and_loss
from accounting.services.trial_balance_service import get_trial_balance

REPORT_PERMISSION = "accounting.view_journalline"


class InvalidQueryParam(ValueError):
    pass


def _date_param(request, name: str, default=None):
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return default
    value = parse_date(raw)
    if value is None:
        raise InvalidQueryParam(f"Invalid {name} (expected YYYY-MM-DD)")
    return value


def _date_parameter(name: str, description: str) -> OpenApiParameter:
    return OpenApiParameter(name=name, type=OpenApiTypes.DATE, required=False, description=description)


class _ReportView(APIView):
    permission_classes = [IsAuthenticated]
    permission_required = REPORT_PERMISSION
    denied_message = "You do not have permission to view financial reports."

    def build(self, request, **kwargs) -> dict:
        raise NotImplementedError

    def get(self, request, **kwargs):
        if not request.user.has_perm(self.permission_required):
            return forbidden(self.denied_message)

        try:
            data = self.build(request, **kwargs)
        except InvalidQueryParam as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="period", type=int, required=False, description="Fiscal period id."),
        _date_parameter("as_of", "Cut-off date when no period is given (default today)."),
    ],
    responses={200: dict},
)
class TrialBalanceView(_ReportView):
    def build(self, request, **kwargs):
        period = request.query_params.get("period")
        if period not in (None, ""):
            try:
                period = int(period)
            except (TypeError, ValueError):
                raise InvalidQueryParam("period must be an integer")
        else:
            period = None
        return get_trial_balance(period, as_of=_date_param(request, "as_of"))


@extend_schema(
    tags=["accounting"],
    parameters=[
        _date_parameter("start", "First day included (default: first day of the current month)."),
        _date_parameter("end", "Last day included (default today)."),
    ],
    responses={200: dict},
)
class ProfitAndLossView(_ReportView):
    def build(self, request, **kwargs):
        today = timezone.localdate()
        start = _date_param(request, "start", today.replace(day=1))
        end = _date_param(request, "end", today)
        if start > end:
            raise InvalidQueryParam("start must be <= end")
        return generate_profit_and_loss(start, end)


@extend_schema(
    tags=["accounting"],
    parameters=[_date_parameter("as_of", "Cut-off date, inclusive (default today).")],
    responses={200: dict},
)
class BalanceSheetView(_ReportView):
    def build(self, request, **kwargs):
        return generate_balance_sheet(_date_param(request, "as_of"))


@extend_schema(
    tags=["accounting"],
    parameters=[
        _date_parameter("start", "First day included (default: first day of the current month)."),
        _date_parameter("end", "Last day included (default today)."),
    ],
    responses={200: dict},
)
class AccountLedgerView(_ReportView):
    def build(self, request, code=None, **kwargs):
        today = timezone.localdate()
        start = _date_param(request, "start", today.replace(day=1))
        end = _date_param(request, "end", today)
        if start > end:
            raise InvalidQueryParam("start must be <= end")
        return get_account_ledger(code, start, end)


@extend_schema(
    tags=["accounting"],
    parameters=[_date_parameter("as_of", "Aging date (default today).")],
    responses={200: dict},
)
class AgingReportView(_ReportView):
    def build(self, request, kind=None, **kwargs):
        if kind not in (RECEIVABLE, PAYABLE):
            raise InvalidQueryParam(f"kind must be '{RECEIVABLE}' or '{PAYABLE}'")
        return generate_aging_report(kind, _date_param(request, "as_of"))


@extend_schema(
    tags=["accounting"],
    parameters=[_date_parameter("as_of", "Cut-off date, inclusive (default: all entries).")],
    responses={200: dict},
)
class AccountBalanceView(_ReportView):
    def build(self, request, code=None, **kwargs):
        as_of = _date_param(request, "as_of")
        balance = get_account_balance(code, as_of)
        return {
            "account_code": code,
            "as_of": as_of.isoformat() if as_of else None,
            "balance": str(balance),
        }


@extend_schema(tags=["accounting"], responses={200: dict})
class ReconciliationView(_ReportView):
    permission_required = "accounting.view_accountbalance"
    denied_message = "You do not have permission to reconcile balances."

    def build(self, request, **kwargs):
        report = reconcile_balances()
        return {
            "accounts_checked": report.accounts_checked,
            "is_clean": report.is_clean,
            "mismatches": [
                {
                    "account_code": m.account_code,
                    "cached_debit": str(m.cached_debit),
                    "cached_credit": str(m.cached_credit),
                    "ledger_debit": str(m.ledger_debit),
                    "ledger_credit": str(m.ledger_credit),
                }
                for m in report.mismatches
            ],
        }
