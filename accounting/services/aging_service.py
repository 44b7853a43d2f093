# accounting/services/aging_service.py

"""
AR / AP AGING

Open items are read straight from the control account (AR or AP):
- lines are grouped by open_item ("invoice:<id>", "bill:<id>")
- remaining = increases - decreases on the control account's normal side
- only items with a positive remaining balance are reported
- due date and counterparty come from the entry that opened the item
  (the earliest increasing line's entry)

Buckets by days past due at `as_of`:
current (not yet due) | 1_30 | 31_60 | 61_90 | over_90
"""

from __future__ import annotations

from datetime import date

from django.utils import timezone

from accounting.models.journal_line import JournalLine
from accounting.services.balance_service import ledger_lines, report_snapshot
from accounting.services.chart_registry import code_for
from accounting.services.money import from_minor, to_minor

RECEIVABLE = "receivable"
PAYABLE = "payable"

BUCKETS = ("current", "1_30", "31_60", "61_90", "over_90")


def bucket_for(days_past_due: int) -> str:
    if days_past_due <= 0:
        return "current"
    if days_past_due <= 30:
        return "1_30"
    if days_past_due <= 60:
        return "31_60"
    if days_past_due <= 90:
        return "61_90"
    return "over_90"


def _major(minor: int) -> float:
    return float(from_minor(minor))


def generate_aging_report(kind: str, as_of: date | None = None) -> dict:
    if kind not in (RECEIVABLE, PAYABLE):
        raise ValueError(f"kind must be '{RECEIVABLE}' or '{PAYABLE}'")

    cutoff = as_of or timezone.localdate()
    control_code = code_for("AR") if kind == RECEIVABLE else code_for("AP")
    increasing_side = JournalLine.DEBIT if kind == RECEIVABLE else JournalLine.CREDIT

    with report_snapshot():
        lines = (
            ledger_lines(end=cutoff)
            .filter(account__code=control_code)
            .exclude(open_item="")
            .select_related("entry")
            .order_by("entry__entry_date", "entry_id", "line_no")
        )

        items: dict[str, dict] = {}
        for line in lines:
            item = items.get(line.open_item)
            amount = to_minor(line.amount)
            is_increase = line.entry_type == increasing_side

            if item is None:
                item = {
                    "open_item": line.open_item,
                    "counterparty": "",
                    "document_date": None,
                    "due_date": None,
                    "balance_minor": 0,
                }
                items[line.open_item] = item

            if is_increase and item["document_date"] is None:
                entry = line.entry
                item["counterparty"] = entry.counterparty
                item["document_date"] = entry.entry_date
                item["due_date"] = entry.due_date or entry.entry_date

            item["balance_minor"] += amount if is_increase else -amount

    rows = []
    totals = {bucket: 0 for bucket in BUCKETS}
    by_counterparty: dict[str, dict] = {}

    for item in items.values():
        balance = item["balance_minor"]
        if balance <= 0:
            continue

        due = item["due_date"] or cutoff
        days = (cutoff - due).days
        bucket = bucket_for(days)

        rows.append(
            {
                "open_item": item["open_item"],
                "counterparty": item["counterparty"],
                "document_date": item["document_date"].isoformat() if item["document_date"] else None,
                "due_date": due.isoformat(),
                "days_past_due": max(days, 0),
                "bucket": bucket,
                "balance": _major(balance),
                "balance_minor": balance,
            }
        )
        totals[bucket] += balance

        party = item["counterparty"] or "(unknown)"
        summary = by_counterparty.setdefault(
            party, {"counterparty": party, **{b: 0 for b in BUCKETS}, "total": 0}
        )
        summary[bucket] += balance
        summary["total"] += balance

    rows.sort(key=lambda r: (r["due_date"], r["open_item"]))

    return {
        "kind": kind,
        "as_of": cutoff.isoformat(),
        "control_account": control_code,
        "items": rows,
        "by_counterparty": [
            {
                "counterparty": s["counterparty"],
                **{f"{b}_minor": s[b] for b in BUCKETS},
                **{b: _major(s[b]) for b in BUCKETS},
                "total": _major(s["total"]),
                "total_minor": s["total"],
            }
            for s in sorted(by_counterparty.values(), key=lambda s: s["counterparty"])
        ],
        "totals": {
            **{b: _major(totals[b]) for b in BUCKETS},
            **{f"{b}_minor": totals[b] for b in BUCKETS},
            "total": _major(sum(totals.values())),
            "total_minor": sum(totals.values()),
        },
    }
