"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: Ledger core schema

Creates:
- Account (chart of accounts)
- FiscalPeriod
- JournalEntry (header, idempotent on source document)
- JournalLine (atomic debit/credit)
- AccountBalance (materialized balance cache)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "subtype",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Report grouping (e.g. receivable, cost_of_goods, operating)",
                        max_length=32,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["account_type"], name="account_type_idx"),
                    models.Index(fields=["is_active"], name="account_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=~models.Q(code=""), name="chk_account_code_not_blank"),
                    models.CheckConstraint(condition=~models.Q(name=""), name="chk_account_name_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FiscalPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, default="", max_length=64)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("open", "Open"), ("closed", "Closed")],
                        db_index=True,
                        default="open",
                        max_length=8,
                    ),
                ),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Fiscal Period",
                "verbose_name_plural": "Fiscal Periods",
                "ordering": ["start_date"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="fiscal_period_range_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("start_date", "end_date"),
                        name="uniq_fiscal_period_start_end",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="chk_fiscal_period_end_gte_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_date", models.DateField(help_text="Accounting effective date")),
                ("description", models.TextField(help_text="Narrative description of the journal entry")),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Free-text reference tag (document number, memo)",
                        max_length=100,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("posted", "Posted"), ("void", "Void")],
                        default="draft",
                        max_length=8,
                    ),
                ),
                ("source_type", models.CharField(blank=True, max_length=50, null=True)),
                ("source_id", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "counterparty",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Customer/vendor name for receivable/payable open items",
                        max_length=150,
                    ),
                ),
                (
                    "due_date",
                    models.DateField(
                        blank=True,
                        help_text="Due date of the open item created by this entry (aging)",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                (
                    "period",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                        to="accounting.fiscalperiod",
                    ),
                ),
                (
                    "reverses",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversals",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="journal_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-entry_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["entry_date"], name="journal_entry_date_idx"),
                    models.Index(fields=["status"], name="journal_status_idx"),
                    models.Index(fields=["status", "entry_date"], name="journal_status_date_idx"),
                    models.Index(fields=["source_type", "source_id"], name="journal_source_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("source_type__isnull", False), ("source_id__isnull", False)),
                        fields=("source_type", "source_id"),
                        name="uniq_journal_source_document",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(reverses__isnull=False),
                        fields=("reverses",),
                        name="uniq_journal_single_reversal",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(status__in=["draft", "posted", "void"]),
                        name="chk_journal_status_valid",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("source_id__isnull", True), ("source_type__isnull", True)),
                            models.Q(("source_id__isnull", False), ("source_type__isnull", False)),
                            _connector="OR",
                        ),
                        name="chk_journal_source_pair",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField(default=1)),
                ("entry_type", models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "open_item",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Receivable/payable item this line opens or settles (e.g. invoice:INV-1)",
                        max_length=100,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lines",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Line",
                "verbose_name_plural": "Journal Lines",
                "ordering": ["entry_id", "line_no", "id"],
                "indexes": [
                    models.Index(fields=["account", "entry_type"], name="jline_account_type_idx"),
                    models.Index(fields=["entry", "line_no"], name="jline_entry_line_no_idx"),
                    models.Index(fields=["account", "open_item"], name="jline_account_open_item_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountBalance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("debit_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                ("credit_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="balance_cache",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account Balance (cache)",
                "verbose_name_plural": "Account Balances (cache)",
                "ordering": ["account__code"],
            },
        ),
    ]
