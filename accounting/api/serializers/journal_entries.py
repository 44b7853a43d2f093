# accounting/api/serializers/journal_entries.py

"""
======================================================
PATH: accounting/api/serializers/journal_entries.py
======================================================
JOURNAL ENTRY SERIALIZERS

Read side: entries with nested lines (audit-safe, read-only).
Write side (manual entries only):
- DraftEntrySerializer -> CandidateEntry for create/update of drafts
- ReverseEntrySerializer -> reversal date + reason

Balance/period/account checks are NOT repeated here; the entry validator is
the single authority and its errors map to 400 responses.
"""

from rest_framework import serializers

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.entry_validator import CandidateEntry, CandidateLine


class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = JournalLine
        fields = (
            "id",
            "entry",
            "line_no",
            "account",
            "account_code",
            "account_name",
            "debit",
            "credit",
            "description",
            "open_item",
        )
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)
    period_name = serializers.CharField(source="period.name", read_only=True, default=None)
    reverses_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "entry_date",
            "period",
            "period_name",
            "description",
            "reference",
            "status",
            "source_type",
            "source_id",
            "counterparty",
            "due_date",
            "reverses_id",
            "created_by",
            "created_at",
            "posted_at",
            "lines",
        )
        read_only_fields = fields


class DraftLineSerializer(serializers.Serializer):
    account_code = serializers.CharField(max_length=20)
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    open_item = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)


class DraftEntrySerializer(serializers.Serializer):
    entry_date = serializers.DateField()
    description = serializers.CharField()
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    counterparty = serializers.CharField(required=False, allow_blank=True, default="")
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    lines = DraftLineSerializer(many=True)

    def to_candidate(self) -> CandidateEntry:
        data = self.validated_data
        return CandidateEntry(
            entry_date=data["entry_date"],
            description=data["description"],
            reference=data.get("reference", ""),
            counterparty=data.get("counterparty", ""),
            due_date=data.get("due_date"),
            lines=tuple(
                CandidateLine(
                    account_code=line["account_code"],
                    debit=line.get("debit"),
                    credit=line.get("credit"),
                    description=line.get("description", ""),
                    open_item=line.get("open_item", ""),
                )
                for line in data["lines"]
            ),
        )


class ReverseEntrySerializer(serializers.Serializer):
    reversal_date = serializers.DateField(required=False, allow_null=True, default=None)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)
