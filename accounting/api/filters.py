# accounting/api/filters.py

import django_filters

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine


class JournalEntryFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="entry_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="entry_date", lookup_expr="lte")
    account = django_filters.CharFilter(field_name="lines__account__code", distinct=True)

    class Meta:
        model = JournalEntry
        fields = ("status", "source_type", "source_id", "period", "counterparty")


class JournalLineFilter(django_filters.FilterSet):
    account = django_filters.CharFilter(field_name="account__code")
    date_from = django_filters.DateFilter(field_name="entry__entry_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="entry__entry_date", lookup_expr="lte")
    status = django_filters.CharFilter(field_name="entry__status")

    class Meta:
        model = JournalLine
        fields = ("entry", "entry_type", "open_item")
