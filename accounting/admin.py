# accounting/admin.py

from django.contrib import admin

from accounting.models import Account, AccountBalance, FiscalPeriod, JournalEntry, JournalLine


class ReadOnlyAdminMixin:
    """
    Ledger rows only change through the posting services.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "subtype",
        "is_active",
    )
    list_filter = ("account_type", "subtype", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("code", "name", "account_type", "subtype"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None):
        # Deactivate instead.
        return False


# ============================================================
# FISCAL PERIOD
# ============================================================


@admin.register(FiscalPeriod)
class FiscalPeriodAdmin(admin.ModelAdmin):
    list_display = ("name", "start_date", "end_date", "status", "closed_at")
    list_filter = ("status",)
    ordering = ("-start_date",)
    # Close/reopen go through period_service (closing entry, draft checks).
    readonly_fields = ("status", "closed_at", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


class JournalLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = JournalLine
    extra = 0
    fields = ("line_no", "account", "entry_type", "amount", "description", "open_item")
    readonly_fields = fields
    ordering = ("line_no",)


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "entry_date",
        "description",
        "reference",
        "status",
        "source_type",
        "source_id",
        "posted_at",
    )
    list_filter = ("status", "source_type", "entry_date")
    search_fields = ("description", "reference", "source_id", "counterparty")
    ordering = ("-entry_date", "-id")
    inlines = (JournalLineInline,)

    readonly_fields = (
        "entry_date",
        "period",
        "description",
        "reference",
        "status",
        "source_type",
        "source_id",
        "counterparty",
        "due_date",
        "reverses",
        "created_by",
        "created_at",
        "posted_at",
    )


# ============================================================
# JOURNAL LINE (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(JournalLine)
class JournalLineAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "entry",
        "line_no",
        "account",
        "entry_type",
        "amount",
        "open_item",
    )
    list_filter = ("entry_type", "account")
    search_fields = ("entry__reference", "account__code", "open_item")
    ordering = ("-entry_id", "line_no")

    readonly_fields = (
        "entry",
        "line_no",
        "account",
        "entry_type",
        "amount",
        "description",
        "open_item",
        "created_at",
    )


# ============================================================
# BALANCE CACHE (rebuild via `manage.py reconcile_balances --rebuild`)
# ============================================================


@admin.register(AccountBalance)
class AccountBalanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("account", "debit_total", "credit_total", "updated_at")
    search_fields = ("account__code", "account__name")
    ordering = ("account__code",)
