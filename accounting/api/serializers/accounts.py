# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountSerializer(serializers.ModelSerializer):
    normal_balance = serializers.CharField(read_only=True)

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "account_type",
            "subtype",
            "normal_balance",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "is_active", "normal_balance", "created_at", "updated_at")
