# accounting/api/serializers/documents.py

"""
======================================================
PATH: accounting/api/serializers/documents.py
======================================================
SOURCE DOCUMENT SERIALIZERS (WRITE-ONLY)

Each serializer validates request shape and builds the typed snapshot the
posting services accept (to_snapshot()).

Tax:
- a line may carry tax_amount directly
- or the document may carry tax_rate (e.g. 0.075); tax_amount is then
  amount * rate, rounded to 2dp, for lines that did not send one
- the ledger never decides which rate applies

Products:
- product is optional; when set its inventory_category is copied onto the
  snapshot line so physical-stock lines move inventory
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.adapters import (
    BillLine,
    BillPaymentSnapshot,
    BillSnapshot,
    ExpenseSnapshot,
    InvoiceLine,
    InvoicePaymentSnapshot,
    InvoiceSnapshot,
)
from accounting.services.money import ZERO, money
from inventory.models import Product

TAX_RATE_FIELD = dict(max_digits=6, decimal_places=4, min_value=Decimal("0"), required=False, allow_null=True)


def _line_tax(line: dict, base: Decimal, tax_rate) -> Decimal:
    if line.get("tax_amount") is not None:
        return line["tax_amount"]
    if tax_rate:
        return money(base * tax_rate)
    return ZERO


def _product_fields(line: dict) -> dict:
    product = line.get("product")
    if product is None:
        return {"product_id": None, "inventory_category": ""}
    return {"product_id": str(product.id), "inventory_category": product.inventory_category}


class InvoiceLineSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0"))
    tax_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    revenue_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), required=False, allow_null=True
    )
    quantity = serializers.IntegerField(required=False, min_value=0, default=0)


class InvoiceIssueSerializer(serializers.Serializer):
    invoice_id = serializers.CharField(max_length=100)
    invoice_date = serializers.DateField()
    customer_name = serializers.CharField(max_length=255)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    number = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)
    tax_rate = serializers.DecimalField(**TAX_RATE_FIELD)
    lines = InvoiceLineSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        due = attrs.get("due_date")
        if due is not None and due < attrs["invoice_date"]:
            raise serializers.ValidationError({"due_date": "due_date cannot be before invoice_date"})
        return attrs

    def to_snapshot(self) -> InvoiceSnapshot:
        data = self.validated_data
        tax_rate = data.get("tax_rate")
        return InvoiceSnapshot(
            invoice_id=data["invoice_id"],
            invoice_date=data["invoice_date"],
            customer_name=data["customer_name"],
            due_date=data.get("due_date"),
            number=data.get("number", ""),
            lines=tuple(
                InvoiceLine(
                    amount=line["amount"],
                    tax_amount=_line_tax(line, line["amount"], tax_rate),
                    revenue_account_code=line.get("revenue_account_code", ""),
                    description=line.get("description", ""),
                    quantity=line.get("quantity", 0),
                    **_product_fields(line),
                )
                for line in data["lines"]
            ),
        )


class InvoicePaymentSerializer(serializers.Serializer):
    payment_id = serializers.CharField(max_length=100)
    invoice_id = serializers.CharField(max_length=100)
    payment_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    deposit_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)

    def to_snapshot(self) -> InvoicePaymentSnapshot:
        return InvoicePaymentSnapshot(**self.validated_data)


class BillLineSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    tax_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), required=False, allow_null=True
    )
    expense_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


class BillApproveSerializer(serializers.Serializer):
    bill_id = serializers.CharField(max_length=100)
    bill_date = serializers.DateField()
    vendor_name = serializers.CharField(max_length=255)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    number = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)
    tax_rate = serializers.DecimalField(**TAX_RATE_FIELD)
    lines = BillLineSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        due = attrs.get("due_date")
        if due is not None and due < attrs["bill_date"]:
            raise serializers.ValidationError({"due_date": "due_date cannot be before bill_date"})
        return attrs

    def to_snapshot(self) -> BillSnapshot:
        data = self.validated_data
        tax_rate = data.get("tax_rate")
        return BillSnapshot(
            bill_id=data["bill_id"],
            bill_date=data["bill_date"],
            vendor_name=data["vendor_name"],
            due_date=data.get("due_date"),
            number=data.get("number", ""),
            lines=tuple(
                BillLine(
                    quantity=line["quantity"],
                    unit_cost=line["unit_cost"],
                    tax_amount=_line_tax(line, money(line["quantity"] * line["unit_cost"]), tax_rate),
                    expense_account_code=line.get("expense_account_code", ""),
                    description=line.get("description", ""),
                    **_product_fields(line),
                )
                for line in data["lines"]
            ),
        )


class BillPaymentSerializer(serializers.Serializer):
    payment_id = serializers.CharField(max_length=100)
    bill_id = serializers.CharField(max_length=100)
    payment_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    pay_from_account_code = serializers.CharField(required=False, allow_blank=True, default="")
    vendor_name = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)

    def to_snapshot(self) -> BillPaymentSnapshot:
        return BillPaymentSnapshot(**self.validated_data)


class ExpenseSerializer(serializers.Serializer):
    expense_id = serializers.CharField(max_length=100)
    expense_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    tax_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    tax_rate = serializers.DecimalField(**TAX_RATE_FIELD)
    expense_account_code = serializers.CharField(max_length=20)
    payment_account_code = serializers.CharField(max_length=20)
    payee = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def to_snapshot(self) -> ExpenseSnapshot:
        data = dict(self.validated_data)
        tax_rate = data.pop("tax_rate", None)
        data["tax_amount"] = _line_tax(data, data["amount"], tax_rate)
        return ExpenseSnapshot(**data)


class VoidDocumentSerializer(serializers.Serializer):
    void_date = serializers.DateField(required=False, allow_null=True, default=None)
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)
