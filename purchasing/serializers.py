from common.choices import ItemType, PurchaseOrderStatus
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseOrderItem
        fields = [
            "id",
            "item_type",
            "item_id",
            "item_ref_path",
            "code",
            "name",
            "unit",
            "quantity",
            "cost_per_unit",
            "product_capacity_kg",
            "fragrance_percentage",
            "received_quantity",
        ]
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id",
            "code",
            "supplier",
            "supplier_name",
            "status",
            "notes",
            "items",
            "created_by",
            "received_at",
            "received_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PurchaseLineSerializer(StrictSerializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices)
    item_id = serializers.IntegerField()
    quantity = QuantityField()
    cost_per_unit = QuantityField(required=False, min_value=0)
    product_capacity_kg = QuantityField(required=False, allow_null=True, min_value=0)
    fragrance_percentage = QuantityField(required=False, allow_null=True, min_value=0, max_value=100)


class SupplierOrderSerializer(StrictSerializer):
    supplier_id = serializers.IntegerField()
    items = PurchaseLineSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class PurchaseOrderCreateSerializer(StrictSerializer):
    suppliers = SupplierOrderSerializer(many=True, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class PurchaseOrderStatusSerializer(StrictSerializer):
    status = serializers.ChoiceField(choices=PurchaseOrderStatus.choices)


class ReceiptLineSerializer(StrictSerializer):
    line_id = serializers.IntegerField(required=False)
    item_type = serializers.ChoiceField(choices=ItemType.choices, required=False)
    item_id = serializers.IntegerField(required=False)
    item_ref_path = serializers.CharField(required=False, allow_blank=True)
    code = serializers.CharField(required=False, allow_blank=True)
    received_quantity = QuantityField()

    def validate(self, attrs):
        if attrs.get("line_id") is None and not (
            attrs.get("item_ref_path") or attrs.get("code") or attrs.get("item_id") is not None
        ):
            raise serializers.ValidationError("Provide line_id, item_ref_path, code or item_type and item_id.")
        return attrs


class ReceivePurchaseOrderSerializer(StrictSerializer):
    items = ReceiptLineSerializer(many=True, required=False)
    remarks = serializers.CharField(required=False, allow_blank=True)
