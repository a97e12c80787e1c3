"""Serializers for the inventory domain.

Read serializers for movements and audit records, plus strict request
serializers for the stock-changing endpoints.
"""

from common.choices import ItemType
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import InventoryRecord, StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    """Read-only representation of stock movements."""

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "item_type",
            "item_id",
            "item_code",
            "movement_type",
            "quantity",
            "quantity_before",
            "quantity_after",
            "related_doc_type",
            "related_doc_id",
            "operator_id",
            "operator_name",
            "reason",
            "created_at",
        ]
        read_only_fields = fields


class InventoryRecordSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryRecord
        fields = [
            "id",
            "change_reason",
            "operator_id",
            "operator_name",
            "remarks",
            "related_doc_type",
            "related_doc_id",
            "details",
            "item_count",
            "created_at",
            "remarks_updated_at",
        ]
        read_only_fields = fields


class ItemTargetSerializer(StrictSerializer):
    """Identifies an item by type and id, by document path, or by code."""

    item_type = serializers.ChoiceField(choices=ItemType.choices, required=False)
    item_id = serializers.IntegerField(required=False, min_value=1)
    item_ref_path = serializers.CharField(required=False, allow_blank=True)
    code = serializers.CharField(required=False, allow_blank=True)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        has_direct = attrs.get("item_type") and attrs.get("item_id")
        if not (has_direct or attrs.get("item_ref_path") or attrs.get("code")):
            raise serializers.ValidationError("Provide item_type and item_id, item_ref_path, or code.")
        return attrs


class QuickUpdateLineSerializer(ItemTargetSerializer):
    new_stock = QuantityField(min_value=0)


class StocktakeLineSerializer(ItemTargetSerializer):
    counted_stock = QuantityField(min_value=0)


class QuickUpdateRequestSerializer(StrictSerializer):
    updates = QuickUpdateLineSerializer(many=True, allow_empty=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class StocktakeRequestSerializer(StrictSerializer):
    counts = StocktakeLineSerializer(many=True, allow_empty=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class AdjustStockRequestSerializer(StrictSerializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices)
    item_id = serializers.IntegerField(min_value=1)
    quantity_change = QuantityField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class RecordRemarksSerializer(StrictSerializer):
    remarks = serializers.CharField(allow_blank=True)


# EOF
