from common.choices import ItemType
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)
    added_by_name = serializers.CharField(source="added_by.name", read_only=True, default=None)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "item_type",
            "item_id",
            "code",
            "name",
            "unit",
            "supplier",
            "supplier_name",
            "quantity",
            "notes",
            "added_by",
            "added_by_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CartItemAddSerializer(StrictSerializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices)
    item_id = serializers.IntegerField()
    quantity = QuantityField(default=1)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class CartItemUpdateSerializer(StrictSerializer):
    quantity = QuantityField(required=False)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class CheckoutSerializer(StrictSerializer):
    cart_item_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=False)
    notes = serializers.CharField(required=False, allow_blank=True)
