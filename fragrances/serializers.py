from common.choices import FragranceStatus, FragranceType
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import Fragrance


class FragranceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Fragrance
        fields = [
            "id",
            "code",
            "name",
            "fragrance_type",
            "fragrance_status",
            "supplier",
            "supplier_name",
            "percentage",
            "pg_ratio",
            "vg_ratio",
            "current_stock",
            "safety_stock_level",
            "cost_per_unit",
            "unit",
            "description",
            "notes",
            "usage_count",
            "last_used_at",
            "is_low_stock",
            "last_stock_update",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class FragranceWriteSerializer(StrictSerializer):
    code = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=120)
    fragrance_type = serializers.ChoiceField(choices=FragranceType.choices, required=False)
    fragrance_status = serializers.ChoiceField(choices=FragranceStatus.choices, required=False)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    percentage = QuantityField(required=False, min_value=0, max_value=100)
    pg_ratio = QuantityField(required=False, min_value=0, max_value=100)
    vg_ratio = QuantityField(required=False, min_value=0, max_value=100)
    current_stock = QuantityField(required=False, min_value=0)
    safety_stock_level = QuantityField(required=False, min_value=0)
    cost_per_unit = QuantityField(required=False, min_value=0)
    unit = serializers.CharField(max_length=16, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)


class RatioQuerySerializer(StrictSerializer):
    percentage = QuantityField(min_value=0, max_value=100)
    total = QuantityField(required=False, min_value=0)
