from common.choices import ProductStatus
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import Product, ProductSeries, ProductType


class ProductTypeSerializer(serializers.ModelSerializer):
    series_count = serializers.SerializerMethodField()

    class Meta:
        model = ProductType
        fields = ["id", "name", "code", "color", "description", "is_active", "series_count", "created_at", "updated_at"]
        read_only_fields = fields

    def get_series_count(self, obj) -> int:
        return ProductSeries.objects.filter(product_type=obj.code).count()


class ProductSeriesSerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(source="products.count", read_only=True)

    class Meta:
        model = ProductSeries
        fields = ["id", "name", "code", "product_type", "description", "product_count", "created_at", "updated_at"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    series_name = serializers.CharField(source="series.name", read_only=True)
    fragrance_code = serializers.CharField(source="fragrance.code", read_only=True, default=None)
    fragrance_name = serializers.CharField(source="fragrance.name", read_only=True, default=None)
    specific_material_ids = serializers.PrimaryKeyRelatedField(source="specific_materials", many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "code",
            "product_number",
            "name",
            "series",
            "series_name",
            "fragrance",
            "fragrance_code",
            "fragrance_name",
            "specific_material_ids",
            "nicotine_mg",
            "target_production",
            "status",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductTypeWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=60)
    code = serializers.CharField(max_length=8)
    color = serializers.CharField(max_length=16, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class ProductSeriesWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=120)
    code = serializers.CharField(max_length=16)
    product_type = serializers.CharField(max_length=8)
    description = serializers.CharField(required=False, allow_blank=True)


class ProductWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=120)
    series_id = serializers.IntegerField()
    fragrance_id = serializers.IntegerField(required=False, allow_null=True)
    specific_material_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    nicotine_mg = QuantityField(required=False, min_value=0)
    target_production = QuantityField(required=False, min_value=0)
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
