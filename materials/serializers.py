"""Serializers for materials and material categories."""

from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import Material, MaterialCategory, MaterialSubCategory


class MaterialSubCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = MaterialSubCategory
        fields = ["id", "code", "name"]
        read_only_fields = fields


class MaterialCategorySerializer(serializers.ModelSerializer):
    subcategories = MaterialSubCategorySerializer(many=True, read_only=True)

    class Meta:
        model = MaterialCategory
        fields = ["id", "code", "name", "subcategories"]
        read_only_fields = fields


class MaterialSerializer(serializers.ModelSerializer):
    """Read-only representation including category names and low-stock flag."""

    category = serializers.CharField(source="category.name", read_only=True, default=None)
    subcategory = serializers.CharField(source="subcategory.name", read_only=True, default=None)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Material
        fields = [
            "id",
            "code",
            "name",
            "category",
            "subcategory",
            "supplier",
            "supplier_name",
            "current_stock",
            "safety_stock_level",
            "cost_per_unit",
            "unit",
            "specs",
            "notes",
            "is_low_stock",
            "last_stock_update",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class MaterialWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=120)
    category = serializers.CharField(max_length=60, required=False, allow_blank=True)
    subcategory = serializers.CharField(max_length=60, required=False, allow_blank=True)
    code = serializers.CharField(max_length=32, required=False, allow_blank=True)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    current_stock = QuantityField(required=False, min_value=0)
    safety_stock_level = QuantityField(required=False, min_value=0)
    cost_per_unit = QuantityField(required=False, min_value=0)
    unit = serializers.CharField(max_length=16, required=False, allow_blank=True)
    specs = serializers.CharField(max_length=200, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    remarks = serializers.CharField(required=False, allow_blank=True)
