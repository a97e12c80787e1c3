from common.serializers import StrictSerializer
from rest_framework import serializers

from .models import Supplier


class SupplierSerializer(serializers.ModelSerializer):
    liaison_person_name = serializers.CharField(source="liaison_person.name", read_only=True, default=None)

    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "products",
            "contact_window",
            "contact_method",
            "liaison_person",
            "liaison_person_name",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SupplierWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=120)
    products = serializers.CharField(required=False, allow_blank=True)
    contact_window = serializers.CharField(max_length=120, required=False, allow_blank=True)
    contact_method = serializers.CharField(max_length=120, required=False, allow_blank=True)
    liaison_person_id = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


# EOF
