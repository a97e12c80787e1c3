from common.choices import ItemType, QcStatus, WorkOrderStatus
from common.serializers import QuantityField, StrictSerializer
from rest_framework import serializers

from .models import BillOfMaterialsLine, TimeEntry, WorkOrder


class BillOfMaterialsLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillOfMaterialsLine
        fields = ["id", "item_type", "item_id", "code", "name", "unit", "category", "quantity", "used_quantity", "ratio"]
        read_only_fields = fields


class TimeEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = TimeEntry
        fields = [
            "id",
            "work_order",
            "personnel",
            "personnel_name",
            "work_date",
            "start_time",
            "end_time",
            "duration_hours",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class WorkOrderSerializer(serializers.ModelSerializer):
    bom_lines = BillOfMaterialsLineSerializer(many=True, read_only=True)
    total_hours = serializers.SerializerMethodField()

    class Meta:
        model = WorkOrder
        fields = [
            "id",
            "code",
            "product",
            "product_snapshot",
            "target_quantity",
            "actual_quantity",
            "status",
            "qc_status",
            "notes",
            "bom_lines",
            "total_hours",
            "created_by",
            "completed_at",
            "completed_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_total_hours(self, obj) -> str:
        return str(sum((entry.duration_hours for entry in obj.time_entries.all()), start=0))


class BomItemSerializer(StrictSerializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices)
    item_id = serializers.IntegerField()
    quantity = QuantityField(min_value=0)
    unit = serializers.CharField(max_length=16, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=BillOfMaterialsLine.CATEGORY_CHOICES, required=False)
    ratio = QuantityField(required=False, allow_null=True)


class WorkOrderCreateSerializer(StrictSerializer):
    product_id = serializers.IntegerField()
    target_quantity = QuantityField()
    fragrance_id = serializers.IntegerField(required=False, allow_null=True)
    nicotine_mg = QuantityField(required=False, allow_null=True, min_value=0)
    bom_items = BomItemSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class WorkOrderUpdateSerializer(StrictSerializer):
    status = serializers.ChoiceField(choices=WorkOrderStatus.choices, required=False)
    qc_status = serializers.ChoiceField(choices=QcStatus.choices, required=False)
    actual_quantity = QuantityField(required=False, min_value=0)
    target_quantity = QuantityField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class TimeEntryCreateSerializer(StrictSerializer):
    personnel_id = serializers.IntegerField()
    work_date = serializers.DateField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    notes = serializers.CharField(required=False, allow_blank=True)


class ConsumedMaterialSerializer(StrictSerializer):
    item_type = serializers.ChoiceField(choices=ItemType.choices)
    item_id = serializers.IntegerField()
    code = serializers.CharField(required=False, allow_blank=True)
    consumed_quantity = QuantityField()


class CompleteWorkOrderSerializer(StrictSerializer):
    actual_quantity = QuantityField(min_value=0)
    consumed_materials = ConsumedMaterialSerializer(many=True, allow_empty=False)
    remarks = serializers.CharField(required=False, allow_blank=True)
