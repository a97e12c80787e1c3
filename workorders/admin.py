from django.contrib import admin

from .models import BillOfMaterialsLine, TimeEntry, WorkOrder


class BillOfMaterialsLineInline(admin.TabularInline):
    model = BillOfMaterialsLine
    extra = 0
    readonly_fields = ("used_quantity",)


class TimeEntryInline(admin.TabularInline):
    model = TimeEntry
    extra = 0
    fk_name = "work_order"
    readonly_fields = ("duration_hours",)


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ("code", "status", "qc_status", "target_quantity", "actual_quantity", "created_at")
    list_filter = ("status", "qc_status")
    search_fields = ("code",)
    readonly_fields = ("status", "completed_at", "completed_by", "version")
    inlines = [BillOfMaterialsLineInline, TimeEntryInline]
