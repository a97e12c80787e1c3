"""Admin registrations for inventory app.

Movements and records are append-only, so the admin is read-only.
"""

from django.contrib import admin

from .models import InventoryRecord, StockMovement


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    list_display = ("id", "item_type", "item_code", "movement_type", "quantity", "quantity_after", "related_doc_id", "created_at")
    list_filter = ("movement_type", "item_type")
    search_fields = ("item_code", "related_doc_id")


@admin.register(InventoryRecord)
class InventoryRecordAdmin(ReadOnlyAdmin):
    list_display = ("id", "change_reason", "operator_name", "related_doc_type", "related_doc_id", "created_at")
    list_filter = ("change_reason",)
    search_fields = ("related_doc_id", "operator_name", "remarks")


# EOF
