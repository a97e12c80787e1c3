from django.contrib import admin

from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("received_quantity",)


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("code", "supplier", "status", "created_at", "received_at")
    list_filter = ("status",)
    search_fields = ("code", "supplier__name")
    readonly_fields = ("status", "received_at", "received_by", "version")
    inlines = [PurchaseOrderItemInline]
