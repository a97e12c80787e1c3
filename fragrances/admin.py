from django.contrib import admin

from .models import Fragrance


@admin.register(Fragrance)
class FragranceAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "fragrance_type", "fragrance_status", "percentage", "current_stock", "unit")
    list_filter = ("fragrance_type", "fragrance_status")
    search_fields = ("code", "name")
    readonly_fields = ("current_stock", "last_stock_update", "version", "usage_count", "last_used_at")
