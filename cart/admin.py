from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "item_type", "code", "name", "supplier", "quantity", "added_by", "updated_at")
    list_filter = ("item_type",)
    search_fields = ("code", "name")
