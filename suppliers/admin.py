from django.contrib import admin

from .models import Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "contact_window", "contact_method", "liaison_person", "updated_at")
    search_fields = ("name", "contact_window", "products")
