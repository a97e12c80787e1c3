from django.contrib import admin

from .models import Material, MaterialCategory, MaterialSubCategory


@admin.register(MaterialCategory)
class MaterialCategoryAdmin(admin.ModelAdmin):
    list_display = ("code", "name")
    search_fields = ("code", "name")


@admin.register(MaterialSubCategory)
class MaterialSubCategoryAdmin(admin.ModelAdmin):
    list_display = ("category", "code", "name")
    list_filter = ("category",)


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "category", "current_stock", "safety_stock_level", "unit", "last_stock_update")
    list_filter = ("category",)
    search_fields = ("code", "name")
    # Stock changes go through the inventory protocol.
    readonly_fields = ("current_stock", "last_stock_update", "version")
