from django.contrib import admin

from .models import Product, ProductSeries, ProductType


@admin.register(ProductType)
class ProductTypeAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "color", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name")


@admin.register(ProductSeries)
class ProductSeriesAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "product_type")
    search_fields = ("code", "name")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "series", "fragrance", "status")
    list_filter = ("status", "series")
    search_fields = ("code", "name")
    filter_horizontal = ("specific_materials",)
    readonly_fields = ("code", "product_number")
