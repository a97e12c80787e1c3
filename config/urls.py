"""URL configuration for the Deer Lab API.

All business endpoints are versioned under ``/api/v1/``.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "Deer Lab Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Versioned v1 routes only
    path("api/v1/", include("users.urls")),
    path("api/v1/suppliers/", include("suppliers.urls")),
    path("api/v1/materials/", include("materials.urls")),
    path("api/v1/fragrances/", include("fragrances.urls")),
    path("api/v1/products/", include("products.urls")),
    path("api/v1/purchase-orders/", include("purchasing.urls")),
    path("api/v1/work-orders/", include("workorders.urls")),
    path("api/v1/inventory/", include("inventory.urls")),
    path("api/v1/cart/", include("cart.urls")),
]
