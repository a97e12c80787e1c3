from django.urls import path

from .views import (
    ProductDetailView,
    ProductListCreateView,
    ProductSeriesDetailView,
    ProductSeriesListCreateView,
    ProductTypeDetailView,
    ProductTypeInitializeView,
    ProductTypeListCreateView,
)

urlpatterns = [
    path("", ProductListCreateView.as_view(), name="product-list"),
    path("types/", ProductTypeListCreateView.as_view(), name="product-type-list"),
    path("types/initialize/", ProductTypeInitializeView.as_view(), name="product-type-initialize"),
    path("types/<int:type_id>/", ProductTypeDetailView.as_view(), name="product-type-detail"),
    path("series/", ProductSeriesListCreateView.as_view(), name="product-series-list"),
    path("series/<int:series_id>/", ProductSeriesDetailView.as_view(), name="product-series-detail"),
    path("<int:product_id>/", ProductDetailView.as_view(), name="product-detail"),
]
