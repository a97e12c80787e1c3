from django.urls import path

from .views import FragranceDetailView, FragranceListCreateView, FragranceRatioView, FragranceUsageSyncView

urlpatterns = [
    path("", FragranceListCreateView.as_view(), name="fragrance-list"),
    path("ratios/", FragranceRatioView.as_view(), name="fragrance-ratios"),
    path("sync-usage/", FragranceUsageSyncView.as_view(), name="fragrance-sync-usage"),
    path("<int:fragrance_id>/", FragranceDetailView.as_view(), name="fragrance-detail"),
]
