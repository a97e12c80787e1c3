from django.urls import path

from .views import (
    AdjustStockView,
    InventoryOverviewView,
    LowStockView,
    MovementListView,
    QuickUpdateView,
    RecordListView,
    RecordRemarksView,
    StocktakeView,
)

urlpatterns = [
    path("overview/", InventoryOverviewView.as_view(), name="inventory-overview"),
    path("low-stock/", LowStockView.as_view(), name="inventory-low-stock"),
    path("adjust/", AdjustStockView.as_view(), name="inventory-adjust"),
    path("quick-update/", QuickUpdateView.as_view(), name="inventory-quick-update"),
    path("stocktake/", StocktakeView.as_view(), name="inventory-stocktake"),
    # Read-only endpoints
    path("movements/", MovementListView.as_view(), name="movement-list"),
    path("records/", RecordListView.as_view(), name="record-list"),
    path("records/<int:record_id>/remarks/", RecordRemarksView.as_view(), name="record-remarks"),
]

# EOF
