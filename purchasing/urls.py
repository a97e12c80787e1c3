from django.urls import path

from .views import (
    PurchaseOrderDetailView,
    PurchaseOrderListCreateView,
    PurchaseOrderStatusView,
    ReceivePurchaseOrderView,
)

urlpatterns = [
    path("", PurchaseOrderListCreateView.as_view(), name="purchase-order-list"),
    path("<int:purchase_order_id>/", PurchaseOrderDetailView.as_view(), name="purchase-order-detail"),
    path("<int:purchase_order_id>/status/", PurchaseOrderStatusView.as_view(), name="purchase-order-status"),
    path("<int:purchase_order_id>/receive/", ReceivePurchaseOrderView.as_view(), name="purchase-order-receive"),
]
