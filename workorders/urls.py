from django.urls import path

from .views import CompleteWorkOrderView, TimeEntryCreateView, WorkOrderDetailView, WorkOrderListCreateView

urlpatterns = [
    path("", WorkOrderListCreateView.as_view(), name="work-order-list"),
    path("<int:work_order_id>/", WorkOrderDetailView.as_view(), name="work-order-detail"),
    path("<int:work_order_id>/time-entries/", TimeEntryCreateView.as_view(), name="work-order-time-entries"),
    path("<int:work_order_id>/complete/", CompleteWorkOrderView.as_view(), name="work-order-complete"),
]
