"""Work order endpoints."""

from common.errors import NotFound
from common.identity import Operator
from common.responses import success_response
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import WorkOrder
from .serializers import (
    CompleteWorkOrderSerializer,
    TimeEntryCreateSerializer,
    TimeEntrySerializer,
    WorkOrderCreateSerializer,
    WorkOrderSerializer,
    WorkOrderUpdateSerializer,
)
from .services import add_time_entry, complete_work_order, create_work_order, delete_work_order, update_work_order


def _orders():
    return WorkOrder.objects.prefetch_related("bom_lines", "time_entries")


class WorkOrderWriteView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.PRODUCTION
    throttle_scope = "workorders_write"


class WorkOrderListCreateView(generics.ListAPIView, WorkOrderWriteView):
    serializer_class = WorkOrderSerializer
    throttle_scope = "workorders"

    def get_queryset(self):
        qs = _orders()
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("product_id"):
            qs = qs.filter(product_id=params["product_id"])
        return qs

    @extend_schema(tags=["Work Order Endpoints"], summary="List work orders")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Work Order Endpoints"], summary="Create work order", request=WorkOrderCreateSerializer)
    def post(self, request):
        serializer = WorkOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = create_work_order(created_by=request.user, **serializer.validated_data)
        return success_response(WorkOrderSerializer(order).data, request=request, status=status.HTTP_201_CREATED)


class WorkOrderDetailView(WorkOrderWriteView):
    @extend_schema(tags=["Work Order Endpoints"], summary="Get work order", responses=WorkOrderSerializer)
    def get(self, request, work_order_id: int):
        order = _orders().filter(pk=work_order_id).first()
        if order is None:
            raise NotFound("Work order not found")
        return Response(WorkOrderSerializer(order).data)

    @extend_schema(tags=["Work Order Endpoints"], summary="Update work order", request=WorkOrderUpdateSerializer)
    def patch(self, request, work_order_id: int):
        serializer = WorkOrderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = update_work_order(
            work_order_id=work_order_id,
            operator=Operator.from_user(request.user),
            **serializer.validated_data,
        )
        return success_response(WorkOrderSerializer(order).data, request=request)

    @extend_schema(tags=["Work Order Endpoints"], summary="Delete work order")
    def delete(self, request, work_order_id: int):
        removed = delete_work_order(work_order_id=work_order_id)
        return success_response({"id": work_order_id, "deleted": True, "time_entries_deleted": removed}, request=request)


class TimeEntryCreateView(WorkOrderWriteView):
    required_permission = Capability.TIME

    @extend_schema(tags=["Work Order Endpoints"], summary="Add a time entry", request=TimeEntryCreateSerializer)
    def post(self, request, work_order_id: int):
        serializer = TimeEntryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = add_time_entry(work_order_id=work_order_id, created_by=request.user, **serializer.validated_data)
        return success_response(TimeEntrySerializer(entry).data, request=request, status=status.HTTP_201_CREATED)


class CompleteWorkOrderView(WorkOrderWriteView):
    @extend_schema(
        tags=["Work Order Endpoints"],
        summary="Complete work order and consume stock",
        request=CompleteWorkOrderSerializer,
        examples=[
            OpenApiExample(
                "Fragrance and bottle consumption",
                value={
                    "actual_quantity": "50",
                    "consumed_materials": [
                        {"item_type": "fragrance", "item_id": 3, "consumed_quantity": "2.5"},
                        {"item_type": "material", "item_id": 12, "consumed_quantity": "50"},
                    ],
                },
                request_only=True,
            )
        ],
    )
    def post(self, request, work_order_id: int):
        serializer = CompleteWorkOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = complete_work_order(
            work_order_id=work_order_id,
            operator=Operator.from_user(request.user),
            **serializer.validated_data,
        )
        return success_response(result, request=request)
