"""Inventory endpoints: stock changes, dashboards, and movement/record lists."""

from common.choices import ItemType
from common.errors import InvalidArgument
from common.identity import Operator
from common.responses import success_response
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import InventoryRecord, StockMovement
from .selectors import inventory_overview, low_stock_items
from .serializers import (
    AdjustStockRequestSerializer,
    InventoryRecordSerializer,
    QuickUpdateRequestSerializer,
    RecordRemarksSerializer,
    StockMovementSerializer,
    StocktakeRequestSerializer,
)
from .services import adjust_stock, perform_stocktake, quick_update_inventory, update_record_remarks


class InventoryWriteView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.INVENTORY
    throttle_scope = "inventory_write"


class AdjustStockView(InventoryWriteView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust stock for one item",
        description="Apply a signed quantity change. Results below zero are floored at zero.",
        request=AdjustStockRequestSerializer,
        examples=[
            OpenApiExample(
                "Add 2.5 KG",
                value={"item_type": "material", "item_id": 12, "quantity_change": 2.5, "reason": "Found in storage"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = AdjustStockRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = adjust_stock(
            item_type=data["item_type"],
            item_id=data["item_id"],
            quantity_change=data["quantity_change"],
            reason=data["reason"],
            remarks=data["remarks"],
            operator=Operator.from_user(request.user),
        )
        return success_response(result.as_dict(), request=request)


class QuickUpdateView(InventoryWriteView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Quick update stock levels",
        description=(
            "Set new stock levels for several items. Items that cannot be found are "
            "reported under `failed` while the rest are applied."
        ),
        request=QuickUpdateRequestSerializer,
        examples=[
            OpenApiExample(
                "Batch",
                value={
                    "updates": [
                        {"item_type": "material", "item_id": 1, "new_stock": 10},
                        {"code": "FR-001", "new_stock": 3.25},
                    ]
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = QuickUpdateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = quick_update_inventory(
            updates=serializer.validated_data["updates"],
            remarks=serializer.validated_data["remarks"],
            operator=Operator.from_user(request.user),
        )
        return success_response(result, request=request)


class StocktakeView(InventoryWriteView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Record a stocktake",
        description="Reconcile counted quantities with recorded stock; only differing items are adjusted.",
        request=StocktakeRequestSerializer,
    )
    def post(self, request):
        serializer = StocktakeRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = perform_stocktake(
            counts=serializer.validated_data["counts"],
            remarks=serializer.validated_data["remarks"],
            operator=Operator.from_user(request.user),
        )
        return success_response(result, request=request)


class InventoryOverviewView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(tags=["Inventory Endpoints"], summary="Inventory overview")
    def get(self, request):
        return success_response(inventory_overview(), request=request)


class LowStockView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Low-stock items",
        parameters=[OpenApiParameter(name="item_type", required=False, type=str, enum=ItemType.values)],
    )
    def get(self, request):
        item_type = request.query_params.get("item_type") or None
        if item_type and item_type not in ItemType.values:
            raise InvalidArgument("Unknown item_type", details={"field": "item_type"})
        return success_response(low_stock_items(item_type), request=request)


class MovementListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = StockMovementSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock movements",
        description=(
            "Filters: item_type, item_id, movement_type, related_doc_type, related_doc_id, created_after (ISO)."
        ),
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = StockMovement.objects.order_by("-created_at", "-id")
        params = self.request.query_params
        for name in ("item_type", "item_id", "movement_type", "related_doc_type", "related_doc_id"):
            value = params.get(name)
            if value:
                qs = qs.filter(**{name: value})
        created_after = params.get("created_after")
        if created_after:
            dt = parse_datetime(created_after)
            if dt:
                qs = qs.filter(created_at__gte=dt)
        return qs


class RecordListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "inventory"
    serializer_class = InventoryRecordSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List inventory records",
        description="Filters: change_reason, related_doc_type, related_doc_id, operator_id.",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = InventoryRecord.objects.order_by("-created_at", "-id")
        params = self.request.query_params
        for name in ("change_reason", "related_doc_type", "related_doc_id", "operator_id"):
            value = params.get(name)
            if value:
                qs = qs.filter(**{name: value})
        return qs


class RecordRemarksView(InventoryWriteView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Edit record remarks",
        description="The only permitted change to an inventory record.",
        request=RecordRemarksSerializer,
        responses=InventoryRecordSerializer,
    )
    def patch(self, request, record_id: int):
        serializer = RecordRemarksSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = update_record_remarks(
            record_id=record_id,
            remarks=serializer.validated_data["remarks"],
            operator=Operator.from_user(request.user),
        )
        return success_response(InventoryRecordSerializer(record).data, request=request)


# EOF
