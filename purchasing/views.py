"""Purchase order endpoints."""

from common.errors import NotFound
from common.identity import Operator
from common.responses import success_response
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import PurchaseOrder
from .serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    PurchaseOrderStatusSerializer,
    ReceivePurchaseOrderSerializer,
)
from .services import create_purchase_orders, receive_purchase_order, update_purchase_order_status


def _orders():
    return PurchaseOrder.objects.select_related("supplier").prefetch_related("items")


class PurchasingWriteView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.PURCHASING
    throttle_scope = "purchasing_write"


class PurchaseOrderListCreateView(generics.ListAPIView, PurchasingWriteView):
    serializer_class = PurchaseOrderSerializer
    throttle_scope = "purchasing"

    def get_queryset(self):
        qs = _orders()
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("supplier_id"):
            qs = qs.filter(supplier_id=params["supplier_id"])
        return qs

    @extend_schema(tags=["Purchase Order Endpoints"], summary="List purchase orders")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Purchase Order Endpoints"],
        summary="Create purchase orders (one per supplier)",
        request=PurchaseOrderCreateSerializer,
        examples=[
            OpenApiExample(
                "Two suppliers",
                value={
                    "suppliers": [
                        {"supplier_id": 1, "items": [{"item_type": "material", "item_id": 12, "quantity": "25"}]},
                        {"supplier_id": 2, "items": [{"item_type": "fragrance", "item_id": 3, "quantity": "5.5"}]},
                    ]
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        orders = create_purchase_orders(created_by=request.user, **serializer.validated_data)
        data = {"count": len(orders), "orders": PurchaseOrderSerializer(orders, many=True).data}
        return success_response(data, request=request, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(PurchasingWriteView):
    throttle_scope = "purchasing"

    @extend_schema(tags=["Purchase Order Endpoints"], summary="Get purchase order", responses=PurchaseOrderSerializer)
    def get(self, request, purchase_order_id: int):
        order = _orders().filter(pk=purchase_order_id).first()
        if order is None:
            raise NotFound("Purchase order not found")
        return Response(PurchaseOrderSerializer(order).data)


class PurchaseOrderStatusView(PurchasingWriteView):
    @extend_schema(tags=["Purchase Order Endpoints"], summary="Change purchase order status", request=PurchaseOrderStatusSerializer)
    def post(self, request, purchase_order_id: int):
        serializer = PurchaseOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = update_purchase_order_status(
            purchase_order_id=purchase_order_id,
            new_status=serializer.validated_data["status"],
            operator=Operator.from_user(request.user),
        )
        return success_response(PurchaseOrderSerializer(order).data, request=request)


class ReceivePurchaseOrderView(PurchasingWriteView):
    @extend_schema(
        tags=["Purchase Order Endpoints"],
        summary="Receive purchase order into stock",
        description="Omit `items` to receive every line at its ordered quantity.",
        request=ReceivePurchaseOrderSerializer,
    )
    def post(self, request, purchase_order_id: int):
        serializer = ReceivePurchaseOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = receive_purchase_order(
            purchase_order_id=purchase_order_id,
            operator=Operator.from_user(request.user),
            items=serializer.validated_data.get("items"),
            remarks=serializer.validated_data.get("remarks", ""),
        )
        return success_response(result, request=request)
