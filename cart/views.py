"""Shared purchase cart endpoints."""

from common.responses import success_response
from drf_spectacular.utils import extend_schema
from purchasing.serializers import PurchaseOrderSerializer
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .selectors import cart_items
from .serializers import CartItemAddSerializer, CartItemSerializer, CartItemUpdateSerializer, CheckoutSerializer
from .services import add_cart_item, checkout_cart, clear_cart, remove_cart_item, update_cart_item


class CartBaseView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.PURCHASING
    throttle_scope = "purchasing_write"


class CartItemListCreateView(generics.ListAPIView, CartBaseView):
    serializer_class = CartItemSerializer
    throttle_scope = "purchasing"

    def get_queryset(self):
        return cart_items(supplier_id=self.request.query_params.get("supplier_id") or None)

    @extend_schema(tags=["Cart Endpoints"], summary="List cart items")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Cart Endpoints"], summary="Add item to cart", request=CartItemAddSerializer)
    def post(self, request):
        serializer = CartItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        line = add_cart_item(added_by=request.user, **serializer.validated_data)
        return success_response(CartItemSerializer(line).data, request=request, status=status.HTTP_201_CREATED)


class CartItemDetailView(CartBaseView):
    @extend_schema(tags=["Cart Endpoints"], summary="Update cart item", request=CartItemUpdateSerializer)
    def patch(self, request, cart_item_id: int):
        serializer = CartItemUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        line = update_cart_item(cart_item_id=cart_item_id, **serializer.validated_data)
        return success_response(CartItemSerializer(line).data, request=request)

    @extend_schema(tags=["Cart Endpoints"], summary="Remove cart item")
    def delete(self, request, cart_item_id: int):
        remove_cart_item(cart_item_id=cart_item_id)
        return success_response({"id": cart_item_id, "deleted": True}, request=request)


class CartClearView(CartBaseView):
    @extend_schema(tags=["Cart Endpoints"], summary="Empty the cart")
    def post(self, request):
        removed = clear_cart()
        return success_response({"removed": removed}, request=request)


class CartCheckoutView(CartBaseView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Turn cart items into purchase orders",
        description="Creates one draft purchase order per supplier and removes the ordered lines.",
        request=CheckoutSerializer,
    )
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        orders = checkout_cart(created_by=request.user, **serializer.validated_data)
        data = {"count": len(orders), "orders": PurchaseOrderSerializer(orders, many=True).data}
        return success_response(data, request=request, status=status.HTTP_201_CREATED)
