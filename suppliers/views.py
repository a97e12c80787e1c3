"""Supplier endpoints."""

from common.errors import NotFound
from common.responses import success_response
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import Supplier
from .serializers import SupplierSerializer, SupplierWriteSerializer
from .services import create_supplier, delete_supplier, update_supplier


class SupplierBaseView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.CATALOG
    throttle_scope = "catalog_write"


class SupplierListCreateView(generics.ListAPIView, SupplierBaseView):
    serializer_class = SupplierSerializer
    throttle_scope = "catalog"

    def get_queryset(self):
        qs = Supplier.objects.select_related("liaison_person").order_by("name")
        search = self.request.query_params.get("q")
        if search:
            qs = qs.filter(name__icontains=search)
        return qs

    @extend_schema(tags=["Supplier Endpoints"], summary="List suppliers")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Supplier Endpoints"], summary="Create supplier", request=SupplierWriteSerializer)
    def post(self, request):
        serializer = SupplierWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        supplier = create_supplier(**serializer.validated_data)
        return success_response(SupplierSerializer(supplier).data, request=request, status=status.HTTP_201_CREATED)


class SupplierDetailView(SupplierBaseView):
    @extend_schema(tags=["Supplier Endpoints"], summary="Get supplier", responses=SupplierSerializer)
    def get(self, request, supplier_id: int):
        supplier = Supplier.objects.filter(pk=supplier_id).first()
        if supplier is None:
            raise NotFound("Supplier not found")
        return Response(SupplierSerializer(supplier).data)

    @extend_schema(tags=["Supplier Endpoints"], summary="Update supplier", request=SupplierWriteSerializer)
    def patch(self, request, supplier_id: int):
        serializer = SupplierWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        supplier = update_supplier(supplier_id=supplier_id, **serializer.validated_data)
        return success_response(SupplierSerializer(supplier).data, request=request)

    @extend_schema(tags=["Supplier Endpoints"], summary="Delete supplier")
    def delete(self, request, supplier_id: int):
        delete_supplier(supplier_id=supplier_id)
        return success_response({"id": supplier_id, "deleted": True}, request=request)


# EOF
