from common.errors import NotFound
from common.responses import success_response
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import Product, ProductSeries, ProductType
from .serializers import (
    ProductSerializer,
    ProductSeriesSerializer,
    ProductSeriesWriteSerializer,
    ProductTypeSerializer,
    ProductTypeWriteSerializer,
    ProductWriteSerializer,
)
from .services import (
    create_product,
    create_product_type,
    create_series,
    delete_product,
    delete_product_type,
    delete_series,
    initialize_default_product_types,
    update_product,
    update_product_type,
    update_series,
)


class CatalogWriteView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.CATALOG
    throttle_scope = "catalog_write"


class ProductTypeListCreateView(generics.ListAPIView, CatalogWriteView):
    serializer_class = ProductTypeSerializer
    throttle_scope = "catalog"

    def get_queryset(self):
        qs = ProductType.objects.order_by("code")
        if self.request.query_params.get("active") == "true":
            qs = qs.filter(is_active=True)
        return qs

    @extend_schema(tags=["Product Endpoints"], summary="List product types")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Product Endpoints"], summary="Create product type", request=ProductTypeWriteSerializer)
    def post(self, request):
        serializer = ProductTypeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_type = create_product_type(**serializer.validated_data)
        return success_response(
            ProductTypeSerializer(product_type).data, request=request, status=status.HTTP_201_CREATED
        )


class ProductTypeDetailView(CatalogWriteView):
    @extend_schema(tags=["Product Endpoints"], summary="Update product type", request=ProductTypeWriteSerializer)
    def patch(self, request, type_id: int):
        serializer = ProductTypeWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product_type = update_product_type(type_id=type_id, **serializer.validated_data)
        return success_response(ProductTypeSerializer(product_type).data, request=request)

    @extend_schema(tags=["Product Endpoints"], summary="Delete product type")
    def delete(self, request, type_id: int):
        delete_product_type(type_id=type_id)
        return success_response({"id": type_id, "deleted": True}, request=request)


class ProductTypeInitializeView(CatalogWriteView):
    @extend_schema(tags=["Product Endpoints"], summary="Create default product types when none exist")
    def post(self, request):
        created = initialize_default_product_types()
        return success_response(
            {"created": ProductTypeSerializer(created, many=True).data, "count": len(created)},
            request=request,
        )


class ProductSeriesListCreateView(generics.ListAPIView, CatalogWriteView):
    serializer_class = ProductSeriesSerializer
    throttle_scope = "catalog"
    queryset = ProductSeries.objects.order_by("code")

    @extend_schema(tags=["Product Endpoints"], summary="List product series")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Product Endpoints"], summary="Create product series", request=ProductSeriesWriteSerializer)
    def post(self, request):
        serializer = ProductSeriesWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        series = create_series(**serializer.validated_data)
        return success_response(ProductSeriesSerializer(series).data, request=request, status=status.HTTP_201_CREATED)


class ProductSeriesDetailView(CatalogWriteView):
    @extend_schema(tags=["Product Endpoints"], summary="Update product series", request=ProductSeriesWriteSerializer)
    def patch(self, request, series_id: int):
        serializer = ProductSeriesWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        series = update_series(series_id=series_id, **serializer.validated_data)
        return success_response(ProductSeriesSerializer(series).data, request=request)

    @extend_schema(tags=["Product Endpoints"], summary="Delete product series")
    def delete(self, request, series_id: int):
        delete_series(series_id=series_id)
        return success_response({"id": series_id, "deleted": True}, request=request)


class ProductListCreateView(generics.ListAPIView, CatalogWriteView):
    serializer_class = ProductSerializer
    throttle_scope = "catalog"

    def get_queryset(self):
        qs = (
            Product.objects.select_related("series", "fragrance")
            .prefetch_related("specific_materials")
            .order_by("code")
        )
        params = self.request.query_params
        if params.get("series_id"):
            qs = qs.filter(series_id=params["series_id"])
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("fragrance_id"):
            qs = qs.filter(fragrance_id=params["fragrance_id"])
        search = params.get("q")
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
        return qs

    @extend_schema(tags=["Product Endpoints"], summary="List products")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Product Endpoints"], summary="Create product", request=ProductWriteSerializer)
    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = create_product(**serializer.validated_data)
        return success_response(ProductSerializer(product).data, request=request, status=status.HTTP_201_CREATED)


class ProductDetailView(CatalogWriteView):
    @extend_schema(tags=["Product Endpoints"], summary="Get product", responses=ProductSerializer)
    def get(self, request, product_id: int):
        product = (
            Product.objects.select_related("series", "fragrance")
            .prefetch_related("specific_materials")
            .filter(pk=product_id)
            .first()
        )
        if product is None:
            raise NotFound("Product not found")
        return Response(ProductSerializer(product).data)

    @extend_schema(tags=["Product Endpoints"], summary="Update product", request=ProductWriteSerializer)
    def patch(self, request, product_id: int):
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        product = update_product(product_id=product_id, **serializer.validated_data)
        return success_response(ProductSerializer(product).data, request=request)

    @extend_schema(tags=["Product Endpoints"], summary="Delete product")
    def delete(self, request, product_id: int):
        delete_product(product_id=product_id)
        return success_response({"id": product_id, "deleted": True}, request=request)
