"""Material endpoints."""

from common.errors import NotFound
from common.identity import Operator
from common.responses import success_response
from django.db.models import F, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .models import Material, MaterialCategory
from .serializers import MaterialCategorySerializer, MaterialSerializer, MaterialWriteSerializer
from .services import create_material, delete_material, update_material


class MaterialBaseView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.CATALOG
    throttle_scope = "catalog_write"


class MaterialListCreateView(generics.ListAPIView, MaterialBaseView):
    """List materials with filters, or create one.

    Filters:
    - `category`: category name
    - `subcategory`: subcategory name
    - `supplier_id`: supplier id
    - `q`: code or name contains
    - `low_stock`: `true` for items at or below safety stock
    """

    serializer_class = MaterialSerializer
    throttle_scope = "catalog"

    def get_queryset(self):
        qs = Material.objects.select_related("category", "subcategory", "supplier").order_by("code")
        params = self.request.query_params
        if params.get("category"):
            qs = qs.filter(category__name=params["category"])
        if params.get("subcategory"):
            qs = qs.filter(subcategory__name=params["subcategory"])
        if params.get("supplier_id"):
            qs = qs.filter(supplier_id=params["supplier_id"])
        search = params.get("q")
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
        if params.get("low_stock") in ("1", "true", "yes"):
            qs = qs.filter(safety_stock_level__gt=0, current_stock__lte=F("safety_stock_level"))
        return qs

    @extend_schema(
        tags=["Material Endpoints"],
        summary="List materials",
        parameters=[
            OpenApiParameter(name="category", required=False, type=str),
            OpenApiParameter(name="subcategory", required=False, type=str),
            OpenApiParameter(name="supplier_id", required=False, type=int),
            OpenApiParameter(name="q", required=False, type=str),
            OpenApiParameter(name="low_stock", required=False, type=bool),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Material Endpoints"], summary="Create material", request=MaterialWriteSerializer)
    def post(self, request):
        serializer = MaterialWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("remarks", None)
        material = create_material(**data)
        return success_response(MaterialSerializer(material).data, request=request, status=status.HTTP_201_CREATED)


class MaterialDetailView(MaterialBaseView):
    @extend_schema(tags=["Material Endpoints"], summary="Get material", responses=MaterialSerializer)
    def get(self, request, material_id: int):
        material = Material.objects.select_related("category", "subcategory", "supplier").filter(pk=material_id).first()
        if material is None:
            raise NotFound("Material not found")
        return Response(MaterialSerializer(material).data)

    @extend_schema(
        tags=["Material Endpoints"],
        summary="Update material",
        description="A changed `current_stock` is applied as a manual adjustment with a movement and audit record.",
        request=MaterialWriteSerializer,
    )
    def patch(self, request, material_id: int):
        serializer = MaterialWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        material = update_material(
            material_id=material_id,
            operator=Operator.from_user(request.user),
            **serializer.validated_data,
        )
        return success_response(MaterialSerializer(material).data, request=request)

    @extend_schema(tags=["Material Endpoints"], summary="Delete material")
    def delete(self, request, material_id: int):
        delete_material(material_id=material_id)
        return success_response({"id": material_id, "deleted": True}, request=request)


class MaterialCategoryListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "catalog"
    serializer_class = MaterialCategorySerializer
    queryset = MaterialCategory.objects.prefetch_related("subcategories").order_by("name")

    @extend_schema(tags=["Material Endpoints"], summary="List material categories")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)
