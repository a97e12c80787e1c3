"""Fragrance endpoints."""

from common.errors import NotFound
from common.identity import Operator
from common.responses import success_response
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import Capability, HasRolePermission

from .calculations import calculate_pg_vg_ratios, calculate_production_amounts
from .models import Fragrance
from .serializers import FragranceSerializer, FragranceWriteSerializer, RatioQuerySerializer
from .services import create_fragrance, delete_fragrance, sync_all_fragrance_usage, update_fragrance


class FragranceBaseView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.CATALOG
    throttle_scope = "catalog_write"


class FragranceListCreateView(generics.ListAPIView, FragranceBaseView):
    serializer_class = FragranceSerializer
    throttle_scope = "catalog"

    def get_queryset(self):
        qs = Fragrance.objects.select_related("supplier").order_by("code")
        params = self.request.query_params
        for name in ("fragrance_type", "fragrance_status", "supplier_id"):
            if params.get(name):
                qs = qs.filter(**{name: params[name]})
        search = params.get("q")
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
        return qs

    @extend_schema(tags=["Fragrance Endpoints"], summary="List fragrances")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Fragrance Endpoints"], summary="Create fragrance", request=FragranceWriteSerializer)
    def post(self, request):
        serializer = FragranceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("remarks", None)
        fragrance = create_fragrance(**data)
        return success_response(FragranceSerializer(fragrance).data, request=request, status=status.HTTP_201_CREATED)


class FragranceDetailView(FragranceBaseView):
    @extend_schema(tags=["Fragrance Endpoints"], summary="Get fragrance", responses=FragranceSerializer)
    def get(self, request, fragrance_id: int):
        fragrance = Fragrance.objects.select_related("supplier").filter(pk=fragrance_id).first()
        if fragrance is None:
            raise NotFound("Fragrance not found")
        return Response(FragranceSerializer(fragrance).data)

    @extend_schema(tags=["Fragrance Endpoints"], summary="Update fragrance", request=FragranceWriteSerializer)
    def patch(self, request, fragrance_id: int):
        serializer = FragranceWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fragrance = update_fragrance(
            fragrance_id=fragrance_id,
            operator=Operator.from_user(request.user),
            **serializer.validated_data,
        )
        return success_response(FragranceSerializer(fragrance).data, request=request)

    @extend_schema(tags=["Fragrance Endpoints"], summary="Delete fragrance")
    def delete(self, request, fragrance_id: int):
        delete_fragrance(fragrance_id=fragrance_id)
        return success_response({"id": fragrance_id, "deleted": True}, request=request)


class FragranceRatioView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "catalog"

    @extend_schema(
        tags=["Fragrance Endpoints"],
        summary="Calculate PG/VG ratios",
        description="Pass `percentage` and optionally `total` to also get production amounts.",
        request=RatioQuerySerializer,
    )
    def post(self, request):
        serializer = RatioQuerySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        percentage = serializer.validated_data["percentage"]
        pg, vg = calculate_pg_vg_ratios(percentage)
        data = {"percentage": percentage, "pg_ratio": pg, "vg_ratio": vg}
        if "total" in serializer.validated_data:
            data["amounts"] = calculate_production_amounts(serializer.validated_data["total"], percentage)
        return success_response(data, request=request)


class FragranceUsageSyncView(FragranceBaseView):
    @extend_schema(
        tags=["Fragrance Endpoints"],
        summary="Recount fragrance usage",
        description="Refresh usage counts and active/standby status of every fragrance not discarded.",
    )
    def post(self, request):
        changed = sync_all_fragrance_usage()
        return success_response({"updated": len(changed), "fragrance_ids": changed}, request=request)
