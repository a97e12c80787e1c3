"""Users app API views.

Endpoints include:
- signin/refresh/verify/signout: JWT session lifecycle keyed by employee id.
- me: returns the current authenticated user's profile and capabilities.
- personnel: list/create/update/delete staff accounts, toggle status, assign roles.
- roles: list/create/update/delete roles and seed the default roles.
"""

from common.errors import NotFound
from common.responses import success_response
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from .logging import log_auth_event
from .models import Role, User
from .permissions import Capability, HasRolePermission
from .serializers import (
    AssignRoleSerializer,
    EmployeeIdTokenObtainPairSerializer,
    PersonnelCreateSerializer,
    PersonnelSerializer,
    PersonnelUpdateSerializer,
    RoleSerializer,
    RoleWriteSerializer,
    UserMeSerializer,
    UserStatusSerializer,
)
from .services import (
    assign_role,
    create_personnel,
    create_role,
    delete_personnel,
    delete_role,
    initialize_default_roles,
    set_user_status,
    update_personnel,
    update_role,
)


@extend_schema(
    operation_id="users_current_user",
    summary="Get current user profile",
    description=(
        "Returns the current authenticated user's profile and role capabilities.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth."
    ),
    tags=["User Endpoints"],
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    """Return the authenticated user's profile fields."""
    log_auth_event("profile", request, user=request.user)
    serializer = UserMeSerializer(request.user)
    return Response(serializer.data)


# Throttle scope for profile endpoint
current_user.throttle_scope = "profile"


class SignOutView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"])
    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh)
            token.blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request, status="success")
        return Response({"detail": "Signed out."}, status=status.HTTP_205_RESET_CONTENT)


class SignInView(TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmployeeIdTokenObtainPairSerializer

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("signin", request, status=status_label, extra={"employee_id": request.data.get("employee_id")})
        return resp


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_refresh", request, status=status_label)
        return resp


class VerifyView(TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_verify", request, status=status_label)
        return resp


class PersonnelBaseView(APIView):
    permission_classes = [IsAuthenticated, HasRolePermission]
    required_permission = Capability.PERSONNEL
    throttle_scope = "personnel_write"


class PersonnelListCreateView(generics.ListAPIView, PersonnelBaseView):
    serializer_class = PersonnelSerializer
    throttle_scope = "personnel"

    def get_queryset(self):
        qs = User.objects.select_related("role").order_by("employee_id", "id")
        status_filter = self.request.query_params.get("status")
        role_id = self.request.query_params.get("role_id")
        if status_filter:
            qs = qs.filter(status=status_filter)
        if role_id:
            qs = qs.filter(role_id=role_id)
        return qs

    @extend_schema(tags=["Personnel Endpoints"], summary="List personnel")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Personnel Endpoints"], summary="Create personnel", request=PersonnelCreateSerializer)
    def post(self, request):
        serializer = PersonnelCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = create_personnel(**serializer.validated_data)
        return success_response(PersonnelSerializer(user).data, request=request, status=status.HTTP_201_CREATED)


class PersonnelDetailView(PersonnelBaseView):
    @extend_schema(tags=["Personnel Endpoints"], summary="Get personnel", responses=PersonnelSerializer)
    def get(self, request, user_id: int):
        user = User.objects.select_related("role").filter(pk=user_id).first()
        if user is None:
            raise NotFound("User not found")
        return Response(PersonnelSerializer(user).data)

    @extend_schema(tags=["Personnel Endpoints"], summary="Update personnel", request=PersonnelUpdateSerializer)
    def patch(self, request, user_id: int):
        serializer = PersonnelUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        kwargs = {}
        if "role_id" in data:
            kwargs["role_id"] = data.pop("role_id")
        user = update_personnel(user_id=user_id, password=data.pop("password", None), **kwargs, **data)
        return success_response(PersonnelSerializer(user).data, request=request)

    @extend_schema(tags=["Personnel Endpoints"], summary="Delete personnel")
    def delete(self, request, user_id: int):
        delete_personnel(user_id=user_id, actor=request.user)
        return success_response({"id": user_id, "deleted": True}, request=request)


class PersonnelStatusView(PersonnelBaseView):
    @extend_schema(tags=["Personnel Endpoints"], summary="Activate or deactivate personnel", request=UserStatusSerializer)
    def post(self, request, user_id: int):
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = set_user_status(user_id=user_id, status=serializer.validated_data["status"], actor=request.user)
        return success_response(PersonnelSerializer(user).data, request=request)


class PersonnelRoleView(PersonnelBaseView):
    @extend_schema(tags=["Personnel Endpoints"], summary="Assign a role", request=AssignRoleSerializer)
    def post(self, request, user_id: int):
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = assign_role(user_id=user_id, role_id=serializer.validated_data["role_id"])
        return success_response(PersonnelSerializer(user).data, request=request)


class RoleListCreateView(generics.ListAPIView, PersonnelBaseView):
    serializer_class = RoleSerializer
    throttle_scope = "personnel"
    queryset = Role.objects.order_by("name")

    @extend_schema(tags=["Role Endpoints"], summary="List roles")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(tags=["Role Endpoints"], summary="Create role", request=RoleWriteSerializer)
    def post(self, request):
        serializer = RoleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = create_role(**serializer.validated_data)
        return success_response(RoleSerializer(role).data, request=request, status=status.HTTP_201_CREATED)


class RoleDetailView(PersonnelBaseView):
    @extend_schema(tags=["Role Endpoints"], summary="Update role", request=RoleWriteSerializer)
    def patch(self, request, role_id: int):
        serializer = RoleWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        role = update_role(role_id=role_id, **serializer.validated_data)
        return success_response(RoleSerializer(role).data, request=request)

    @extend_schema(tags=["Role Endpoints"], summary="Delete role")
    def delete(self, request, role_id: int):
        delete_role(role_id=role_id)
        return success_response({"id": role_id, "deleted": True}, request=request)


class RoleInitializeView(PersonnelBaseView):
    @extend_schema(tags=["Role Endpoints"], summary="Create default roles when none exist")
    def post(self, request):
        created = initialize_default_roles()
        return success_response(
            {"created": RoleSerializer(created, many=True).data, "count": len(created)},
            request=request,
        )
