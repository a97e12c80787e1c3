"""Serializers for personnel, roles and sign-in.

- UserMeSerializer / PersonnelSerializer: read representations.
- Personnel*/Role* request serializers: strict action payloads.
- EmployeeIdTokenObtainPairSerializer: obtain JWTs with employee id + password.
"""

from common.choices import ActiveInactive
from common.serializers import StrictSerializer
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Role, User


class RoleSerializer(serializers.ModelSerializer):
    user_count = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = ["id", "name", "display_name", "description", "permissions", "color", "is_default", "user_count"]
        read_only_fields = fields

    def get_user_count(self, obj) -> int:
        return obj.users.count()


class PersonnelSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "employee_id", "name", "phone", "status", "role", "last_login", "date_joined"]
        read_only_fields = fields

    def get_role(self, obj):
        if obj.role_id is None:
            return None
        return {"id": obj.role_id, "name": obj.role.name, "display_name": obj.role.display_name}


class UserMeSerializer(PersonnelSerializer):
    """Serializer returning profile fields and capabilities for the current user."""

    capabilities = serializers.SerializerMethodField()

    class Meta(PersonnelSerializer.Meta):
        fields = PersonnelSerializer.Meta.fields + ["capabilities", "is_staff"]
        read_only_fields = fields

    def get_capabilities(self, obj) -> list[str]:
        return sorted(obj.capabilities)


class PersonnelCreateSerializer(StrictSerializer):
    name = serializers.CharField(max_length=100)
    employee_id = serializers.CharField(max_length=32)
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    role_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    status = serializers.ChoiceField(choices=ActiveInactive.choices, required=False, default=ActiveInactive.ACTIVE)


class PersonnelUpdateSerializer(StrictSerializer):
    name = serializers.CharField(max_length=100, required=False)
    employee_id = serializers.CharField(max_length=32, required=False)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    role_id = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=ActiveInactive.choices, required=False)


class UserStatusSerializer(StrictSerializer):
    status = serializers.ChoiceField(choices=ActiveInactive.choices)


class RoleWriteSerializer(StrictSerializer):
    name = serializers.CharField(max_length=50)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    permissions = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    color = serializers.CharField(max_length=16, required=False, allow_blank=True)


class AssignRoleSerializer(StrictSerializer):
    role_id = serializers.IntegerField(allow_null=True)


class SignOutSerializer(serializers.Serializer):
    """Request body for signing out (blacklisting refresh token)."""

    refresh = serializers.CharField()


class EmployeeIdTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs by authenticating with employee id and password.

    Inactive personnel are refused with the same generic message as a wrong
    password.
    """

    employee_id = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        employee_id = (attrs.get("employee_id") or "").strip()
        password = attrs.get("password") or ""

        if not employee_id or not password:
            raise serializers.ValidationError({"detail": "employee_id and password are required."})

        try:
            user = User.objects.get(employee_id=employee_id)
        except User.DoesNotExist:
            user = None

        if not user or not user.check_password(password) or not user.is_active:
            raise serializers.ValidationError({"detail": "Invalid credentials."})

        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}
