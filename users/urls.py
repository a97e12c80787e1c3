"""Aggregate user namespaces under /api/v1/.

Auth routes live in ``users.auth_urls``; personnel and role management
routes are declared here.
"""

from django.urls import include, path

from .views import (
    PersonnelDetailView,
    PersonnelListCreateView,
    PersonnelRoleView,
    PersonnelStatusView,
    RoleDetailView,
    RoleInitializeView,
    RoleListCreateView,
    current_user,
)

urlpatterns = [
    path("auth/", include("users.auth_urls")),
    path("account/profile/", current_user, name="profile"),
    path("personnel/", PersonnelListCreateView.as_view(), name="personnel-list"),
    path("personnel/<int:user_id>/", PersonnelDetailView.as_view(), name="personnel-detail"),
    path("personnel/<int:user_id>/status/", PersonnelStatusView.as_view(), name="personnel-status"),
    path("personnel/<int:user_id>/role/", PersonnelRoleView.as_view(), name="personnel-role"),
    path("roles/", RoleListCreateView.as_view(), name="role-list"),
    path("roles/initialize/", RoleInitializeView.as_view(), name="role-initialize"),
    path("roles/<int:role_id>/", RoleDetailView.as_view(), name="role-detail"),
]
