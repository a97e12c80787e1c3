import pytest
from common.choices import ActiveInactive
from rest_framework.test import APIClient
from users.tests.factories import RoleFactory, UserFactory


@pytest.mark.django_db
def test_signin_with_employee_id_and_profile():
    role = RoleFactory(name="foreman", permissions=["production"])
    UserFactory(employee_id="E900", name="Lin", role=role)
    client = APIClient()

    resp = client.post("/api/v1/auth/signin/", {"employee_id": "E900", "password": "pass"}, format="json")
    assert resp.status_code == 200
    access = resp.data["access"]
    assert resp.data["refresh"]

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    profile = client.get("/api/v1/account/profile/")
    assert profile.status_code == 200
    assert profile.data["employee_id"] == "E900"
    assert profile.data["name"] == "Lin"
    assert profile.data["capabilities"] == ["production"]
    assert profile.data["role"]["name"] == "foreman"


@pytest.mark.django_db
def test_signin_wrong_password():
    UserFactory(employee_id="E901")
    resp = APIClient().post("/api/v1/auth/signin/", {"employee_id": "E901", "password": "nope"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["error"]["kind"] == "invalid_argument"


@pytest.mark.django_db
def test_inactive_personnel_cannot_sign_in():
    UserFactory(employee_id="E902", status=ActiveInactive.INACTIVE)
    resp = APIClient().post("/api/v1/auth/signin/", {"employee_id": "E902", "password": "pass"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_refresh_and_signout_blacklists_token():
    UserFactory(employee_id="E903")
    client = APIClient()
    tokens = client.post("/api/v1/auth/signin/", {"employee_id": "E903", "password": "pass"}, format="json").data

    refreshed = client.post("/api/v1/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
    assert refreshed.status_code == 200

    # Rotation blacklists the original refresh token
    reused = client.post("/api/v1/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
    assert reused.status_code == 401

    out = client.post("/api/v1/auth/signout/", {"refresh": refreshed.data["refresh"]}, format="json")
    assert out.status_code == 205
    again = client.post("/api/v1/auth/signout/", {"refresh": refreshed.data["refresh"]}, format="json")
    assert again.status_code == 400


@pytest.mark.django_db
def test_signout_requires_refresh():
    resp = APIClient().post("/api/v1/auth/signout/", {}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_profile_requires_authentication():
    resp = APIClient().get("/api/v1/account/profile/")
    assert resp.status_code == 401
    assert resp.json()["error"]["kind"] == "permission_denied"
