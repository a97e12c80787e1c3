import factory
from factory import Faker
from factory.django import DjangoModelFactory
from rest_framework.test import APIClient
from users.models import Role, User


class RoleFactory(DjangoModelFactory):
    class Meta:
        model = Role
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"role{n}")
    display_name = factory.LazyAttribute(lambda o: o.name.title())
    permissions = factory.LazyFunction(list)


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User

    employee_id = factory.Sequence(lambda n: f"E{n:04d}")
    username = factory.LazyAttribute(lambda o: o.employee_id)
    name = Faker("name")
    password = factory.PostGenerationMethodCall("set_password", "pass")


def user_with(*capabilities, **kwargs) -> User:
    role = RoleFactory(name="-".join(capabilities) or "none", permissions=list(capabilities))
    return UserFactory(role=role, **kwargs)


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client
