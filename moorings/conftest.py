import pytest
from rest_framework.test import APIClient

from moorings.users.models import User
from moorings.users.tests.factories import AdminUserFactory
from moorings.users.tests.factories import PremiumUserFactory
from moorings.users.tests.factories import UserFactory


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def premium_user(db) -> User:
    return PremiumUserFactory()


@pytest.fixture
def admin_user(db) -> User:
    return AdminUserFactory()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()
