from datetime import UTC
from datetime import datetime

import pytest

from moorings.billing.constants import SubscriptionStatus
from moorings.users.models import User
from moorings.users.tests.factories import AdminUserFactory
from moorings.users.tests.factories import UserFactory


@pytest.mark.django_db
class TestUserManager:
    def test_new_users_are_free(self):
        user = User.objects.create_user(
            username="skipper",
            email="skipper@example.com",
            password="not-a-real-password",  # noqa: S106
        )

        assert user.subscription_status == SubscriptionStatus.FREE
        assert user.subscription_expires_at is None
        assert str(user) == "skipper@example.com"

    def test_get_by_email_ignores_case(self):
        user = UserFactory(email="Skipper@Example.com")

        assert User.objects.get_by_email("skipper@example.com") == user
        assert User.objects.get_by_email("nobody@example.com") is None

    def test_update_subscription(self):
        user = UserFactory()
        expires_at = datetime(2027, 1, 1, tzinfo=UTC)

        User.objects.update_subscription(user.pk, SubscriptionStatus.PREMIUM, expires_at)

        user.refresh_from_db()
        assert user.subscription_status == SubscriptionStatus.PREMIUM
        assert user.subscription_expires_at == expires_at

    def test_update_billing_refs_leaves_none_fields_alone(self):
        user = UserFactory(stripe_customer_id="cus_1", stripe_subscription_id="sub_1")

        User.objects.update_billing_refs(user.pk, subscription_id="")

        user.refresh_from_db()
        assert user.stripe_customer_id == "cus_1"
        assert user.stripe_subscription_id == ""

    def test_update_billing_refs_with_nothing_to_do(self):
        user = UserFactory()
        assert User.objects.update_billing_refs(user.pk) == 0

    def test_platform_admin_role(self):
        assert AdminUserFactory().is_platform_admin is True
        assert UserFactory().is_platform_admin is False
