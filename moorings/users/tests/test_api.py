from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from moorings.users.tests.factories import PremiumUserFactory


@pytest.mark.django_db
class TestAuthMe:
    url = reverse("api:auth-me")

    def test_requires_authentication(self, api_client):
        response = api_client.get(self.url)
        assert response.status_code in (401, 403)

    def test_free_user(self, api_client, user):
        api_client.force_authenticate(user)

        response = api_client.get(self.url)

        assert response.status_code == 200
        assert response.data["email"] == user.email
        assert response.data["role"] == "user"
        assert response.data["subscription_status"] == "free"
        assert response.data["subscription_state"] == "free"
        assert response.data["is_premium"] is False

    def test_premium_user(self, api_client, premium_user):
        api_client.force_authenticate(premium_user)

        response = api_client.get(self.url)

        assert response.data["subscription_state"] == "premium"
        assert response.data["is_premium"] is True

    def test_lapsed_premium_reads_as_free(self, api_client):
        lapsed = PremiumUserFactory(
            subscription_expires_at=timezone.now() - timedelta(days=1),
        )
        api_client.force_authenticate(lapsed)

        response = api_client.get(self.url)

        assert response.data["subscription_status"] == "premium"
        assert response.data["is_premium"] is False
        assert response.data["subscription_state"] == "free"

    def test_token_login(self, api_client, user):
        user.set_password("harbour-lights-42")
        user.save()

        response = api_client.post(
            reverse("obtain_auth_token"),
            {"username": user.username, "password": "harbour-lights-42"},
            format="json",
        )
        assert response.status_code == 200

        api_client.credentials(HTTP_AUTHORIZATION=f"Token {response.data['token']}")
        me = api_client.get(self.url)
        assert me.data["id"] == user.pk


@pytest.mark.django_db
class TestAdminUsers:
    url = reverse("api:admin-user-list")

    def test_admin_lists_users(self, api_client, admin_user, user):
        api_client.force_authenticate(admin_user)

        response = api_client.get(self.url)

        assert response.status_code == 200
        assert {row["id"] for row in response.data} == {admin_user.pk, user.pk}

    def test_regular_user_is_forbidden(self, api_client, user):
        api_client.force_authenticate(user)

        response = api_client.get(self.url)

        assert response.status_code == 403
        assert response.data["detail"] == "Admin access required."
