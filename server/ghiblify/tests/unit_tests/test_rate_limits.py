from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from ghiblify.models import User


@override_settings(RATELIMIT_ENABLE=True)
class RateLimitTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        User.objects.create_user("limited@example.com", "secret123")

    def tearDown(self):
        cache.clear()

    def test_login_is_rate_limited_per_ip(self):
        for _ in range(10):
            response = self.client.post(
                "/api/auth/login",
                {"email": "limited@example.com", "password": "wrong-password"},
                format="json",
            )
            self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/api/auth/login",
            {"email": "limited@example.com", "password": "secret123"},
            format="json",
        )

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.data["code"], "RATE_LIMITED")
