from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from ghiblify.exceptions import (
    InsufficientCreditsError,
    PayloadTooLargeError,
    UpstreamServiceError,
    ValidationError,
)
from ghiblify.models import User
from ghiblify.utils import exception_handler, format_error


class FormatErrorTest(SimpleTestCase):
    def test_code_is_upper_cased(self):
        body = format_error(code="not_found", message="Not found")

        self.assertEqual(body, {"code": "NOT_FOUND", "message": "Not found"})

    def test_errors_and_details_are_optional(self):
        body = format_error(code="x", message="y", errors={"field": ["bad"]}, details={"a": 1})

        self.assertEqual(body["errors"], {"field": ["bad"]})
        self.assertEqual(body["details"], {"a": 1})


class DomainErrorRenderingTest(SimpleTestCase):
    def test_insufficient_credits(self):
        response = exception_handler(InsufficientCreditsError(credits_available=0, credits_needed=1), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "INSUFFICIENT_CREDITS")
        self.assertEqual(response.data["details"], {"credits_available": 0, "credits_needed": 1})

    def test_validation_error_uses_errors_key(self):
        response = exception_handler(ValidationError("Bad", errors={"image": ["Required"]}), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["errors"], {"image": ["Required"]})
        self.assertNotIn("details", response.data)

    def test_payload_too_large(self):
        response = exception_handler(PayloadTooLargeError(size=6 * 1024 * 1024, max_size=5 * 1024 * 1024), {})

        self.assertEqual(response.status_code, 413)
        self.assertEqual(response.data["message"], "Image must be under 5MB")

    def test_upstream_status_is_kept_or_defaults_to_502(self):
        kept = exception_handler(UpstreamServiceError("replicate", "boom", status_code=429), {})
        fallback = exception_handler(UpstreamServiceError("replicate", "boom", status_code=200), {})
        missing = exception_handler(UpstreamServiceError("replicate", "boom"), {})

        self.assertEqual(kept.status_code, 429)
        self.assertEqual(fallback.status_code, 502)
        self.assertEqual(missing.status_code, 502)

    def test_unknown_exceptions_are_left_to_django(self):
        self.assertIsNone(exception_handler(RuntimeError("boom"), {}))


class DrfErrorRenderingTest(TestCase):
    def test_not_authenticated_format(self):
        response = APIClient().get("/api/user/me")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["code"], "NOT_AUTHENTICATED")
        self.assertIn("message", response.data)

    def test_method_not_allowed_format(self):
        client = APIClient()
        client.force_authenticate(user=User.objects.create_user("m@example.com", "secret123"))

        response = client.delete("/api/user/me")

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.data["code"], "METHOD_NOT_ALLOWED")

    def test_validation_format(self):
        response = APIClient().post("/api/auth/login", {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertIn("email", response.data["errors"])
        self.assertIn("password", response.data["errors"])
