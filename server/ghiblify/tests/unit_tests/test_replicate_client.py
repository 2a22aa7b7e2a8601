from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase

from ghiblify.exceptions import UpstreamServiceError
from ghiblify.utils.replicate_client import ReplicateClient, first_output_url


def make_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = body if body is not None else {}
    return response


class ReplicateClientTest(SimpleTestCase):
    def setUp(self):
        self.client = ReplicateClient(api_token="r8_test", model_version="abc123")

    @patch("ghiblify.utils.replicate_client.requests.post")
    def test_create_prediction_success(self, mock_post):
        mock_post.return_value = make_response(201, {"id": "pred_1", "status": "starting"})

        result = self.client.create_prediction(image_url="https://example.com/img.jpg", prompt="ghibli")

        self.assertEqual(result["id"], "pred_1")
        self.assertEqual(mock_post.call_args[0][0], "https://api.replicate.com/v1/predictions")
        payload = mock_post.call_args[1]["json"]
        self.assertEqual(payload["version"], "abc123")
        self.assertEqual(payload["input"], {"image": "https://example.com/img.jpg", "prompt": "ghibli"})
        self.assertEqual(mock_post.call_args[1]["headers"]["Authorization"], "Bearer r8_test")
        self.assertEqual(mock_post.call_args[1]["timeout"], 30)

    @patch("ghiblify.utils.replicate_client.requests.post")
    def test_create_prediction_surfaces_upstream_status(self, mock_post):
        mock_post.return_value = make_response(422, {"detail": "Invalid version or not permitted"})

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.client.create_prediction(image_url="https://example.com/img.jpg", prompt="ghibli")

        self.assertEqual(ctx.exception.status_code, 422)
        self.assertEqual(ctx.exception.details, {"detail": "Invalid version or not permitted"})

    @patch("ghiblify.utils.replicate_client.requests.post")
    def test_create_prediction_network_error(self, mock_post):
        mock_post.side_effect = requests.Timeout("timed out")

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.client.create_prediction(image_url="https://example.com/img.jpg", prompt="ghibli")

        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(ctx.exception.service, "replicate")

    @patch("ghiblify.utils.replicate_client.requests.post")
    def test_create_prediction_without_id(self, mock_post):
        mock_post.return_value = make_response(201, {"status": "starting"})

        with self.assertRaises(UpstreamServiceError):
            self.client.create_prediction(image_url="https://example.com/img.jpg", prompt="ghibli")

    @patch("ghiblify.utils.replicate_client.requests.get")
    def test_get_prediction(self, mock_get):
        mock_get.return_value = make_response(
            200, {"id": "pred_1", "status": "succeeded", "output": ["https://out.png"]}
        )

        result = self.client.get_prediction("pred_1")

        self.assertEqual(result["status"], "succeeded")
        self.assertEqual(mock_get.call_args[0][0], "https://api.replicate.com/v1/predictions/pred_1")

    @patch("ghiblify.utils.replicate_client.requests.get")
    def test_get_prediction_not_found(self, mock_get):
        mock_get.return_value = make_response(404, {"detail": "Not found."})

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.client.get_prediction("pred_missing")

        self.assertEqual(ctx.exception.status_code, 404)


class FirstOutputUrlTest(SimpleTestCase):
    def test_string_and_list_outputs(self):
        self.assertEqual(first_output_url("https://a.png"), "https://a.png")
        self.assertEqual(first_output_url(["https://a.png", "https://b.png"]), "https://a.png")
        self.assertEqual(first_output_url(["", "https://b.png"]), "https://b.png")

    def test_missing_output(self):
        self.assertIsNone(first_output_url(None))
        self.assertIsNone(first_output_url([]))
        self.assertIsNone(first_output_url(""))
