import logging
from typing import Dict, Optional

import requests

from ghiblify.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "replicate"


class ReplicateClient:
    """Client for the Replicate predictions API"""

    def __init__(
        self,
        api_token: str,
        model_version: str,
        base_url: str = "https://api.replicate.com/v1",
        timeout: Optional[float] = 30,
    ):
        self.api_token = api_token
        self.model_version = model_version
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_token}'
        }

    def create_prediction(self, image_url: str, prompt: str) -> Dict:
        """
        Start a transformation job

        Args:
            image_url: Publicly reachable URL of the source image
            prompt: Style directive for the model

        Returns:
            dict with the prediction id and its initial status
        """
        url = f"{self.base_url}/predictions"
        payload = {
            'version': self.model_version,
            'input': {
                'image': image_url,
                'prompt': prompt,
            }
        }

        try:
            response = requests.post(url, headers=self.headers, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamServiceError(SERVICE_NAME, f"Transformation service unreachable: {exc}") from exc

        return self._parse(response, "Error from transformation service")

    def get_prediction(self, prediction_id: str) -> Dict:
        """
        Fetch the current state of a transformation job

        Args:
            prediction_id: The id returned by `create_prediction`

        Returns:
            dict with status and, once succeeded, output
        """
        url = f"{self.base_url}/predictions/{prediction_id}"

        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamServiceError(SERVICE_NAME, f"Transformation service unreachable: {exc}") from exc

        return self._parse(response, "Error retrieving transformation status")

    @staticmethod
    def _parse(response, message: str) -> Dict:
        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}

        if not response.ok:
            logger.error("Replicate API error (%s): %s", response.status_code, body)
            raise UpstreamServiceError(
                SERVICE_NAME,
                message,
                status_code=response.status_code,
                details=body,
            )

        if not isinstance(body, dict) or not body.get("id"):
            raise UpstreamServiceError(SERVICE_NAME, f"Unexpected response from transformation service: {body}")

        return body


def first_output_url(output) -> Optional[str]:
    """Return the first image URL of a prediction output (a string or a list of strings)."""
    if isinstance(output, str):
        return output or None
    if isinstance(output, (list, tuple)):
        for item in output:
            if isinstance(item, str) and item:
                return item
    return None
