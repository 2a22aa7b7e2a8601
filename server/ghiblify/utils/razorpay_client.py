import hashlib
import hmac
import logging
from typing import Dict, Optional

import requests

from ghiblify.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "razorpay"


class RazorpayClient:
    """Client for the Razorpay Orders API and checkout signatures"""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: Optional[float] = 30,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def create_order(self, amount: int, currency: str, receipt: str, notes: Optional[Dict] = None) -> Dict:
        """
        Create an order the checkout widget can be opened against

        Args:
            amount: Amount in the currency's minor unit (paise for INR)
            currency: ISO currency code
            receipt: Merchant reference, at most 40 characters
            notes: Free-form key/value metadata stored with the order

        Returns:
            dict with the order id, amount, currency and status
        """
        url = f"{self.base_url}/orders"
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt[:40],
            "notes": notes or {},
        }

        try:
            response = requests.post(
                url,
                auth=(self.key_id, self.key_secret),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamServiceError(SERVICE_NAME, f"Payment gateway unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}

        if not response.ok:
            logger.error("Razorpay API error (%s): %s", response.status_code, body)
            error = body.get("error") if isinstance(body, dict) else None
            message = (error or {}).get("description") or "Error from payment gateway"
            raise UpstreamServiceError(
                SERVICE_NAME,
                message,
                status_code=response.status_code,
                details=body,
            )

        if not isinstance(body, dict) or not body.get("id"):
            raise UpstreamServiceError(SERVICE_NAME, f"Unexpected response from payment gateway: {body}")

        return body

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check a checkout signature: HMAC-SHA256 of "order_id|payment_id" keyed with the secret."""
        message = f"{order_id}|{payment_id}".encode()
        expected = hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature or "")
