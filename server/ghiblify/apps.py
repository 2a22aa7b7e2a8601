from django.apps import AppConfig
from django.conf import settings


class GhiblifyConfig(AppConfig):
    name = "ghiblify"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        """Build the process-wide collaborators views reach through `ghiblify.services`."""
        from ghiblify.services import CreditLedger, PaymentService, TransformationLifecycle
        from ghiblify.utils import RazorpayClient, ReplicateClient

        self.replicate = ReplicateClient(
            api_token=settings.REPLICATE_API_TOKEN,
            model_version=settings.REPLICATE_MODEL_VERSION,
            base_url=settings.REPLICATE_API_URL,
            timeout=settings.REPLICATE_TIMEOUT_SECONDS,
        )
        self.razorpay = RazorpayClient(
            key_id=settings.RAZORPAY_KEY_ID,
            key_secret=settings.RAZORPAY_KEY_SECRET,
            base_url=settings.RAZORPAY_API_URL,
            timeout=settings.RAZORPAY_TIMEOUT_SECONDS,
        )

        self.ledger = CreditLedger()
        self.lifecycle = TransformationLifecycle(
            ledger=self.ledger,
            client=self.replicate,
            max_upload_bytes=settings.TRANSFORM_MAX_UPLOAD_BYTES,
        )
        self.payments = PaymentService(
            client=self.razorpay,
            ledger=self.ledger,
            key_id=settings.RAZORPAY_KEY_ID,
        )
