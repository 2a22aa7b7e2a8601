from .razorpay_client import RazorpayClient
from .replicate_client import ReplicateClient
from .exceptions import exception_handler, format_error

__all__ = [
    "RazorpayClient",
    "ReplicateClient",
    "exception_handler",
    "format_error",
]
