"""Domain errors raised by the ghiblify services.

Each error carries the HTTP status and stable code the API answers with; the
DRF exception handler in `ghiblify.utils.exceptions` does the rendering.
"""


class GhiblifyError(Exception):
    """Base class for errors that map onto an API response."""

    status_code = 400
    default_code = "error"
    default_message = "Request failed"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(GhiblifyError):
    """Raised when a request body or uploaded file is malformed"""

    default_code = "validation_error"
    default_message = "Invalid request"

    def __init__(self, message=None, errors=None):
        super().__init__(message, details=errors)
        self.errors = errors


class UnsupportedMediaError(GhiblifyError):
    """Raised when an uploaded image is not one of the accepted formats"""

    status_code = 415
    default_code = "unsupported_media"
    default_message = "Invalid file type. Only JPG, PNG, and WEBP images are supported."


class PayloadTooLargeError(GhiblifyError):
    """Raised when an uploaded image exceeds the size ceiling"""

    status_code = 413
    default_code = "payload_too_large"

    def __init__(self, size, max_size):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Image must be under {max_size // (1024 * 1024)}MB",
            details={"size": size, "max_size": max_size},
        )


class AuthenticationError(GhiblifyError):
    """Raised when credentials or a bearer token are missing or invalid"""

    status_code = 401
    default_code = "authentication_failed"
    default_message = "Invalid email or password"


class AuthorizationError(GhiblifyError):
    """Raised when a non-admin calls an admin operation"""

    status_code = 403
    default_code = "permission_denied"
    default_message = "Admin access required"


class NotFoundError(GhiblifyError):
    status_code = 404
    default_code = "not_found"
    default_message = "Not found"


class InsufficientCreditsError(GhiblifyError):
    """Raised when user doesn't have enough credits"""

    status_code = 403
    default_code = "insufficient_credits"

    def __init__(self, credits_available, credits_needed):
        self.credits_available = credits_available
        self.credits_needed = credits_needed
        super().__init__(
            f"Insufficient credits. Have {credits_available}, need {credits_needed}",
            details={
                "credits_available": credits_available,
                "credits_needed": credits_needed,
            },
        )


class DuplicateUserError(GhiblifyError):
    """Raised when registering an email that already has an account"""

    status_code = 409
    default_code = "duplicate_user"

    def __init__(self, email=None):
        self.email = email
        super().__init__("A user with this email already exists")


class AlreadyVerifiedError(GhiblifyError):
    """Raised when the one-time Instagram bonus was already granted"""

    status_code = 409
    default_code = "already_verified"
    default_message = "Instagram account already verified"


class SignatureMismatchError(GhiblifyError):
    """Raised when a payment signature does not match the order and payment ids"""

    default_code = "signature_mismatch"
    default_message = "Payment signature verification failed"


class UpstreamServiceError(GhiblifyError):
    """
    Raised when the image host, the transformation service or the payment
    gateway fails. The upstream status and payload are surfaced unchanged.
    """

    default_code = "upstream_error"

    def __init__(self, service, message, status_code=None, details=None):
        self.service = service
        self.upstream_status = status_code
        if status_code and 400 <= int(status_code) <= 599:
            self.status_code = int(status_code)
        else:
            self.status_code = 502
        super().__init__(message, details=details)


class RateLimitedError(GhiblifyError):
    """Raised by django-ratelimit when a caller exceeds an endpoint's rate"""

    status_code = 429
    default_code = "rate_limited"
    default_message = "Too many requests, slow down"
