import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from ghiblify.exceptions import GhiblifyError, UpstreamServiceError

logger = logging.getLogger(__name__)


def exception_handler(exc, context):
    """
    Custom exception handler for DRF that returns consistent error format.

    Domain errors are rendered from their own status/code; DRF errors are
    rendered by DRF first and then reshaped.
    """
    if isinstance(exc, GhiblifyError):
        if isinstance(exc, UpstreamServiceError):
            logger.warning(
                "Upstream %s failed with status %s: %s",
                exc.service,
                exc.upstream_status,
                exc.message,
            )
        errors = getattr(exc, "errors", None)
        return Response(
            format_error(
                code=exc.default_code,
                message=exc.message,
                errors=errors,
                details=None if errors is not None else exc.details,
            ),
            status=exc.status_code,
        )

    response = drf_exception_handler(exc, context)

    if response:
        if isinstance(exc, drf_exceptions.ValidationError):
            response.data = format_error(
                code="validation_error",
                message="Invalid request",
                errors=(
                    response.data
                    if isinstance(response.data, dict)
                    else {"non_field_errors": response.data}
                ),
            )
        else:
            detail = getattr(exc, "detail", exc)
            # simplejwt wraps its message in a dict alongside the token messages.
            if isinstance(detail, dict):
                detail = detail.get("detail", detail)
            response.data = format_error(
                code=getattr(exc, "default_code", "error"),
                message=str(detail),
            )

    return response


def format_error(code: str, message: str, errors=None, details=None):
    body = {
        "code": str(code).upper(),
        "message": message,
    }
    if errors is not None:
        body["errors"] = errors
    if details:
        body["details"] = details
    return body
