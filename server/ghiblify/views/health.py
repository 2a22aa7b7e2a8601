import logging

from celery import current_app
from django.conf import settings
from django.core.cache import cache
from django.db import connection
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)

OK = "ok"


def _check_database():
    connection.ensure_connection()
    return OK


def _check_cache():
    cache.set("ghiblify:health", OK, 10)
    return OK if cache.get("ghiblify:health") == OK else "error"


def _check_celery():
    broker_url = (getattr(settings, "CELERY_BROKER_URL", "") or "").strip()
    if not broker_url or broker_url.startswith("memory://"):
        return "not configured"
    inspector = current_app.control.inspect(timeout=1)
    return OK if inspector and inspector.ping() else "no workers"


CHECKS = {
    "database": _check_database,
    "cache": _check_cache,
    "celery": _check_celery,
}

# Components whose failure makes the API unable to serve requests.
CRITICAL = ("database", "cache")


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint for monitoring.
    """
    checks = {}
    for name, check in CHECKS.items():
        try:
            checks[name] = check()
        except Exception as exc:
            logger.error("Health check %s failed: %s", name, exc)
            checks[name] = f"error: {exc}"

    healthy = all(checks[name] == OK for name in CRITICAL)

    return Response(
        {"status": "healthy" if healthy else "degraded", "checks": checks},
        status=200 if healthy else 503,
    )
