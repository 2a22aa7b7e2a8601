import logging

from celery import shared_task
from django.conf import settings

from ghiblify.services import get_lifecycle

logger = logging.getLogger(__name__)


@shared_task(name="ghiblify.tasks.reconcile_processing_transformations")
def reconcile_processing_transformations():
    """
    Periodic task that finalizes transformations nobody polled to the end.

    Records still `processing` after TRANSFORM_RECONCILE_AFTER are refreshed
    from Replicate; stale `pending` records are failed and refunded.
    """
    count = get_lifecycle().reconcile_stale(settings.TRANSFORM_RECONCILE_AFTER)
    logger.info("Reconciliation finalized %s transformation(s)", count)
    return count
