"""Transformation lifecycle.

A transformation moves ``pending -> processing -> succeeded | failed``. The
credit is taken before anything leaves the process and handed back when the
upload or the remote call fails during submission. Once the remote job was
accepted the credit stays spent, whatever the job's outcome.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

import cloudinary.uploader
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from PIL import Image, UnidentifiedImageError

from ghiblify.const import ALLOWED_IMAGE_FORMATS, GENERATION_COST, STYLE_PROMPT
from ghiblify.exceptions import (
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaError,
    UpstreamServiceError,
    ValidationError,
)
from ghiblify.models import CreditTransaction, Transformation
from ghiblify.utils.replicate_client import first_output_url

logger = logging.getLogger(__name__)

REMOTE_STATUS_MAP = {
    "starting": Transformation.STATUS_PROCESSING,
    "processing": Transformation.STATUS_PROCESSING,
    "succeeded": Transformation.STATUS_SUCCEEDED,
    "failed": Transformation.STATUS_FAILED,
    "canceled": Transformation.STATUS_FAILED,
}


def map_remote_status(remote_status):
    """Translate a Replicate prediction status into a transformation status."""
    status = REMOTE_STATUS_MAP.get(remote_status)
    if status is None:
        logger.warning("Unknown prediction status %r, treating as processing", remote_status)
        return Transformation.STATUS_PROCESSING
    return status


@dataclass(frozen=True)
class SubmitResult:
    transformation: Transformation
    remaining_credits: int


class TransformationLifecycle:
    """Drives transformations through submission, polling and finalization."""

    def __init__(self, ledger, client, max_upload_bytes=5 * 1024 * 1024):
        self.ledger = ledger
        self.client = client
        self.max_upload_bytes = max_upload_bytes

    def validate_image(self, image_file, mime_type):
        """
        Check type, size and that the payload really is an image.

        Raises:
            UnsupportedMediaError: For anything but JPEG, PNG or WEBP.
            PayloadTooLargeError: Above the upload ceiling.
            ValidationError: If Pillow cannot decode the payload or its
                dimensions are beyond Pillow's decompression limit.
        """
        if mime_type not in ALLOWED_IMAGE_FORMATS:
            raise UnsupportedMediaError()

        size = getattr(image_file, "size", None)
        if size is None:
            image_file.seek(0, 2)
            size = image_file.tell()
        if size > self.max_upload_bytes:
            raise PayloadTooLargeError(size=size, max_size=self.max_upload_bytes)

        try:
            image_file.seek(0)
            with Image.open(image_file) as img:
                image_format = img.format
                img.verify()
        except Image.DecompressionBombError as exc:
            raise ValidationError(
                "Image dimensions are too large",
                errors={"image": [str(exc)]},
            ) from exc
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValidationError(
                "Uploaded file is not a valid image",
                errors={"image": [str(exc) or "Could not decode image."]},
            ) from exc
        finally:
            image_file.seek(0)

        # The declared content type must match what the bytes decode as.
        if image_format not in ALLOWED_IMAGE_FORMATS[mime_type]:
            logger.info("Rejected %s payload declared as %s", image_format, mime_type)
            raise UnsupportedMediaError()

    def submit(self, user, image_file, mime_type):
        """
        Validate, pay for and start a transformation.

        Returns:
            SubmitResult with the `processing` record and the balance left.

        Raises:
            InsufficientCreditsError: Nothing is stored or uploaded.
            UpstreamServiceError: After the credit was refunded and the record
                marked failed.
        """
        self.validate_image(image_file, mime_type)

        with transaction.atomic():
            record = Transformation.objects.create(user=user, status=Transformation.STATUS_PENDING)
            self.ledger.debit(
                user.pk,
                GENERATION_COST,
                reason=CreditTransaction.REASON_GENERATION,
                transformation=record,
            )

        try:
            record.original_image = self._upload_original(image_file)
            prediction = self.client.create_prediction(record.original_image, STYLE_PROMPT)
        except UpstreamServiceError as exc:
            self._fail_and_refund(record, exc.message)
            raise

        record.remote_job_id = prediction["id"]
        record.status = Transformation.STATUS_PROCESSING
        record.save(update_fields=["original_image", "remote_job_id", "status", "updated_at"])

        logger.info(
            "Transformation %s submitted as prediction %s for user %s",
            record.id,
            record.remote_job_id,
            user.pk,
        )
        return SubmitResult(transformation=record, remaining_credits=self.ledger.balance(user.pk))

    def poll_status(self, user, remote_job_id):
        """Return the user's record, refreshed from Replicate while it is still running."""
        try:
            record = Transformation.objects.get(user=user, remote_job_id=remote_job_id)
        except Transformation.DoesNotExist:
            raise NotFoundError("Transformation not found")

        if record.is_terminal:
            return record

        prediction = self.client.get_prediction(remote_job_id)
        return self.finalize_if_terminal(record, prediction)

    def finalize_if_terminal(self, record, prediction):
        """
        Write the outcome of a finished prediction onto its record.

        Safe to call any number of times; a record that is already terminal is
        returned unchanged. Never touches the ledger.

        A successful output is copied to Cloudinary before the row is written.

        Raises:
            UpstreamServiceError: If the output could not be stored; the
                record stays `processing` and is retried on the next poll.
        """
        status = map_remote_status(prediction.get("status"))
        if status not in Transformation.TERMINAL_STATUSES:
            return record

        transformed_image = None
        if status == Transformation.STATUS_SUCCEEDED:
            current = Transformation.objects.get(pk=record.pk)
            if current.is_terminal:
                return current
            output_url = first_output_url(prediction.get("output"))
            if output_url:
                transformed_image = self._store_output(output_url)

        with transaction.atomic():
            locked = Transformation.objects.select_for_update().get(pk=record.pk)
            if locked.is_terminal:
                return locked

            locked.status = status
            locked.completed_at = timezone.now()
            if status == Transformation.STATUS_SUCCEEDED:
                locked.transformed_image = transformed_image
            else:
                locked.error_message = str(prediction.get("error") or "Transformation failed")
            locked.save(update_fields=["status", "transformed_image", "error_message", "completed_at", "updated_at"])

        logger.info("Transformation %s finalized as %s", locked.id, locked.status)
        return locked

    def reconcile_stale(self, older_than=timedelta(minutes=10)):
        """
        Converge records whose client stopped polling.

        Stale `processing` records are refreshed from Replicate. Stale
        `pending` records never reached Replicate, so they are failed and
        refunded. Returns the number of records that reached a terminal state.
        """
        cutoff = timezone.now() - older_than
        finalized = 0

        stale = Transformation.objects.filter(
            status=Transformation.STATUS_PROCESSING,
            updated_at__lt=cutoff,
        ).exclude(remote_job_id__isnull=True)

        for record in stale.iterator():
            try:
                prediction = self.client.get_prediction(record.remote_job_id)
                record = self.finalize_if_terminal(record, prediction)
            except UpstreamServiceError as exc:
                logger.error("Could not reconcile transformation %s: %s", record.id, exc.message)
                continue
            if record.is_terminal:
                finalized += 1

        orphans = Transformation.objects.filter(
            status=Transformation.STATUS_PENDING,
            updated_at__lt=cutoff,
        )
        for record in orphans.iterator():
            if self._fail_and_refund(record, "Submission did not complete"):
                finalized += 1

        logger.info("Reconciled %s stale transformation(s)", finalized)
        return finalized

    def _upload_original(self, image_file):
        try:
            image_file.seek(0)
            result = cloudinary.uploader.upload(
                image_file,
                folder=settings.CLOUDINARY_ORIGINALS_FOLDER,
                resource_type="image",
            )
        except Exception as exc:
            logger.exception("Cloudinary upload failed")
            raise UpstreamServiceError("cloudinary", "Failed to upload image") from exc
        return result["secure_url"]

    def _store_output(self, output_url):
        try:
            result = cloudinary.uploader.upload(
                output_url,
                folder=settings.CLOUDINARY_RESULTS_FOLDER,
                resource_type="image",
            )
        except Exception as exc:
            logger.exception("Cloudinary upload of %s failed", output_url)
            raise UpstreamServiceError("cloudinary", "Failed to store transformed image") from exc
        return result["secure_url"]

    def _fail_and_refund(self, record, message):
        """Mark a record failed and give its credit back, once. Returns False if it was already terminal."""
        with transaction.atomic():
            locked = Transformation.objects.select_for_update().get(pk=record.pk)
            if locked.is_terminal:
                return False

            locked.status = Transformation.STATUS_FAILED
            locked.error_message = message
            locked.completed_at = timezone.now()
            locked.original_image = record.original_image or locked.original_image
            locked.save(update_fields=["status", "error_message", "completed_at", "original_image", "updated_at"])
            self.ledger.credit(
                locked.user_id,
                GENERATION_COST,
                CreditTransaction.REASON_GENERATION,
                transformation=locked,
            )

        record.status = locked.status
        record.error_message = locked.error_message
        record.completed_at = locked.completed_at
        logger.warning("Transformation %s failed and was refunded: %s", record.id, message)
        return True
