from datetime import timedelta
from io import BytesIO
from unittest.mock import Mock, patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.utils import timezone
from PIL import Image

from ghiblify.const import STYLE_PROMPT
from ghiblify.exceptions import (
    InsufficientCreditsError,
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaError,
    UpstreamServiceError,
    ValidationError,
)
from ghiblify.models import CreditTransaction, Transformation, User
from ghiblify.services.ledger import CreditLedger
from ghiblify.services.lifecycle import TransformationLifecycle, map_remote_status

ORIGINAL_URL = "https://res.cloudinary.com/demo/image/upload/v1/ghiblify/originals/photo.jpg"
OUTPUT_URL = "https://replicate.delivery/pbxt/output.png"
STORED_URL = "https://res.cloudinary.com/demo/image/upload/v1/ghiblify/results/output.png"


def make_image_file(fmt="JPEG", content_type="image/jpeg", name="photo.jpg"):
    buffer = BytesIO()
    Image.new("RGB", (64, 64), color="green").save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=content_type)


class MapRemoteStatusTest(TestCase):
    def test_known_statuses(self):
        self.assertEqual(map_remote_status("starting"), Transformation.STATUS_PROCESSING)
        self.assertEqual(map_remote_status("processing"), Transformation.STATUS_PROCESSING)
        self.assertEqual(map_remote_status("succeeded"), Transformation.STATUS_SUCCEEDED)
        self.assertEqual(map_remote_status("failed"), Transformation.STATUS_FAILED)
        self.assertEqual(map_remote_status("canceled"), Transformation.STATUS_FAILED)

    def test_unknown_status_keeps_processing(self):
        self.assertEqual(map_remote_status("queued"), Transformation.STATUS_PROCESSING)
        self.assertEqual(map_remote_status(None), Transformation.STATUS_PROCESSING)


class ValidateImageTest(TestCase):
    def setUp(self):
        self.lifecycle = TransformationLifecycle(ledger=CreditLedger(), client=Mock(), max_upload_bytes=1024 * 1024)

    def test_accepts_png_and_webp(self):
        self.lifecycle.validate_image(make_image_file("PNG", "image/png", "a.png"), "image/png")
        self.lifecycle.validate_image(make_image_file("WEBP", "image/webp", "a.webp"), "image/webp")

    def test_rejects_other_types(self):
        with self.assertRaises(UnsupportedMediaError):
            self.lifecycle.validate_image(make_image_file("GIF", "image/gif", "a.gif"), "image/gif")

    def test_rejects_large_payload(self):
        upload = SimpleUploadedFile("big.jpg", b"\xff" * (1024 * 1024 + 1), content_type="image/jpeg")

        with self.assertRaises(PayloadTooLargeError) as ctx:
            self.lifecycle.validate_image(upload, "image/jpeg")

        self.assertEqual(ctx.exception.max_size, 1024 * 1024)

    def test_rejects_undecodable_payload(self):
        upload = SimpleUploadedFile("fake.jpg", b"definitely not a jpeg", content_type="image/jpeg")

        with self.assertRaises(ValidationError):
            self.lifecycle.validate_image(upload, "image/jpeg")

    def test_rejects_decompression_bomb(self):
        upload = make_image_file("PNG", "image/png", "bomb.png")

        with patch("PIL.Image.MAX_IMAGE_PIXELS", 1000):
            with self.assertRaises(ValidationError) as ctx:
                self.lifecycle.validate_image(upload, "image/png")

        self.assertIn("image", ctx.exception.errors)
        self.assertEqual(upload.tell(), 0)

    def test_rejects_format_that_does_not_match_content_type(self):
        upload = make_image_file("GIF", "image/jpeg", "disguised.jpg")

        with self.assertRaises(UnsupportedMediaError):
            self.lifecycle.validate_image(upload, "image/jpeg")

    def test_rejects_png_declared_as_webp(self):
        with self.assertRaises(UnsupportedMediaError):
            self.lifecycle.validate_image(make_image_file("PNG", "image/webp", "a.webp"), "image/webp")

    def test_rewinds_file(self):
        upload = make_image_file()
        self.lifecycle.validate_image(upload, "image/jpeg")

        self.assertEqual(upload.tell(), 0)


class SubmitTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("submit@example.com", "secret123")
        self.client = Mock()
        self.client.create_prediction.return_value = {"id": "pred_123", "status": "starting"}
        self.lifecycle = TransformationLifecycle(ledger=CreditLedger(), client=self.client)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_submit_debits_and_starts_prediction(self, mock_upload):
        mock_upload.return_value = {"secure_url": ORIGINAL_URL}

        result = self.lifecycle.submit(self.user, make_image_file(), "image/jpeg")

        record = result.transformation
        self.assertEqual(result.remaining_credits, 0)
        self.assertEqual(record.status, Transformation.STATUS_PROCESSING)
        self.assertEqual(record.remote_job_id, "pred_123")
        self.assertEqual(record.original_image, ORIGINAL_URL)
        self.client.create_prediction.assert_called_once_with(ORIGINAL_URL, STYLE_PROMPT)
        self.assertEqual(mock_upload.call_args[1]["folder"], "ghiblify/originals")

        debit = CreditTransaction.objects.get(user=self.user, reason=CreditTransaction.REASON_GENERATION)
        self.assertEqual(debit.amount, -1)
        self.assertEqual(debit.transformation_id, record.id)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_submit_without_credits_has_no_side_effects(self, mock_upload):
        CreditLedger().set_balance(self.user.pk, 0)

        with self.assertRaises(InsufficientCreditsError):
            self.lifecycle.submit(self.user, make_image_file(), "image/jpeg")

        self.assertFalse(Transformation.objects.filter(user=self.user).exists())
        self.assertFalse(
            CreditTransaction.objects.filter(user=self.user, reason=CreditTransaction.REASON_GENERATION).exists()
        )
        mock_upload.assert_not_called()
        self.client.create_prediction.assert_not_called()

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_remote_failure_refunds_and_reraises(self, mock_upload):
        mock_upload.return_value = {"secure_url": ORIGINAL_URL}
        self.client.create_prediction.side_effect = UpstreamServiceError(
            "replicate", "Error from transformation service", status_code=422, details={"detail": "bad input"}
        )

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.lifecycle.submit(self.user, make_image_file(), "image/jpeg")

        self.assertEqual(ctx.exception.status_code, 422)
        self.user.refresh_from_db()
        self.assertEqual(self.user.credits, 1)

        amounts = sorted(
            CreditTransaction.objects.filter(
                user=self.user, reason=CreditTransaction.REASON_GENERATION
            ).values_list("amount", flat=True)
        )
        self.assertEqual(amounts, [-1, 1])

        record = Transformation.objects.get(user=self.user)
        self.assertEqual(record.status, Transformation.STATUS_FAILED)
        self.assertEqual(record.error_message, "Error from transformation service")
        self.assertEqual(record.original_image, ORIGINAL_URL)
        self.assertIsNotNone(record.completed_at)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_upload_failure_refunds(self, mock_upload):
        mock_upload.side_effect = Exception("cloudinary down")

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.lifecycle.submit(self.user, make_image_file(), "image/jpeg")

        self.assertEqual(ctx.exception.service, "cloudinary")
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertEqual(CreditLedger().balance(self.user.pk), 1)
        self.client.create_prediction.assert_not_called()
        self.assertEqual(Transformation.objects.get(user=self.user).status, Transformation.STATUS_FAILED)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_invalid_upload_rejected_before_debit(self, mock_upload):
        with self.assertRaises(UnsupportedMediaError):
            self.lifecycle.submit(self.user, make_image_file("GIF", "image/gif", "a.gif"), "image/gif")

        self.assertEqual(CreditLedger().balance(self.user.pk), 1)
        mock_upload.assert_not_called()


class PollAndFinalizeTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("poll@example.com", "secret123")
        self.client = Mock()
        self.lifecycle = TransformationLifecycle(ledger=CreditLedger(), client=self.client)
        self.record = Transformation.objects.create(
            user=self.user,
            original_image=ORIGINAL_URL,
            remote_job_id="pred_abc",
            status=Transformation.STATUS_PROCESSING,
        )

    def test_poll_unknown_job(self):
        with self.assertRaises(NotFoundError):
            self.lifecycle.poll_status(self.user, "pred_missing")

    def test_poll_other_users_job(self):
        other = User.objects.create_user("other@example.com", "secret123")

        with self.assertRaises(NotFoundError):
            self.lifecycle.poll_status(other, "pred_abc")

    def test_poll_still_processing(self):
        self.client.get_prediction.return_value = {"id": "pred_abc", "status": "processing"}

        record = self.lifecycle.poll_status(self.user, "pred_abc")

        self.assertEqual(record.status, Transformation.STATUS_PROCESSING)
        self.assertIsNone(record.transformed_image)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_poll_success_is_written_once(self, mock_upload):
        mock_upload.return_value = {"secure_url": STORED_URL}
        self.client.get_prediction.return_value = {
            "id": "pred_abc",
            "status": "succeeded",
            "output": [OUTPUT_URL, "https://replicate.delivery/pbxt/second.png"],
        }
        rows_before = CreditTransaction.objects.filter(user=self.user).count()

        first = self.lifecycle.poll_status(self.user, "pred_abc")
        second = self.lifecycle.poll_status(self.user, "pred_abc")

        self.assertEqual(first.status, Transformation.STATUS_SUCCEEDED)
        self.assertEqual(first.transformed_image, STORED_URL)
        self.assertEqual(second.transformed_image, STORED_URL)
        mock_upload.assert_called_once_with(OUTPUT_URL, folder="ghiblify/results", resource_type="image")
        self.assertEqual(second.completed_at, first.completed_at)
        self.client.get_prediction.assert_called_once_with("pred_abc")
        self.assertEqual(CreditTransaction.objects.filter(user=self.user).count(), rows_before)

    def test_remote_failure_is_not_refunded(self):
        balance = CreditLedger().balance(self.user.pk)

        record = self.lifecycle.finalize_if_terminal(
            self.record, {"id": "pred_abc", "status": "failed", "error": "NSFW content detected"}
        )

        self.assertEqual(record.status, Transformation.STATUS_FAILED)
        self.assertEqual(record.error_message, "NSFW content detected")
        self.assertEqual(CreditLedger().balance(self.user.pk), balance)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_finalize_does_not_overwrite_terminal_record(self, mock_upload):
        mock_upload.return_value = {"secure_url": STORED_URL}
        self.lifecycle.finalize_if_terminal(self.record, {"status": "succeeded", "output": OUTPUT_URL})

        record = self.lifecycle.finalize_if_terminal(self.record, {"status": "failed", "error": "late"})

        self.assertEqual(record.status, Transformation.STATUS_SUCCEEDED)
        self.assertEqual(record.transformed_image, STORED_URL)
        self.assertEqual(record.error_message, "")

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_output_storage_failure_leaves_record_processing(self, mock_upload):
        mock_upload.side_effect = Exception("cloudinary down")
        balance = CreditLedger().balance(self.user.pk)

        with self.assertRaises(UpstreamServiceError) as ctx:
            self.lifecycle.finalize_if_terminal(self.record, {"status": "succeeded", "output": [OUTPUT_URL]})

        self.assertEqual(ctx.exception.service, "cloudinary")
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, Transformation.STATUS_PROCESSING)
        self.assertIsNone(self.record.transformed_image)
        self.assertEqual(CreditLedger().balance(self.user.pk), balance)

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_terminal_record_is_not_stored_again(self, mock_upload):
        Transformation.objects.filter(pk=self.record.pk).update(
            status=Transformation.STATUS_SUCCEEDED, transformed_image=STORED_URL
        )

        record = self.lifecycle.finalize_if_terminal(self.record, {"status": "succeeded", "output": OUTPUT_URL})

        self.assertEqual(record.transformed_image, STORED_URL)
        mock_upload.assert_not_called()


class ReconcileStaleTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("stale@example.com", "secret123")
        self.client = Mock()
        self.lifecycle = TransformationLifecycle(ledger=CreditLedger(), client=self.client)

    def _make_stale(self, record, minutes=30):
        Transformation.objects.filter(pk=record.pk).update(
            updated_at=timezone.now() - timedelta(minutes=minutes)
        )

    @patch("ghiblify.services.lifecycle.cloudinary.uploader.upload")
    def test_finalizes_stale_processing_records(self, mock_upload):
        mock_upload.return_value = {"secure_url": STORED_URL}
        stale = Transformation.objects.create(
            user=self.user, remote_job_id="pred_old", status=Transformation.STATUS_PROCESSING
        )
        fresh = Transformation.objects.create(
            user=self.user, remote_job_id="pred_new", status=Transformation.STATUS_PROCESSING
        )
        self._make_stale(stale)
        self.client.get_prediction.return_value = {"status": "succeeded", "output": OUTPUT_URL}

        count = self.lifecycle.reconcile_stale(timedelta(minutes=10))

        self.assertEqual(count, 1)
        self.client.get_prediction.assert_called_once_with("pred_old")
        stale.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual(stale.status, Transformation.STATUS_SUCCEEDED)
        self.assertEqual(fresh.status, Transformation.STATUS_PROCESSING)

    def test_upstream_errors_are_skipped(self):
        stale = Transformation.objects.create(
            user=self.user, remote_job_id="pred_old", status=Transformation.STATUS_PROCESSING
        )
        self._make_stale(stale)
        self.client.get_prediction.side_effect = UpstreamServiceError("replicate", "timeout")

        count = self.lifecycle.reconcile_stale(timedelta(minutes=10))

        self.assertEqual(count, 0)
        stale.refresh_from_db()
        self.assertEqual(stale.status, Transformation.STATUS_PROCESSING)

    def test_stale_pending_records_are_failed_and_refunded(self):
        ledger = CreditLedger()
        orphan = Transformation.objects.create(user=self.user)
        ledger.debit(self.user.pk, 1, transformation=orphan)
        self._make_stale(orphan)

        count = self.lifecycle.reconcile_stale(timedelta(minutes=10))

        self.assertEqual(count, 1)
        orphan.refresh_from_db()
        self.assertEqual(orphan.status, Transformation.STATUS_FAILED)
        self.assertEqual(ledger.balance(self.user.pk), 1)
        self.client.get_prediction.assert_not_called()
