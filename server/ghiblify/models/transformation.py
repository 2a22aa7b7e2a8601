"""Transformation database model.

This module defines the `Transformation` model used to track the lifecycle of
a Ghibli-style transformation request (upload -> processing -> succeeded or
failed) against the remote prediction that renders it.
"""

from django.conf import settings
from django.db import models


class Transformation(models.Model):
    """Image transformation tracking"""

    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_SUCCEEDED = 'succeeded'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_SUCCEEDED, 'Succeeded'),
        (STATUS_FAILED, 'Failed'),
    ]

    TERMINAL_STATUSES = (STATUS_SUCCEEDED, STATUS_FAILED)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='transformations'
    )
    original_image = models.URLField(
        max_length=500,
        blank=True,
        help_text="Cloudinary URL of the uploaded original"
    )
    transformed_image = models.URLField(
        max_length=500,
        null=True,
        blank=True,
        help_text="URL of the transformed image once the job succeeded"
    )
    remote_job_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Prediction id from Replicate"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )
    error_message = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the job reached a terminal state"
    )

    class Meta:
        db_table = 'transformations'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='transform_user_created_idx'),
            models.Index(fields=['status', 'updated_at'], name='transform_status_upd_idx'),
        ]

    def __str__(self):
        """Return a human-readable representation of the transformation."""
        return f"Transformation {self.id} - {self.status} ({self.user.email})"

    @property
    def is_terminal(self):
        """Return True once the job succeeded or failed; the row no longer changes."""
        return self.status in self.TERMINAL_STATUSES
