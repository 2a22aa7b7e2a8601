"""Custom user model used by the `ghiblify` Django app.

Users sign in with email and password. The model carries the cached credit
balance (kept in step with the credit ledger), the one-time Instagram bonus
flags, and the `is_admin` flag that opens the `/api/admin/*` endpoints.
"""

import logging

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import IntegrityError, models, transaction

from ghiblify.exceptions import DuplicateUserError

logger = logging.getLogger(__name__)


class UserManager(BaseUserManager):
    """Manager whose `create_user` is the only place users come into existence."""

    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        """
        Create a user and grant the starting credit in the same transaction.

        Raises:
            DuplicateUserError: If a user with this email already exists.
        """
        # Imported here: the ledger imports this module's model.
        from ghiblify.services.ledger import CreditLedger

        if not email:
            raise ValueError("Users must have an email address")

        email = self.normalize_email(email).strip().lower()
        if self.filter(email__iexact=email).exists():
            raise DuplicateUserError(email)

        extra_fields.setdefault("username", email)
        try:
            with transaction.atomic():
                user = self.model(email=email, **extra_fields)
                # The ledger is the only writer of the balance.
                user.credits = 0
                user.set_password(password)
                user.save(using=self._db)
                CreditLedger().grant_initial_credits(user)
        except IntegrityError:
            raise DuplicateUserError(email)

        user.refresh_from_db(fields=["credits"])
        logger.info("Created user %s with %s starting credit(s)", user.id, user.credits)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_admin", True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Email/password user with a credit balance."""

    email = models.EmailField("email address", unique=True)
    credits = models.PositiveIntegerField(
        default=0,
        help_text="Cached balance. Always equal to the sum of the user's credit transactions."
    )
    instagram_username = models.CharField(
        max_length=30,
        null=True,
        blank=True,
        help_text="Instagram handle, set once at registration or verification."
    )
    instagram_verified = models.BooleanField(
        default=False,
        help_text="Whether the one-time Instagram follow bonus was granted."
    )
    is_admin = models.BooleanField(
        default=False,
        help_text="Grants access to the admin API endpoints."
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["-created_at"], name="users_created_idx"),
        ]

    def save(self, *args, **kwargs):
        """Give users created without a password an unusable one."""
        if self._state.adding and not self.password:
            self.set_unusable_password()
        super().save(*args, **kwargs)

    def __str__(self):
        """Return a human-readable identifier for the user."""
        return self.email or self.username
