import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import ghiblify.models.user


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                        max_length=150,
                        unique=True,
                        validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                        verbose_name="username",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email address")),
                (
                    "credits",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Cached balance. Always equal to the sum of the user's credit transactions.",
                    ),
                ),
                (
                    "instagram_username",
                    models.CharField(
                        blank=True,
                        help_text="Instagram handle, set once at registration or verification.",
                        max_length=30,
                        null=True,
                    ),
                ),
                (
                    "instagram_verified",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the one-time Instagram follow bonus was granted.",
                    ),
                ),
                (
                    "is_admin",
                    models.BooleanField(default=False, help_text="Grants access to the admin API endpoints."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "db_table": "users",
                "indexes": [models.Index(fields=["-created_at"], name="users_created_idx")],
            },
            managers=[
                ("objects", ghiblify.models.user.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="CreditPack",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sku", models.CharField(help_text="Stock keeping unit identifier", max_length=50, unique=True)),
                ("name", models.CharField(blank=True, max_length=100)),
                ("credits", models.PositiveIntegerField(help_text="Number of credits in this pack")),
                ("amount", models.PositiveIntegerField(help_text="Price in whole currency units (rupees for INR)")),
                ("currency", models.CharField(default="INR", max_length=3)),
                (
                    "active",
                    models.BooleanField(
                        default=True,
                        help_text="Whether this pack is currently available for purchase",
                    ),
                ),
            ],
            options={
                "db_table": "credit_packs",
                "ordering": ["credits"],
            },
        ),
        migrations.CreateModel(
            name="Transformation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "original_image",
                    models.URLField(blank=True, help_text="Cloudinary URL of the uploaded original", max_length=500),
                ),
                (
                    "transformed_image",
                    models.URLField(
                        blank=True,
                        help_text="URL of the transformed image once the job succeeded",
                        max_length=500,
                        null=True,
                    ),
                ),
                (
                    "remote_job_id",
                    models.CharField(
                        blank=True,
                        help_text="Prediction id from Replicate",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("succeeded", "Succeeded"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("error_message", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, help_text="When the job reached a terminal state", null=True),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transformations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "transformations",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="transform_user_created_idx"),
                    models.Index(fields=["status", "updated_at"], name="transform_status_upd_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.IntegerField(help_text="Positive for grants and purchases, negative for generations"),
                ),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("initial", "Initial"),
                            ("instagram_follow", "Instagram follow"),
                            ("admin", "Admin"),
                            ("generation", "Generation"),
                            ("purchase", "Purchase"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "payment_id",
                    models.CharField(
                        blank=True,
                        help_text="Razorpay payment id for purchases",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "transformation",
                    models.ForeignKey(
                        blank=True,
                        help_text="Transformation paid for (or refunded) by this row",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_transactions",
                        to="ghiblify.transformation",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "credits_transactions",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="credit_tx_user_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(help_text="Razorpay order id", max_length=255, unique=True)),
                ("credits", models.PositiveIntegerField()),
                ("amount", models.PositiveIntegerField(help_text="Price in whole currency units")),
                ("currency", models.CharField(default="INR", max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[("created", "Created"), ("paid", "Paid")],
                        default="created",
                        max_length=20,
                    ),
                ),
                ("payment_id", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payment_orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "payment_orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="payment_order_user_idx"),
                ],
            },
        ),
    ]
