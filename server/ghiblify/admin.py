from django.contrib import admin

from ghiblify.models import CreditPack, CreditTransaction, PaymentOrder, Transformation, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for custom User model.

    Accounts are created through registration or `createsuperuser` only, so
    that every account receives its starting credit. Balances are changed
    through the admin API, which writes the matching ledger row.
    """

    list_display = [
        "email",
        "credits",
        "instagram_username",
        "instagram_verified",
        "is_admin",
        "created_at",
    ]
    list_filter = ["is_admin", "instagram_verified", "is_staff", "created_at"]
    search_fields = ["email", "instagram_username"]
    readonly_fields = ["credits", "instagram_verified", "last_login", "created_at", "updated_at"]

    fieldsets = (
        (None, {"fields": ("email",)}),
        ("Credits & Instagram", {"fields": ("credits", "instagram_username", "instagram_verified")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_admin",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Important Dates", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False


@admin.register(Transformation)
class TransformationAdmin(admin.ModelAdmin):
    """Admin for Transformation model."""

    list_display = ["id", "user", "status", "remote_job_id", "created_at", "completed_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["user__email", "remote_job_id"]
    readonly_fields = [
        "user",
        "status",
        "original_image",
        "transformed_image",
        "remote_job_id",
        "error_message",
        "created_at",
        "updated_at",
        "completed_at",
    ]
    date_hierarchy = "created_at"

    fieldsets = (
        (None, {"fields": ("user", "status", "error_message")}),
        ("Images", {"fields": ("original_image", "transformed_image")}),
        ("Replicate", {"fields": ("remote_job_id",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at", "completed_at")}),
    )

    def has_add_permission(self, request):
        return False


@admin.register(CreditPack)
class CreditPackAdmin(admin.ModelAdmin):
    """Admin for CreditPack model."""

    list_display = ["sku", "name", "credits", "amount", "currency", "active"]
    list_filter = ["active", "currency"]
    search_fields = ["sku", "name"]


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    """Read-only view of the credit ledger."""

    list_display = ["id", "user", "amount", "reason", "payment_id", "created_at"]
    list_filter = ["reason", "created_at"]
    search_fields = ["user__email", "payment_id"]
    readonly_fields = ["user", "amount", "reason", "payment_id", "transformation", "created_at"]
    date_hierarchy = "created_at"

    fieldsets = (
        (None, {"fields": ("user", "amount", "reason")}),
        ("References", {"fields": ("payment_id", "transformation")}),
        ("Timestamp", {"fields": ("created_at",)}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentOrder)
class PaymentOrderAdmin(admin.ModelAdmin):
    """Admin for PaymentOrder model."""

    list_display = ["order_id", "user", "credits", "amount", "currency", "status", "created_at", "paid_at"]
    list_filter = ["status", "currency", "created_at"]
    search_fields = ["order_id", "payment_id", "user__email"]
    readonly_fields = [
        "order_id",
        "user",
        "credits",
        "amount",
        "currency",
        "status",
        "payment_id",
        "created_at",
        "paid_at",
    ]

    def has_add_permission(self, request):
        return False
