"""DRF serializers for accounts: profile output and the auth request bodies."""

import re

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from ghiblify.models import User

INSTAGRAM_USERNAME_RE = re.compile(r"^[A-Za-z0-9._]{1,30}$")


def clean_instagram_username(value):
    value = (value or "").strip().lstrip("@")
    if value and not INSTAGRAM_USERNAME_RE.match(value):
        raise serializers.ValidationError(
            "Use up to 30 letters, digits, periods or underscores"
        )
    return value


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model"""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'credits',
            'instagram_username',
            'instagram_verified',
            'is_admin',
            'created_at',
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    instagram_username = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=31
    )

    def validate_email(self, value):
        return value.strip().lower()

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(list(exc.messages))
        return value

    def validate_instagram_username(self, value):
        return clean_instagram_username(value) or None


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_email(self, value):
        return value.strip().lower()


class VerifyInstagramSerializer(serializers.Serializer):
    instagram_username = serializers.CharField(max_length=31)

    def validate_instagram_username(self, value):
        value = clean_instagram_username(value)
        if not value:
            raise serializers.ValidationError("This field may not be blank.")
        return value
