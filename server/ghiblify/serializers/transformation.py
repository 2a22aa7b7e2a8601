from rest_framework import serializers

from ghiblify.models import Transformation


class TransformationSerializer(serializers.ModelSerializer):
    """Serializer for Transformation model"""

    class Meta:
        model = Transformation
        fields = [
            'id',
            'remote_job_id',
            'status',
            'original_image',
            'transformed_image',
            'error_message',
            'created_at',
            'completed_at',
        ]
        read_only_fields = fields


class TransformUploadSerializer(serializers.Serializer):
    """Multipart body of a transformation request.

    Only presence is checked here; type, size and decodability are checked by
    the lifecycle so they map onto their own error codes.
    """

    image = serializers.FileField(allow_empty_file=False)
