from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ghiblify.models import Transformation
from ghiblify.serializers import TransformUploadSerializer
from ghiblify.services import get_lifecycle


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
@ratelimit(group="transform_submit", key="user", rate="10/m", block=True)
def submit_transformation(request):
    """
    Upload a photo and start its Ghibli-style transformation.

    Costs one credit. Poll `/api/transform/<id>` with the returned id.
    """
    serializer = TransformUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    image = serializer.validated_data["image"]

    result = get_lifecycle().submit(request.user, image, image.content_type)
    record = result.transformation

    return Response(
        {
            "id": record.remote_job_id,
            "status": record.status,
            "originalImage": record.original_image,
            "transformationId": record.id,
            "remainingCredits": result.remaining_credits,
        },
        status=status.HTTP_202_ACCEPTED,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def transformation_status(request, remote_job_id):
    """
    Get transformation status by prediction id.
    """
    record = get_lifecycle().poll_status(request.user, remote_job_id)

    return Response(
        {
            "id": record.remote_job_id,
            "status": record.status,
            "output": record.transformed_image if record.status == Transformation.STATUS_SUCCEEDED else None,
            "error": record.error_message if record.status == Transformation.STATUS_FAILED else None,
            "transformationId": record.id,
            "originalImage": record.original_image,
        }
    )
