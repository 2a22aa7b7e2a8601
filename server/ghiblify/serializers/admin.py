from rest_framework import serializers


class SetAdminSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    is_admin = serializers.BooleanField()


class UpdateCreditsSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    credits = serializers.IntegerField(min_value=0)
