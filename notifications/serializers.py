from rest_framework import serializers

from .models import Message


class MessageRequestSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    # checked by the dispatcher so the caller gets UnsupportedChannel / InvalidContent
    channel = serializers.CharField()
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class MessageSerializer(serializers.ModelSerializer):
    student_id = serializers.IntegerField(read_only=True)
    parent_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "student_id",
            "parent_id",
            "channel",
            "content",
            "status",
            "created_at",
            "sent_at",
            "provider_id",
            "error",
        ]
        read_only_fields = fields
