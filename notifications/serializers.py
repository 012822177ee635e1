from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'message', 'user_id', 'is_read', 'type', 'related_item_id', 'created_at']
        read_only_fields = fields
