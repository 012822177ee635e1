import re

from rest_framework import serializers
from django.contrib.auth import get_user_model

from accounts.serializers import UserSerializer
from .models import Project

User = get_user_model()

HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


def validate_hex_color(value):
    if value and not HEX_COLOR.match(value):
        raise serializers.ValidationError("Color must be a hex value such as #9b87f5")
    return value


class ProjectSerializer(serializers.ModelSerializer):
    owner = UserSerializer(read_only=True)
    members = UserSerializer(many=True, read_only=True)
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'color', 'owner', 'members', 'is_owner', 'created_at']
        read_only_fields = fields

    def get_is_owner(self, obj):
        """Whether the requesting user owns the project"""
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.owner_id == request.user.id
        return False


class ProjectWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    color = serializers.CharField(max_length=7, required=False, allow_blank=True, validators=[validate_hex_color])


class ProjectUpdateSerializer(ProjectWriteSerializer):
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ProjectMemberSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
