# taskflow teams/serializers.py
from rest_framework import serializers
from django.contrib.auth import get_user_model

from accounts.serializers import UserSerializer
from .models import Team

User = get_user_model()


class TeamSerializer(serializers.ModelSerializer):
    owner = UserSerializer(read_only=True)
    members = serializers.SerializerMethodField()
    member_count = serializers.SerializerMethodField()
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'description', 'owner', 'members',
            'member_count', 'is_owner', 'created_at'
        ]
        read_only_fields = fields

    def get_members(self, obj):
        # Membership order, oldest first
        memberships = obj.teammembership_set.all()
        return UserSerializer([m.user for m in memberships], many=True).data

    def get_member_count(self, obj):
        return len(obj.teammembership_set.all())

    def get_is_owner(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return obj.owner_id == request.user.id
        return False


class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    members = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        many=True,
        required=False
    )


class TeamUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)


class TeamInviteSerializer(serializers.Serializer):
    email = serializers.EmailField()
