from django.contrib.auth import get_user_model, authenticate
from rest_framework import serializers
from taskflow.exceptions import Unauthenticated

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public summary of a user, used wherever another record references one."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'avatar']
        read_only_fields = fields


class UserRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(email=attrs.get("email"), password=attrs.get("password"))

        if not user:
            raise Unauthenticated("Invalid email or password.")

        attrs["user"] = user
        return attrs


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    avatar = serializers.URLField(max_length=500, required=False, allow_blank=True)


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    avatar = serializers.URLField(max_length=500, required=False, allow_blank=True)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=6)


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    token = serializers.CharField(max_length=64)


class PasswordResetSerializer(PasswordResetVerifySerializer):
    new_password = serializers.CharField(write_only=True, min_length=6)


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()
