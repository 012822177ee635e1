from rest_framework import status, generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from django.contrib.auth import get_user_model
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from taskflow.exceptions import BadRequest
from . import services
from .serializers import (
    UserSerializer, UserRegistrationSerializer, UserLoginSerializer,
    ProfileUpdateSerializer, UserUpdateSerializer, PasswordChangeSerializer,
    PasswordResetRequestSerializer, PasswordResetVerifySerializer,
    PasswordResetSerializer, LogoutSerializer,
)

User = get_user_model()

token_response_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        "message": openapi.Schema(type=openapi.TYPE_STRING),
        "access_token": openapi.Schema(type=openapi.TYPE_STRING),
        "refresh_token": openapi.Schema(type=openapi.TYPE_STRING),
        "user": openapi.Schema(type=openapi.TYPE_OBJECT),
    },
)


def token_payload(user, message):
    refresh = RefreshToken.for_user(user)
    return {
        "message": message,
        "access_token": str(refresh.access_token),
        "refresh_token": str(refresh),
        "user": UserSerializer(user).data,
    }


class UserRegistrationView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Register a new user",
        operation_description="Creates the account, sends a welcome email and returns JWT tokens.",
        request_body=UserRegistrationSerializer,
        responses={
            201: openapi.Response(description="User registered", schema=token_response_schema),
            400: openapi.Response(description="Validation errors in request body"),
            409: openapi.Response(description="User already exists")
        }
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.register_user(**serializer.validated_data)

        return Response(token_payload(user, "User registered successfully"), status=status.HTTP_201_CREATED)


class UserLoginView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        request_body=UserLoginSerializer,
        responses={
            status.HTTP_200_OK: openapi.Response(description="Login successful", schema=token_response_schema),
            status.HTTP_401_UNAUTHORIZED: "Invalid credentials",
        },
        operation_description="Authenticate user and return JWT tokens",
    )
    def post(self, request):
        serializer = UserLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data["user"]
        return Response(token_payload(user, "Login successful"), status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_summary="Logout user",
        operation_description="Logs out a user by blacklisting their refresh token.",
        request_body=LogoutSerializer,
        responses={
            200: openapi.Response(description="Successfully logged out"),
            400: openapi.Response(description="Invalid or missing refresh token")
        }
    )
    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            token = RefreshToken(serializer.validated_data["refresh"])
            token.blacklist()
        except TokenError:
            raise BadRequest("Invalid refresh token.")
        return Response({"message": "Successfully logged out."}, status=status.HTTP_200_OK)


class CurrentUserView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @swagger_auto_schema(
        operation_summary="Delete own account",
        operation_description="Deletes the authenticated user. Teams they own are handed to a "
                              "remaining member or deleted when no member is left.",
    )
    def delete(self, request):
        services.delete_account(request.user)
        return Response({"message": "Account deleted successfully"}, status=status.HTTP_200_OK)


class UserListView(generics.ListAPIView):
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    queryset = User.objects.all().order_by('name')


class UserDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        return Response(UserSerializer(services.get_user(pk)).data)

    @swagger_auto_schema(request_body=UserUpdateSerializer, responses={200: UserSerializer()})
    def put(self, request, pk):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.update_user(pk, request.user, **serializer.validated_data)
        return Response(UserSerializer(user).data)


class ProfileUpdateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(request_body=ProfileUpdateSerializer, responses={200: UserSerializer()})
    def put(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.update_profile(request.user, **serializer.validated_data)
        return Response(UserSerializer(user).data)


class PasswordChangeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        request_body=PasswordChangeSerializer,
        responses={
            200: openapi.Response(description="Password updated"),
            400: openapi.Response(description="Current password incorrect")
        }
    )
    def put(self, request):
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.change_password(request.user, **serializer.validated_data)
        return Response({"message": "Password updated"}, status=status.HTTP_200_OK)


class RequestPasswordResetView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Request password reset",
        operation_description="Emails a reset link if the address belongs to an account. "
                              "The response is the same either way.",
        request_body=PasswordResetRequestSerializer,
        responses={200: openapi.Response(description="Generic success")}
    )
    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.request_password_reset(serializer.validated_data["email"])
        return Response({"message": services.PASSWORD_RESET_MESSAGE}, status=status.HTTP_200_OK)


class VerifyResetTokenView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Verify password reset token",
        request_body=PasswordResetVerifySerializer,
        responses={
            200: openapi.Response(description="Token is valid"),
            400: openapi.Response(description="Invalid or expired token")
        }
    )
    def post(self, request):
        serializer = PasswordResetVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.verify_reset_token(**serializer.validated_data)
        return Response({"message": "Reset token is valid."}, status=status.HTTP_200_OK)


class ResetPasswordView(APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Reset user password",
        request_body=PasswordResetSerializer,
        responses={
            200: openapi.Response(description="Password reset successfully"),
            400: openapi.Response(description="Invalid or expired token")
        }
    )
    def post(self, request):
        serializer = PasswordResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.reset_password(**serializer.validated_data)
        return Response({"message": "Password reset successfully."}, status=status.HTTP_200_OK)
