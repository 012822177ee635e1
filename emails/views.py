# taskflow emails/views.py
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from accounts.serializers import PasswordResetRequestSerializer
from accounts.services import request_password_reset, PASSWORD_RESET_MESSAGE
from .serializers import SendEmailSerializer, WelcomeEmailSerializer
from .services import send_email, send_welcome_email


class SendEmailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        request_body=SendEmailSerializer,
        responses={
            200: openapi.Response(description="Email sent, returns the message id"),
            400: "Missing required fields",
            502: "Error sending email"
        }
    )
    def post(self, request):
        serializer = SendEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = send_email(**serializer.validated_data)
        return Response(result, status=status.HTTP_200_OK)


class WelcomeEmailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = WelcomeEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = send_welcome_email(serializer.validated_data['email'], serializer.validated_data['name'])
        return Response(result, status=status.HTTP_200_OK)


class PasswordResetEmailView(APIView):
    """
    Public endpoint. Always answers with the same message so callers cannot
    tell whether an account exists for the email.
    """
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        request_body=PasswordResetRequestSerializer,
        responses={200: openapi.Response(description=PASSWORD_RESET_MESSAGE)}
    )
    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        request_password_reset(serializer.validated_data['email'])
        return Response({'message': PASSWORD_RESET_MESSAGE}, status=status.HTTP_200_OK)
