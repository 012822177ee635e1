# taskflow notifications/views.py
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from . import services
from .serializers import NotificationSerializer


class NotificationListView(generics.ListAPIView):
    """
    View to list the authenticated user's notifications, most recent first.
    """
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return services.list_notifications(self.request.user)

    @swagger_auto_schema(
        operation_description="List the latest notifications for the authenticated user",
        responses={
            200: NotificationSerializer(many=True),
            401: "Unauthorized"
        }
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class NotificationUnreadCountView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({'count': services.unread_count(request.user)})


class NotificationMarkAsReadView(APIView):
    """
    Mark a notification as read. Only the recipient may do this.
    """
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Mark a specific notification as read",
        responses={
            200: NotificationSerializer(),
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found"
        }
    )
    def put(self, request, pk):
        notification = services.mark_read(pk, request.user)
        return Response(NotificationSerializer(notification).data)


class NotificationMarkAllAsReadView(APIView):
    """
    Mark all unread notifications as read for the authenticated user.
    """
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Mark all unread notifications as read",
        responses={
            200: openapi.Response(
                description="Success response",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'message': openapi.Schema(type=openapi.TYPE_STRING),
                        'count': openapi.Schema(type=openapi.TYPE_INTEGER)
                    }
                )
            ),
            401: "Unauthorized"
        }
    )
    def put(self, request, *args, **kwargs):
        updated_count = services.mark_all_read(request.user)
        return Response({
            'message': 'All notifications marked as read',
            'count': updated_count
        }, status=status.HTTP_200_OK)


class NotificationDeleteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk):
        services.delete_notification(pk, request.user)
        return Response({'message': 'Notification deleted successfully'}, status=status.HTTP_200_OK)
