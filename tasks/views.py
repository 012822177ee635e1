# taskflow tasks/views.py
from rest_framework import generics, permissions, filters, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from . import services
from .serializers import TaskSerializer, TaskWriteSerializer, TaskUpdateSerializer, CommentSerializer


class TaskOrderingFilter(filters.OrderingFilter):
    """Orders `priority` by urgency instead of by its stored label."""
    aliases = {'priority': 'priority_rank', '-priority': '-priority_rank'}

    def get_ordering(self, request, queryset, view):
        ordering = super().get_ordering(request, queryset, view)
        if ordering:
            ordering = [self.aliases.get(field, field) for field in ordering]
        return ordering


class TaskListCreateView(generics.ListAPIView):
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, TaskOrderingFilter]
    filterset_fields = ['status', 'priority', 'project']
    ordering_fields = ['due_date', 'priority', 'created_at']
    ordering = ['-created_at']

    def get_queryset(self):
        # Tasks the user created or is assigned to
        return services.list_tasks_for_user(self.request.user)

    @swagger_auto_schema(
        operation_summary="Create a task",
        operation_description="The task is assigned to its creator unless assignee_id is given.",
        request_body=TaskWriteSerializer,
        responses={201: TaskSerializer()}
    )
    def post(self, request):
        serializer = TaskWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = services.create_task(request.user, **serializer.validated_data)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        return Response(TaskSerializer(services.get_task(pk, request.user)).data)

    @swagger_auto_schema(
        operation_description="Update a task. Omitted fields keep their current value.",
        request_body=TaskUpdateSerializer,
        responses={200: TaskSerializer(), 403: "Not the creator or assignee"}
    )
    def put(self, request, pk):
        serializer = TaskUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = services.update_task(pk, request.user, **serializer.validated_data)
        return Response(TaskSerializer(task).data)

    @swagger_auto_schema(
        responses={
            200: openapi.Response(description="Task deleted successfully"),
            403: openapi.Response(description="Only the creator can delete a task"),
        }
    )
    def delete(self, request, pk):
        services.delete_task(pk, request.user)
        return Response({"message": "Task deleted successfully"}, status=status.HTTP_200_OK)


class CommentListView(generics.ListAPIView):
    """Comments on a task, oldest first."""
    serializer_class = CommentSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return services.list_comments_for_task(self.kwargs['task_id'])
