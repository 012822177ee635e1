# taskflow projects/views.py
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema

from tasks.serializers import TaskSerializer
from . import services
from .serializers import ProjectSerializer, ProjectWriteSerializer, ProjectUpdateSerializer, ProjectMemberSerializer


class ProjectListCreateView(generics.ListAPIView):
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        # Projects the user owns or is a member of
        return services.list_projects_for_user(self.request.user)

    @swagger_auto_schema(request_body=ProjectWriteSerializer, responses={201: ProjectSerializer()})
    def post(self, request):
        serializer = ProjectWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = services.create_project(actor=request.user, **serializer.validated_data)
        return Response(
            ProjectSerializer(project, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED
        )


class ProjectDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        project = services.get_project(pk, request.user)
        return Response(ProjectSerializer(project, context={'request': request}).data)

    @swagger_auto_schema(request_body=ProjectUpdateSerializer, responses={200: ProjectSerializer()})
    def put(self, request, pk):
        serializer = ProjectUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = services.update_project(pk, request.user, **serializer.validated_data)
        return Response(ProjectSerializer(project, context={'request': request}).data)

    def delete(self, request, pk):
        services.delete_project(pk, request.user)
        return Response({'message': 'Project deleted successfully'}, status=status.HTTP_200_OK)


class ProjectMemberAddView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        request_body=ProjectMemberSerializer,
        responses={
            200: ProjectSerializer(),
            403: "Only the project owner can add members",
            409: "User is already a project member"
        }
    )
    def post(self, request, pk):
        serializer = ProjectMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = services.add_member(pk, serializer.validated_data['user_id'], request.user)
        return Response(ProjectSerializer(project, context={'request': request}).data)


class ProjectMemberRemoveView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk, user_id):
        project = services.remove_member(pk, user_id, request.user)
        return Response(ProjectSerializer(project, context={'request': request}).data)


class ProjectTasksListView(generics.ListAPIView):
    """List all tasks of a project the user can access"""
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return services.list_project_tasks(self.kwargs['pk'], self.request.user)
