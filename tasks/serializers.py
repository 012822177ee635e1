# taskflow tasks/serializers.py
from rest_framework import serializers
from django.contrib.auth import get_user_model

from accounts.serializers import UserSerializer
from projects.models import Project
from .models import Task, Comment

User = get_user_model()


class ProjectSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ['id', 'name', 'color']
        read_only_fields = fields


class TaskSerializer(serializers.ModelSerializer):
    assignee = UserSerializer(read_only=True)
    created_by = UserSerializer(read_only=True)
    project = ProjectSummarySerializer(read_only=True)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'status', 'priority', 'due_date',
            'assignee', 'project', 'tags', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class TaskWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    due_date = serializers.DateTimeField(required=False, allow_null=True)
    assignee_id = serializers.PrimaryKeyRelatedField(
        source='assignee',
        queryset=User.objects.all(),
        allow_null=True,
        required=False
    )
    project_id = serializers.PrimaryKeyRelatedField(
        source='project',
        queryset=Project.objects.all(),
        allow_null=True,
        required=False
    )
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)


class TaskUpdateSerializer(TaskWriteSerializer):
    title = serializers.CharField(max_length=255, required=False)


class CommentSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    mentions = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'task_id', 'user', 'content', 'mentions', 'created_at']
        read_only_fields = fields
