from django.urls import path
from .views import TaskListCreateView, TaskDetailView, CommentListView

urlpatterns = [
    path('', TaskListCreateView.as_view(), name='task-list-create'),
    path('<int:pk>/', TaskDetailView.as_view(), name='task-detail'),
    path('<int:task_id>/comments/', CommentListView.as_view(), name='task-comments'),
]
