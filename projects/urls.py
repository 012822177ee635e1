from django.urls import path
from .views import (
    ProjectListCreateView, ProjectDetailView, ProjectMemberAddView,
    ProjectMemberRemoveView, ProjectTasksListView,
)

urlpatterns = [
    path('', ProjectListCreateView.as_view(), name='project-list-create'),  # Handles list and create requests
    path('<int:pk>/', ProjectDetailView.as_view(), name='project-detail'),  # Handles retrieve, update, and delete
    path('<int:pk>/members/', ProjectMemberAddView.as_view(), name='project-member-add'),
    path('<int:pk>/members/<int:user_id>/', ProjectMemberRemoveView.as_view(), name='project-member-remove'),
    path('<int:pk>/tasks/', ProjectTasksListView.as_view(), name='project-tasks'),
]
