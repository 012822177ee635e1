from django.urls import path
from .views import CommentListView

urlpatterns = [
    path('task/<int:task_id>/', CommentListView.as_view(), name='comment-list'),
]
