# taskflow teams/urls.py
from django.urls import path
from .views import (
    TeamListCreateView,
    TeamDetailView,
    TeamInviteView,
    TeamMemberRemoveView,
    TeamLeaveView,
    TeamMembershipLeaveView,
)

urlpatterns = [
    # Team URLs
    path('', TeamListCreateView.as_view(), name='team-list-create'),
    path('<int:pk>/', TeamDetailView.as_view(), name='team-detail'),
    path('<int:pk>/leave/', TeamLeaveView.as_view(), name='team-leave'),

    # Membership URLs
    path('<int:pk>/members/invite/', TeamInviteView.as_view(), name='team-member-invite'),
    path('<int:pk>/members/me/', TeamMembershipLeaveView.as_view(), name='team-membership-leave'),
    path('<int:pk>/members/<int:user_id>/', TeamMemberRemoveView.as_view(), name='team-member-remove'),
]
