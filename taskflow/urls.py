# taskflow/urls.py
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

schema_view = get_schema_view(
    openapi.Info(
        title="Taskflow API",
        default_version='v1',
        description="Tasks, projects, teams and notifications",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def api_status(request):
    return Response({'status': 'API is running'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/status/', api_status, name='api-status'),
    path('api/users/', include('accounts.urls')),
    path('api/teams/', include('teams.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/tasks/', include('tasks.urls')),
    path('api/comments/', include('tasks.comment_urls')),
    path('api/notifications/', include('notifications.urls')),
    path('api/email/', include('emails.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
]
