# taskflow teams/views.py
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from . import services
from .serializers import TeamSerializer, TeamCreateSerializer, TeamUpdateSerializer, TeamInviteSerializer


class TeamListCreateView(generics.ListAPIView):
    serializer_class = TeamSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        # Teams the user owns or belongs to
        return services.list_teams_for_user(self.request.user)

    @swagger_auto_schema(request_body=TeamCreateSerializer, responses={201: TeamSerializer()})
    def post(self, request):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.create_team(actor=request.user, **serializer.validated_data)
        return Response(
            TeamSerializer(team, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED
        )


class TeamDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        team = services.get_team(pk, request.user)
        return Response(TeamSerializer(team, context={'request': request}).data)

    @swagger_auto_schema(request_body=TeamUpdateSerializer, responses={200: TeamSerializer()})
    def put(self, request, pk):
        serializer = TeamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.update_team(pk, request.user, **serializer.validated_data)
        return Response(TeamSerializer(team, context={'request': request}).data)

    def delete(self, request, pk):
        services.delete_team(pk, request.user)
        return Response({'message': 'Team deleted successfully'}, status=status.HTTP_200_OK)


class TeamInviteView(APIView):
    """Add a registered user to the team by email. Owner only."""
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        request_body=TeamInviteSerializer,
        responses={
            200: TeamSerializer(),
            403: "Only the team owner can add members",
            404: "Team or user not found",
            409: "User is already a team member"
        }
    )
    def post(self, request, pk):
        serializer = TeamInviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.invite_member(pk, serializer.validated_data['email'], request.user)
        return Response(TeamSerializer(team, context={'request': request}).data)


class TeamMemberRemoveView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk, user_id):
        team = services.remove_member(pk, user_id, request.user)
        return Response(TeamSerializer(team, context={'request': request}).data)


class TeamLeaveView(APIView):
    """
    Leave a team. An owner who leaves hands the team to a remaining member,
    or deletes it when nobody else is left.
    """
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        responses={
            200: openapi.Response(
                description="Left the team",
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'message': openapi.Schema(type=openapi.TYPE_STRING),
                        'team_deleted': openapi.Schema(type=openapi.TYPE_BOOLEAN),
                        'new_owner_id': openapi.Schema(type=openapi.TYPE_INTEGER, nullable=True),
                    }
                )
            ),
            400: "You're not a member of this team",
            404: "Team not found"
        }
    )
    def delete(self, request, pk):
        outcome = services.leave_team(pk, request.user)
        if outcome.deleted:
            message = "You left and the team was deleted (no members left)"
        else:
            message = "Left the team successfully"
        return Response({
            'message': message,
            'team_deleted': outcome.deleted,
            'new_owner_id': outcome.new_owner_id,
        }, status=status.HTTP_200_OK)


class TeamMembershipLeaveView(APIView):
    """Leave a team as a plain member. The owner is refused."""
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, pk):
        services.leave_team_as_member(pk, request.user)
        return Response({'message': 'Successfully left the team'}, status=status.HTTP_200_OK)
