# taskflow teams/services.py
"""
Team lifecycle and membership rules.

Every operation takes the acting user explicitly and raises one of the
``taskflow.exceptions`` error kinds. The owner is always stored as a member
too; when the owner leaves, ownership passes to a remaining member chosen by
the successor policy, or the team is deleted once nobody is left.
"""
import logging
import random
from collections import namedtuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.utils.module_loading import import_string

from notifications.services import create_notification
from taskflow.exceptions import BadRequest, Conflict, Forbidden, NotFound
from .models import Team, TeamMembership

User = get_user_model()
logger = logging.getLogger(__name__)

LeaveOutcome = namedtuple('LeaveOutcome', ['team', 'deleted', 'new_owner_id'])


def random_successor(member_ids):
    """Default succession policy: any remaining member, uniformly at random."""
    return random.choice(member_ids)


def get_successor_policy():
    return import_string(settings.TEAM_SUCCESSOR_POLICY)


def _get_team(team_id, for_update=False):
    queryset = Team.objects.select_related('owner')
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=team_id)
    except Team.DoesNotExist:
        raise NotFound("Team not found")


def _require_owner(team, actor, message):
    if not team.is_owner(actor):
        raise Forbidden(message)


def member_ids(team):
    # Oldest membership first
    return list(TeamMembership.objects.filter(team=team).values_list('user_id', flat=True))


def teams_for_user(user):
    return Team.objects.filter(Q(owner=user) | Q(members=user)).distinct()


def list_teams_for_user(actor):
    return teams_for_user(actor).select_related('owner').prefetch_related('teammembership_set__user').order_by('name')


@transaction.atomic
def create_team(name, actor, description='', members=None):
    team = Team.objects.create(name=name, description=description or '', owner=actor)

    initial_members = []
    for user in members or []:
        if user.pk not in {u.pk for u in initial_members}:
            initial_members.append(user)
    if actor.pk not in {u.pk for u in initial_members}:
        initial_members.append(actor)

    for user in initial_members:
        TeamMembership.objects.create(team=team, user=user)

    logger.info("Team %s created by user %s with %d member(s)", team.pk, actor.pk, len(initial_members))
    return team


def get_team(team_id, actor):
    team = _get_team(team_id)
    if not team.is_owner(actor) and not team.has_member(actor):
        raise Forbidden("Not authorized to access this team")
    return team


def update_team(team_id, actor, name=None, description=None):
    team = _get_team(team_id)
    _require_owner(team, actor, "Not authorized to update this team")

    if name:
        team.name = name
    if description is not None:
        team.description = description
    team.save()
    return team


def delete_team(team_id, actor):
    team = _get_team(team_id)
    _require_owner(team, actor, "Not authorized to delete this team")
    team.delete()
    logger.info("Team %s deleted by its owner %s", team_id, actor.pk)


@transaction.atomic
def invite_member(team_id, email, actor):
    """Add the user registered under ``email`` to the team. Owner only."""
    if not email:
        raise BadRequest("Email is required")

    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise NotFound("User not found with this email")

    team = _get_team(team_id, for_update=True)
    _require_owner(team, actor, "Not authorized to add members to this team")

    if team.has_member(user):
        raise Conflict("User is already a team member")

    TeamMembership.objects.create(team=team, user=user)
    create_notification(
        message=f'You were added to the team "{team.name}"',
        user=user,
        type='system',
        related_item_id=team.pk,
    )
    logger.info("User %s added to team %s by %s", user.pk, team.pk, actor.pk)
    return team


@transaction.atomic
def remove_member(team_id, target_user_id, actor):
    """
    Remove a member. The owner may remove anyone but themselves; any member
    may remove themselves.
    """
    team = _get_team(team_id, for_update=True)

    if not team.is_owner(actor) and actor.pk != target_user_id:
        raise Forbidden("Not authorized to remove this member")

    if target_user_id == team.owner_id:
        raise BadRequest("Cannot remove the team owner")

    removed, _ = TeamMembership.objects.filter(team=team, user_id=target_user_id).delete()
    if removed:
        logger.info("User %s removed from team %s by %s", target_user_id, team.pk, actor.pk)
    return team


@transaction.atomic
def leave_team(team_id, actor, pick_successor=None):
    """
    Remove the actor from the team.

    When the owner leaves, the team is deleted if no member remains;
    otherwise ``pick_successor`` (default: the ``TEAM_SUCCESSOR_POLICY``
    setting) chooses the new owner from the remaining member ids.

    Returns:
        LeaveOutcome: ``team`` is None when the team was deleted.
    """
    team = _get_team(team_id, for_update=True)
    is_owner = team.is_owner(actor)
    membership = TeamMembership.objects.filter(team=team, user=actor)
    is_member = membership.exists()

    if not is_owner and not is_member:
        raise BadRequest("You're not a member of this team")

    membership.delete()

    if not is_owner:
        logger.info("User %s left team %s", actor.pk, team.pk)
        return LeaveOutcome(team=team, deleted=False, new_owner_id=None)

    remaining = member_ids(team)
    if not remaining:
        team.delete()
        logger.info("Team %s deleted after its last member %s left", team_id, actor.pk)
        return LeaveOutcome(team=None, deleted=True, new_owner_id=None)

    policy = pick_successor or get_successor_policy()
    successor_id = policy(remaining)
    if successor_id not in remaining:
        raise ValueError(f"Successor policy returned {successor_id!r}, which is not a remaining member")

    team.owner_id = successor_id
    team.save(update_fields=['owner'])
    create_notification(
        message=f'You are now the owner of the team "{team.name}"',
        user=User.objects.get(pk=successor_id),
        type='system',
        related_item_id=team.pk,
    )
    logger.info("Ownership of team %s passed from %s to %s", team.pk, actor.pk, successor_id)
    return LeaveOutcome(team=team, deleted=False, new_owner_id=successor_id)


@transaction.atomic
def leave_team_as_member(team_id, actor):
    """Strict leave path: plain members only, the owner is refused."""
    team = _get_team(team_id, for_update=True)

    if not team.has_member(actor):
        raise BadRequest("You are not a member of this team")

    if team.is_owner(actor):
        raise BadRequest("Team owner cannot leave. Transfer ownership or delete the team instead.")

    TeamMembership.objects.filter(team=team, user=actor).delete()
    logger.info("User %s left team %s", actor.pk, team.pk)
    return team
