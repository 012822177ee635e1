# taskflow projects/services.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from notifications.services import create_notification
from taskflow.exceptions import BadRequest, Conflict, Forbidden, NotFound
from .models import Project, DEFAULT_PROJECT_COLOR

User = get_user_model()
logger = logging.getLogger(__name__)


def _get_project(project_id):
    try:
        return Project.objects.select_related('owner').get(pk=project_id)
    except Project.DoesNotExist:
        raise NotFound("Project not found")


def _get_owned_project(project_id, actor, message):
    project = _get_project(project_id)
    if not project.is_owner(actor):
        raise Forbidden(message)
    return project


def projects_for_user(user):
    return Project.objects.filter(Q(owner=user) | Q(members=user)).distinct()


def list_projects_for_user(actor):
    return projects_for_user(actor).select_related('owner').prefetch_related('members')


@transaction.atomic
def create_project(name, actor, description='', color=None):
    project = Project.objects.create(
        name=name,
        description=description or '',
        color=color or DEFAULT_PROJECT_COLOR,
        owner=actor,
    )
    # Creator is the first member
    project.members.add(actor)
    logger.info("Project %s created by user %s", project.pk, actor.pk)
    return project


def get_project(project_id, actor):
    project = _get_project(project_id)
    if not project.is_accessible_by(actor):
        raise Forbidden("Not authorized to access this project")
    return project


def update_project(project_id, actor, name=None, description=None, color=None):
    project = _get_owned_project(project_id, actor, "Not authorized to update this project")

    if name:
        project.name = name
    if description is not None:
        project.description = description
    if color:
        project.color = color
    project.save()
    return project


def delete_project(project_id, actor):
    project = _get_owned_project(project_id, actor, "Not authorized to delete this project")
    project.delete()
    logger.info("Project %s deleted by its owner %s", project_id, actor.pk)


@transaction.atomic
def add_member(project_id, user_id, actor):
    # Ownership is checked before membership so non-owners always get Forbidden
    project = _get_owned_project(project_id, actor, "Not authorized to add members to this project")

    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound("User not found")

    if project.has_member(user):
        raise Conflict("User is already a project member")

    project.members.add(user)
    create_notification(
        message=f'You were added to the project "{project.name}"',
        user=user,
        type='system',
        related_item_id=project.pk,
    )
    logger.info("User %s added to project %s", user.pk, project.pk)
    return project


@transaction.atomic
def remove_member(project_id, user_id, actor):
    project = _get_owned_project(project_id, actor, "Not authorized to remove members from this project")

    if user_id == project.owner_id:
        raise BadRequest("Cannot remove the project owner")

    if not project.members.filter(pk=user_id).exists():
        raise NotFound("User is not a member of this project")

    project.members.remove(user_id)
    logger.info("User %s removed from project %s", user_id, project.pk)
    return project


def list_project_tasks(project_id, actor):
    from tasks.models import Task

    project = get_project(project_id, actor)
    return (
        Task.objects.filter(project=project)
        .select_related('assignee', 'created_by', 'project')
        .order_by('-created_at')
    )
