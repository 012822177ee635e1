# taskflow tasks/services.py
"""
Task access rules.

The creator and the current assignee may read and update a task; only the
creator may delete it. Comments are readable by any authenticated user.
"""
import logging

from django.db.models import Case, IntegerField, Q, Value, When

from notifications.services import create_notification
from taskflow.exceptions import Forbidden, NotFound
from .models import Task, Comment

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'description', 'status', 'priority', 'due_date', 'assignee', 'project', 'tags')

# Urgency order, least urgent first
PRIORITY_RANK = Case(
    *[When(priority=choice, then=Value(rank)) for rank, (choice, _) in enumerate(Task.PRIORITY_CHOICES)],
    output_field=IntegerField(),
)


def _get_task(task_id):
    try:
        return Task.objects.select_related('assignee', 'created_by', 'project').get(pk=task_id)
    except Task.DoesNotExist:
        raise NotFound("Task not found")


def _notify_assignee(task, actor):
    if task.assignee_id is None or task.assignee_id == actor.pk:
        return
    create_notification(
        message=f'{actor.name} assigned you the task "{task.title}"',
        user=task.assignee,
        type='task',
        related_item_id=task.pk,
    )


def tasks_for_user(user):
    return Task.objects.filter(Q(created_by=user) | Q(assignee=user)).distinct()


def list_tasks_for_user(actor):
    return (
        tasks_for_user(actor)
        .select_related('assignee', 'created_by', 'project')
        .annotate(priority_rank=PRIORITY_RANK)
    )


def create_task(actor, title, **fields):
    """
    Create a task owned by ``actor``. Without an explicit assignee the task
    is assigned to its creator.
    """
    if fields.get('assignee') is None:
        fields['assignee'] = actor
    fields.setdefault('tags', [])

    task = Task.objects.create(title=title, created_by=actor, **fields)
    _notify_assignee(task, actor)
    logger.info("Task %s created by user %s", task.pk, actor.pk)
    return task


def get_task(task_id, actor):
    task = _get_task(task_id)
    if not task.is_creator(actor) and not task.is_assignee(actor):
        raise Forbidden("Not authorized to access this task")
    return task


def update_task(task_id, actor, **fields):
    """
    Apply the given fields to the task; fields that are not passed keep
    their current value.
    """
    task = _get_task(task_id)
    if not task.is_creator(actor) and not task.is_assignee(actor):
        raise Forbidden("Not authorized to update this task")

    previous_assignee_id = task.assignee_id
    for name in UPDATABLE_FIELDS:
        if name in fields:
            setattr(task, name, fields[name])
    task.save()

    if task.assignee_id != previous_assignee_id:
        _notify_assignee(task, actor)
        logger.info("Task %s reassigned from %s to %s", task.pk, previous_assignee_id, task.assignee_id)
    return task


def delete_task(task_id, actor):
    task = _get_task(task_id)
    if not task.is_creator(actor):
        raise Forbidden("Not authorized to delete this task")
    task.delete()
    logger.info("Task %s deleted by user %s", task_id, actor.pk)


def list_comments_for_task(task_id):
    if not Task.objects.filter(pk=task_id).exists():
        raise NotFound("Task not found")
    return (
        Comment.objects.filter(task_id=task_id)
        .select_related('user')
        .prefetch_related('mentions')
        .order_by('created_at', 'id')
    )
