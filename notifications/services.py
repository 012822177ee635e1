# taskflow notifications/services.py
import logging

from django.conf import settings

from taskflow.exceptions import Forbidden, NotFound, ValidationError
from .models import Notification

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {choice for choice, _ in Notification.TYPE_CHOICES}


def create_notification(message, user, type, related_item_id=None):
    """
    Record a notification for ``user``.

    Internal only: called by other services as a side effect, never exposed
    as an endpoint.
    """
    missing = [name for name, value in (('message', message), ('user', user), ('type', type)) if not value]
    if missing:
        raise ValidationError({field: 'This field is required.' for field in missing})
    if type not in NOTIFICATION_TYPES:
        raise ValidationError({'type': f'"{type}" is not a valid notification type.'})

    notification = Notification.objects.create(
        user=user,
        message=message,
        type=type,
        related_item_id=str(related_item_id) if related_item_id is not None else '',
        is_read=False,
    )
    logger.debug("Notification %s created for user %s", notification.id, user.pk)
    return notification


def list_notifications(actor):
    return Notification.objects.filter(user=actor).order_by('-created_at', '-id')[:settings.NOTIFICATION_LIST_LIMIT]


def unread_count(actor):
    return Notification.objects.filter(user=actor, is_read=False).count()


def _get_owned_notification(notification_id, actor):
    try:
        notification = Notification.objects.get(pk=notification_id)
    except Notification.DoesNotExist:
        raise NotFound("Notification not found")
    if notification.user_id != actor.pk:
        raise Forbidden("Not authorized to access this notification")
    return notification


def mark_read(notification_id, actor):
    notification = _get_owned_notification(notification_id, actor)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return notification


def mark_all_read(actor):
    """Mark the actor's unread notifications as read and return how many changed."""
    return Notification.objects.filter(user=actor, is_read=False).update(is_read=True)


def delete_notification(notification_id, actor):
    notification = _get_owned_notification(notification_id, actor)
    notification.delete()
