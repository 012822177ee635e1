# taskflow accounts/services.py
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.crypto import get_random_string
from django.utils.timezone import now

from emails.services import send_password_reset_email, send_welcome_email
from teams.services import leave_team, teams_for_user
from taskflow.exceptions import BadRequest, Conflict, EmailDeliveryFailed, Forbidden, NotFound
from .models import PasswordResetToken

User = get_user_model()
logger = logging.getLogger(__name__)

PASSWORD_RESET_MESSAGE = 'If an account with that email exists, a password reset link has been sent.'
INVALID_RESET_TOKEN_MESSAGE = 'Invalid or expired reset token.'


def _email_taken(email, exclude_pk=None):
    queryset = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    return queryset.exists()


def register_user(name, email, password):
    email = User.objects.normalize_email(email)
    if _email_taken(email):
        raise Conflict("User already exists")

    user = User.objects.create_user(email=email, name=name, password=password)
    logger.info("Registered user %s", user.pk)

    try:
        send_welcome_email(user.email, user.name)
    except EmailDeliveryFailed:
        logger.warning("Welcome email could not be delivered to user %s", user.pk)
    return user


def get_user(user_id):
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound("User not found")


def update_profile(actor, name=None, avatar=None):
    if name:
        actor.name = name
    if avatar is not None:
        actor.avatar = avatar
    actor.save()
    return actor


def update_user(user_id, actor, name=None, email=None, avatar=None):
    if user_id != actor.pk:
        raise Forbidden("Not authorized to update this user")

    user = get_user(user_id)
    if email:
        email = User.objects.normalize_email(email)
        if _email_taken(email, exclude_pk=user.pk):
            raise Conflict("Email is already in use")
        user.email = email
    if name:
        user.name = name
    if avatar is not None:
        user.avatar = avatar
    user.save()
    return user


def change_password(actor, current_password, new_password):
    if not actor.check_password(current_password):
        raise BadRequest("Current password incorrect")
    actor.set_password(new_password)
    actor.save()
    logger.info("Password changed for user %s", actor.pk)


def delete_account(actor):
    """
    Delete the actor's account after they leave every team, so owned teams
    pass to a remaining member or are deleted once empty.
    """
    user_id = actor.pk
    with transaction.atomic():
        for team_id in list(teams_for_user(actor).values_list('id', flat=True)):
            leave_team(team_id, actor)
        actor.delete()
    logger.info("Deleted account %s", user_id)


def request_password_reset(email, base_url=None):
    """
    Issue a reset token and email a reset link when ``email`` belongs to a user.

    Returns nothing and never raises for an unknown address or a mail failure,
    so callers always answer with ``PASSWORD_RESET_MESSAGE``.
    """
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        logger.info("Password reset requested for an unknown email")
        return

    token = PasswordResetToken.objects.create(
        user=user,
        token=get_random_string(48),
        expires_at=now() + settings.PASSWORD_RESET_TOKEN_LIFETIME,
    )
    try:
        send_password_reset_email(user.email, token.token, base_url or settings.FRONTEND_URL)
    except EmailDeliveryFailed:
        logger.warning("Password reset email could not be delivered to user %s", user.pk)


def _get_valid_token(email, token):
    record = (
        PasswordResetToken.objects
        .select_related('user')
        .filter(user__email__iexact=email, token=token)
        .first()
    )
    if record is None:
        raise BadRequest(INVALID_RESET_TOKEN_MESSAGE)
    if record.is_expired():
        record.delete()
        raise BadRequest(INVALID_RESET_TOKEN_MESSAGE)
    return record


def verify_reset_token(email, token):
    _get_valid_token(email, token)


def reset_password(email, token, new_password):
    record = _get_valid_token(email, token)
    user = record.user
    with transaction.atomic():
        user.set_password(new_password)
        user.save()
        PasswordResetToken.objects.filter(user=user).delete()
    logger.info("Password reset completed for user %s", user.pk)
    return user
