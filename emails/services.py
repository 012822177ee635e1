# taskflow emails/services.py
import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, make_msgid
from django.utils.html import escape
from django.utils.http import urlencode

from taskflow.exceptions import BadRequest, EmailDeliveryFailed

logger = logging.getLogger(__name__)


def send_email(to, subject, html=None, text=None):
    """
    Send a single email and return its delivery identifier.

    Args:
        to (str | list): Recipient address or list of addresses.
        subject (str): Subject line.
        html (str): HTML body. At least one of ``html``/``text`` is required.
        text (str): Plain-text body.

    Returns:
        dict: ``{"success": True, "message_id": "<...>"}``
    """
    if not to or not (html or text):
        raise BadRequest("Missing required email parameters")

    recipients = [to] if isinstance(to, str) else list(to)
    message_id = make_msgid(domain='taskflow')
    message = EmailMultiAlternatives(
        subject=subject or '',
        body=text or '',
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
        headers={'Message-ID': message_id},
    )
    if html:
        message.attach_alternative(html, 'text/html')

    try:
        message.send(fail_silently=False)
    except (SMTPException, OSError) as exc:
        logger.error("Error sending email to %s: %s", recipients, exc)
        raise EmailDeliveryFailed()

    logger.info("Email sent: %s", message_id)
    return {'success': True, 'message_id': message_id}


def send_welcome_email(email, name):
    return send_email(
        to=email,
        subject='Welcome to Taskflow',
        html=(
            "<h1>Welcome to Taskflow!</h1>"
            f"<p>Hello {escape(name)},</p>"
            "<p>Thank you for joining Taskflow. We're excited to have you on board!</p>"
            "<p>If you have any questions, please don't hesitate to reach out to our support team.</p>"
            "<p>Best regards,<br>The Taskflow Team</p>"
        ),
        text=(
            f"Welcome to Taskflow! Hello {name}, thank you for joining Taskflow. "
            "We're excited to have you on board! If you have any questions, please don't "
            "hesitate to reach out to our support team. Best regards, The Taskflow Team"
        ),
    )


def send_password_reset_email(email, reset_token, base_url):
    reset_url = f"{base_url.rstrip('/')}/reset-password?{urlencode({'token': reset_token, 'email': email})}"
    return send_email(
        to=email,
        subject='Password Reset Request',
        html=(
            "<h1>Password Reset</h1>"
            "<p>You requested a password reset for your account.</p>"
            "<p>Click the link below to reset your password:</p>"
            f'<a href="{escape(reset_url)}">Reset Password</a>'
            "<p>If you didn't request this, please ignore this email.</p>"
            "<p>This link will expire in 1 hour.</p>"
        ),
        text=(
            f"Password Reset: You requested a password reset. Please visit {reset_url} "
            "to reset your password. If you didn't request this, please ignore this email. "
            "This link will expire in 1 hour."
        ),
    )
