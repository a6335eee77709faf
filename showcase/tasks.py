import logging
from datetime import datetime, timezone

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@shared_task
def notify_contact_message(user_id: int, sender_name: str, sender_email: str, message: str) -> str:
    """E-mail the page owner a copy of a visitor's message."""
    user = get_user_model().objects.filter(pk=user_id).first()
    if not user or not user.email:
        logger.info("No e-mail on file for user %s; skipping contact notification", user_id)
        return "skipped"
    subject = f"New message from {sender_name} via your page"
    body = f"From: {sender_name} <{sender_email}>\n\n{message}"
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [user.email])
    return f"sent:{datetime.now(timezone.utc).isoformat()}"
