import logging
from typing import Optional

from lokisa.core.settings import settings
from lokisa.services.municipality_resolver import get_municipality_resolver
from .base import EmailNotifier
from .log_provider import LoggingEmailNotifier
from .resend_provider import ResendEmailNotifier

logger = logging.getLogger(__name__)

_notifier_instance: Optional[EmailNotifier] = None


def get_email_notifier() -> EmailNotifier:
    """
    Resolve the active email notifier based on settings.

    Rules:
    - EMAIL_PROVIDER='resend' AND RESEND_API_KEY set: Resend.
    - Anything else: logging notifier (nothing leaves the process).
    """
    global _notifier_instance
    if _notifier_instance is not None:
        return _notifier_instance

    recipients_for = get_municipality_resolver().department_emails
    provider_name = (settings.EMAIL_PROVIDER or "log").lower()

    if provider_name == "resend" and settings.RESEND_API_KEY:
        _notifier_instance = ResendEmailNotifier(
            api_key=settings.RESEND_API_KEY,
            sender=settings.EMAIL_FROM,
            recipients_for=recipients_for,
            public_base_url=settings.PUBLIC_BASE_URL,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    else:
        if provider_name == "resend":
            logger.warning("EMAIL_PROVIDER is 'resend' but RESEND_API_KEY is not set. Emails will only be logged.")
        _notifier_instance = LoggingEmailNotifier(recipients_for=recipients_for)

    logger.info(f"Email notifier initialized: {_notifier_instance.name}")
    return _notifier_instance
