"""
Email notifications for issue events (new report, support, reminder).

Delivery is best effort and never blocks the operation that triggered it.
"""

from lokisa.services.notifications.base import DeliveryResult, EmailNotifier, notify_safely
from lokisa.services.notifications.log_provider import LoggingEmailNotifier
from lokisa.services.notifications.resend_provider import ResendEmailNotifier
from lokisa.services.notifications.registry import get_email_notifier

__all__ = [
    "DeliveryResult",
    "EmailNotifier",
    "LoggingEmailNotifier",
    "ResendEmailNotifier",
    "get_email_notifier",
    "notify_safely",
]
