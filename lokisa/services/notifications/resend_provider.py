import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from lokisa.models.geo import Coordinate
from lokisa.models.issue import Issue, NotificationKind
from lokisa.utils.timestamps import utcnow
from .base import DeliveryResult, EmailNotifier, build_subject, issue_type_name

logger = logging.getLogger(__name__)


class ResendEmailNotifier(EmailNotifier):
    """
    Resend (https://resend.com) email notifier.

    - Recipients come from the recipient lookup (municipality routing).
    - Sends a short plain-text summary; no HTML templating.
    - Uses a strict timeout and never raises upstream exceptions.
    """

    name = "resend"
    BASE_URL = "https://api.resend.com/emails"

    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        recipients_for: Callable[[Coordinate, str], List[str]],
        public_base_url: str = "",
        timeout: float = 5.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.recipients_for = recipients_for
        self.public_base_url = public_base_url.rstrip("/")
        self.timeout = timeout

    def _body(self, issue: Issue, kind: NotificationKind) -> str:
        lines = [
            f"Report ID: {issue.report_id}",
            f"Issue Type: {issue_type_name(issue.type)}",
            f"Status: {issue.status.value.upper()}",
            f"Address: {issue.address}",
            f"GPS Coordinates: {issue.latitude:.6f}, {issue.longitude:.6f}",
            f"Google Maps: https://www.google.com/maps?q={issue.latitude},{issue.longitude}",
            f"Reported: {issue.created_at.isoformat()}",
        ]
        if kind == NotificationKind.SUPPORT:
            lines.append(f"Current Supporters: {issue.upvote_count}")
        if issue.notes:
            lines.append(f"Notes: {issue.notes}")
        if issue.photo_url:
            lines.append(f"Photo: {self.public_base_url}{issue.photo_url}")
        return "\n".join(lines)

    def send(self, issue: Issue, kind: NotificationKind) -> DeliveryResult:
        recipients = self.recipients_for(issue.coordinate, issue.type)

        if not self.api_key:
            logger.info("ResendEmailNotifier called without API key; skipping delivery.")
            return DeliveryResult(success=False, error="RESEND_API_KEY not configured", recipients=recipients)

        days_open = (utcnow() - issue.created_at).days if kind == NotificationKind.REMINDER else None
        payload: Dict[str, Any] = {
            "from": self.sender,
            "to": recipients,
            "subject": build_subject(issue, kind, days_open),
            "text": self._body(issue, kind),
        }

        try:
            resp = requests.post(
                self.BASE_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            if resp.status_code >= 300:
                logger.warning(f"Resend delivery failed with status {resp.status_code} for {issue.report_id}")
                return DeliveryResult(success=False, error=f"HTTP {resp.status_code}: {resp.text[:200]}", recipients=recipients)
        except requests.RequestException as e:
            logger.warning(f"Resend delivery error for {issue.report_id}: {e}")
            return DeliveryResult(success=False, error=str(e), recipients=recipients)

        logger.info(f"Email '{kind.value}' sent for {issue.report_id} to {len(recipients)} recipient(s)")
        return DeliveryResult(success=True, recipients=recipients)
