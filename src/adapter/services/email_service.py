"""
Email Delivery Adapters

SmtpEmailService sends through the standard library smtplib client on a
worker thread so the event loop never blocks on the SMTP dialogue.
LoggingEmailService is used when no SMTP host is configured.
"""

import asyncio
import logging
import smtplib
from collections import deque
from email.message import EmailMessage
from typing import Any, Deque, Dict, Optional, Tuple

from src.app.services.email_service import IEmailService

logger = logging.getLogger(__name__)

# template name -> (subject, body); both are str.format templates over the model
TEMPLATES: Dict[str, Tuple[str, str]] = {
    "event-created": (
        "New Event Created - Event Control",
        "Hello {first_name},\n\n{message}.\n\nPriority: {priority}\n",
    ),
    "incident-created": (
        "New Incident Reported - Event Control",
        "Hello {first_name},\n\n{message}.\n\nPriority: {priority}\n",
    ),
    "incident-assigned": (
        "Incident Assigned - Event Control",
        "Hello {first_name},\n\n{message}.\n\nPriority: {priority}\n",
    ),
    "incident-escalated": (
        "Incident Escalated - Event Control",
        "Hello {first_name},\n\n{message}.\n\nPriority: {priority}\n",
    ),
}


def render(template: str, model: Dict[str, Any]) -> Tuple[str, str]:
    """Subject and plain-text body; unknown templates fall back to the model's title/message"""
    if template not in TEMPLATES:
        return str(model.get("title", template)), str(model.get("message", ""))
    subject, body = TEMPLATES[template]
    values = {"first_name": "", "message": "", "priority": "medium", **model}
    return subject.format(**values), body.format(**values)


class SmtpEmailService(IEmailService):
    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "noreply@localhost",
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    async def send(self, to: str, template: str, model: Dict[str, Any]) -> None:
        subject, body = render(template, model)
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        await asyncio.to_thread(self._deliver, message)
        logger.info("Email sent: template=%s to=%s", template, to)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(message)


class LoggingEmailService(IEmailService):
    """Records what would have been sent; the default for local development"""

    def __init__(self):
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=500)

    async def send(self, to: str, template: str, model: Dict[str, Any]) -> None:
        subject, _ = render(template, model)
        self.sent.append({"to": to, "template": template, "subject": subject})
        logger.info("Email (not delivered): template=%s to=%s subject=%r", template, to, subject)
