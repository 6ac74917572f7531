"""
Email collaborator

Delivery is out of scope: the default sender logs the message and reports
success. Anything that can deliver mail plugs in by implementing ``send``.
"""
import logging
from dataclasses import dataclass, asdict
from typing import List, Dict, Any

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised by a sender when a message could not be delivered"""


@dataclass
class EmailMessage:
    to: List[str]
    subject: str
    body: str  # may contain HTML

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EmailSender:
    """Interface for email delivery"""

    def send(self, message: EmailMessage) -> bool:
        """Deliver ``message``. Returns True, or raises EmailDeliveryError."""
        raise NotImplementedError


class LoggingEmailSender(EmailSender):
    """Stub sender: logs the message instead of delivering it"""

    def send(self, message: EmailMessage) -> bool:
        if not message.to:
            raise EmailDeliveryError(f"No recipients for '{message.subject}'")
        logger.info(f"📧 Sending email to {', '.join(message.to)}: {message.subject}")
        logger.debug(f"Email body:\n{message.body}")
        return True


class RecordingEmailSender(EmailSender):
    """Keeps every message it is given; used for dry runs and tests"""

    def __init__(self):
        self.sent: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> bool:
        self.sent.append(message)
        logger.info(f"Recorded email to {len(message.to)} recipient(s): {message.subject}")
        return True
