"""
Day view of the stored meetings, with the bulk copy and email actions
"""
import html
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Dict, Any, Optional

from src.notifications.clipboard import Clipboard, ClipboardError
from src.notifications.email_sender import EmailDeliveryError, EmailMessage, EmailSender
from src.storage.meeting_store import Meeting, MeetingStore
from utils.date_utils import parse_date, format_long_date
from utils.meeting_logger import MeetingLogger
from utils.notifications import Notification, RETRY_HINT

logger = logging.getLogger(__name__)


def short_name(email: str) -> str:
    """Local part of an email address"""
    return email.split('@')[0]


@dataclass
class CopyResult:
    copied: bool
    notification: Notification
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "copied": self.copied,
            "text": self.text,
            "notification": self.notification.to_dict()
        }


@dataclass
class DispatchReport:
    """Result of emailing every meeting of one day"""

    date: date
    blocked: bool = False
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "blocked": self.blocked,
            "sent": self.sent,
            "failed": self.failed,
            "notifications": [n.to_dict() for n in self.notifications]
        }


class DayView:
    """Meetings of a selected date, sorted by time"""

    def __init__(self, store: MeetingStore):
        self.store = store

    def meetings_for_date(self, day: date) -> List[Meeting]:
        return self.store.meetings_for_date(parse_date(day))

    def entries_for_date(self, day: date) -> List[Dict[str, Any]]:
        """Render the day's meetings; attendees are shown by short name"""
        day = parse_date(day)
        meetings = self.meetings_for_date(day)
        MeetingLogger.log_day_schedule(day, meetings)

        entries = []
        for meeting in meetings:
            entry = meeting.to_dict()
            entry["attendees"] = [short_name(p) for p in meeting.participants]
            entries.append(entry)
        return entries

    def meeting_dates(self) -> List[date]:
        return self.store.meeting_dates()

    @staticmethod
    def format_meetings_text(day: date, meetings: List[Meeting]) -> str:
        text = f"Meetings for {format_long_date(day)}:\n\n"
        for index, meeting in enumerate(meetings, 1):
            text += f"Meeting {index}:\n"
            text += f"Title: {meeting.title}\n"
            text += f"Date: {format_long_date(meeting.date)}\n"
            text += f"Time: {meeting.time}\n"
            text += f"Participants: {', '.join(meeting.participants)}\n"
            text += f"Description: {meeting.description}\n\n"
        return text

    def copy_all(self, day: date, clipboard: Clipboard) -> CopyResult:
        """Copy a text summary of the day's meetings to ``clipboard``"""
        day = parse_date(day)
        meetings = self.meetings_for_date(day)

        if not meetings:
            return CopyResult(
                copied=False,
                notification=Notification.error(
                    "No meetings scheduled", "No meetings scheduled for the selected date to copy."
                )
            )

        text = self.format_meetings_text(day, meetings)
        try:
            clipboard.write_text(text)
        except ClipboardError as e:
            logger.error(f"Failed to copy meetings to clipboard: {e}")
            return CopyResult(
                copied=False,
                notification=Notification.error(
                    "Copy Failed", f"Could not copy meeting details to clipboard. {RETRY_HINT}"
                )
            )

        logger.info(f"Copied {len(meetings)} meetings for {day}")
        return CopyResult(
            copied=True,
            text=text,
            notification=Notification.info(
                "Meetings Copied!", "All meeting details for this date have been copied to your clipboard."
            )
        )

    @staticmethod
    def build_email(meeting: Meeting) -> EmailMessage:
        long_date = format_long_date(meeting.date)
        body = (
            "<h2>Meeting Details</h2>\n"
            f"<p><strong>Title:</strong> {html.escape(meeting.title)}</p>\n"
            f"<p><strong>Date:</strong> {long_date}</p>\n"
            f"<p><strong>Time:</strong> {html.escape(meeting.time)}</p>\n"
            f"<p><strong>Description:</strong> {html.escape(meeting.description)}</p>\n"
            "<p>Please be on time and prepared for the meeting.</p>\n"
        )
        return EmailMessage(
            to=list(meeting.participants),
            subject=f"Meeting: {meeting.title} - {long_date}",
            body=body
        )

    def send_email_for_date(self, day: date, sender: EmailSender) -> DispatchReport:
        """
        Email every meeting of ``day``, one message per meeting, in time order.

        An empty day, or any meeting without participants, blocks the whole
        action before anything is sent. A failed send is reported and the
        remaining meetings are still attempted.
        """
        day = parse_date(day)
        report = DispatchReport(date=day)
        meetings = self.meetings_for_date(day)

        if not meetings:
            report.blocked = True
            report.notifications.append(Notification.error(
                "No meetings scheduled", "No meetings scheduled for the selected date."
            ))
            return report

        if any(not meeting.participants for meeting in meetings):
            report.blocked = True
            report.notifications.append(Notification.error(
                "No participants added", "Please add participants before sending the email."
            ))
            return report

        for meeting in meetings:
            message = self.build_email(meeting)
            try:
                delivered = sender.send(message)
            except EmailDeliveryError as e:
                logger.error(f"Failed to send email for '{meeting.title}': {e}")
                delivered = False

            if not delivered:
                report.failed.append(meeting.id)
                report.notifications.append(Notification.error(
                    "Failed to send email.", f"There was an error sending the email for '{meeting.title}'. {RETRY_HINT}"
                ))
                continue

            report.sent.append(meeting.id)
            report.notifications.append(Notification.info(
                "Email sent.", f"Email for '{meeting.title}' has been sent to the participants."
            ))

        MeetingLogger.log_dispatch_report(report)
        return report
