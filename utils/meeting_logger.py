"""
Specialized logging for meeting bookings, email dispatch and time suggestions
"""
import logging
from datetime import datetime
from typing import List, Any

from utils.date_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

class MeetingLogger:
    """Specialized logger for meeting scheduling events"""

    @staticmethod
    def log_slot_selection(meeting: Any):
        """Log a meeting committed through the slot picker"""
        logger.info(f"📅 MEETING BOOKED - {meeting.title}")
        logger.info(f"   🗓️  Slot: {meeting.date.isoformat()} {meeting.time}")
        logger.info(f"   👥 Participants: {', '.join(meeting.participants) or 'None'}")
        if meeting.description:
            logger.info(f"   📝 Description: {meeting.description[:100]}")

    @staticmethod
    def log_day_schedule(day: Any, meetings: List[Any]):
        """Log every meeting of a day in time order"""
        logger.info(f"📋 DAY SCHEDULE - {day.isoformat()}")
        logger.info(f"   📊 Total meetings: {len(meetings)}")

        if not meetings:
            logger.info(f"   ✅ No meetings scheduled")
            return

        for i, meeting in enumerate(meetings, 1):
            logger.info(f"      {i}. {meeting.time} {meeting.title}")
            logger.info(f"         Attendees: {', '.join(meeting.participants) or 'None'}")

    @staticmethod
    def log_dispatch_report(report: Any):
        """Log the outcome of emailing a day's meetings"""
        logger.info(f"📧 EMAIL DISPATCH - {report.date.isoformat()}")

        if report.blocked:
            logger.info(f"   ⛔ Dispatch blocked before sending")
            return

        logger.info(f"   ✅ Sent: {len(report.sent)}")
        if report.failed:
            logger.warning(f"   ❌ Failed: {len(report.failed)} ({', '.join(report.failed)})")

    @staticmethod
    def log_suggestions(output: Any, slot_start_hour: int = 9, slot_end_hour: int = 17):
        """Log suggested windows, flagging those outside bookable hours"""
        suggestions = output.suggestedTimes

        logger.info(f"🤖 SUGGESTED MEETING TIMES ({len(suggestions)})")
        logger.info(f"   💭 Reasoning: {output.reasoning}")

        for i, suggestion in enumerate(suggestions, 1):
            logger.info(f"      {i}. {suggestion.startTime} to {suggestion.endTime}")
            logger.info(f"         Available: {', '.join(suggestion.attendeesAvailable) or 'None'}")

            try:
                start_dt = parse_iso_datetime(suggestion.startTime)
            except ValueError as e:
                logger.error(f"         ❌ Failed to analyze suggested time: {e}")
                continue

            if start_dt.weekday() >= 5:
                logger.info(f"         🗓️  Note: Weekend meeting")
            elif start_dt.hour < slot_start_hour:
                logger.info(f"         🌅 Note: Early morning ({start_dt.strftime('%H:%M')})")
            elif (start_dt.hour, start_dt.minute) > (slot_end_hour, 0):
                logger.info(f"         🌆 Note: After the last slot ({start_dt.strftime('%H:%M')})")

    @staticmethod
    def log_suggestion_failure(title: str, error: Exception):
        logger.error(f"❌ SUGGESTION FAILED - {title}: {error}")
        logger.info(f"   🕒 At: {datetime.now().isoformat()}")
