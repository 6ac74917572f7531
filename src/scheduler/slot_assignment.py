"""
Slot assignment for the meeting form

Picking a time slot is the form's submit action: the title and participants
are validated, the slot is checked for an occupant, and the meeting is written
to the store straight away.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Any

from config.settings import Config
from src.storage.meeting_store import Meeting, MeetingStore, MeetingStoreError, StaleWriteError
from utils.date_utils import parse_date, is_valid_time, normalize_time
from utils.meeting_logger import MeetingLogger
from utils.notifications import Notification, RETRY_HINT
from utils.validators import MeetingFormValidator, DataSanitizer

logger = logging.getLogger(__name__)


@dataclass
class TimeSlot:
    time: str
    available: bool
    meeting_id: Optional[str] = None
    meeting_title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "available": self.available,
            "meetingId": self.meeting_id,
            "meetingTitle": self.meeting_title
        }


@dataclass
class SlotSelection:
    """Outcome of picking a time slot"""

    accepted: bool
    notification: Notification
    meeting: Optional[Meeting] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    occupied: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "meeting": self.meeting.to_dict() if self.meeting else None,
            "errors": self.errors,
            "notification": self.notification.to_dict()
        }


class SlotPicker:
    """Presents the slot catalogue for a date and commits slot selections"""

    def __init__(self, store: MeetingStore, config: Config = None):
        self.store = store
        self.config = config or Config()

    def catalogue(self) -> List[str]:
        return self.config.time_slots()

    def default_form(self, selected_date: date = None) -> Dict[str, Any]:
        """Initial form values; no stored meeting is pre-loaded"""
        return {
            "id": None,
            "title": "",
            "date": (selected_date or date.today()).isoformat(),
            "time": self.config.DEFAULT_SLOT,
            "participants": [],
            "description": ""
        }

    def slots_for_date(self, day: date) -> List[TimeSlot]:
        """Every catalogue slot for ``day``; occupied ones are marked unavailable"""
        occupied = self.store.occupied_times(day)

        slots = []
        for time in self.catalogue():
            meeting = occupied.get(time)
            if meeting:
                slots.append(TimeSlot(time, False, meeting.id, meeting.title))
            else:
                slots.append(TimeSlot(time, True))
        return slots

    def is_slot_disabled(self, day: date, time: str) -> bool:
        return normalize_time(time) in self.store.occupied_times(day)

    def _is_known_time(self, time: str) -> bool:
        if time in self.catalogue():
            return True
        return bool(self.config.ALLOW_CUSTOM_TIMES) and is_valid_time(time)

    def select_slot(self, form_data: Dict[str, Any], time: str) -> SlotSelection:
        """
        Validate the in-progress form and store it at ``time``.

        Rejections (unknown time, invalid fields, occupied slot) never write.
        The store version read before the occupancy check is passed to the
        upsert, so a write that slipped in between is refused instead of
        silently overwritten.
        """
        form = DataSanitizer.sanitize_form(form_data)

        if not isinstance(time, str) or not self._is_known_time(time):
            logger.warning(f"Rejected unknown time slot: {time!r}")
            return SlotSelection(
                accepted=False,
                notification=Notification.error("Invalid time", f"{time!r} is not an available time slot."),
                errors={"time": ["A time is required."]}
            )

        time = normalize_time(time)

        errors = MeetingFormValidator.validate_form(form)
        if errors:
            logger.info(f"Slot selection rejected, invalid fields: {sorted(errors)}")
            return SlotSelection(
                accepted=False,
                notification=Notification.error(
                    "Error", "Please fill in the title and participants before selecting a time."
                ),
                errors=errors
            )

        day = parse_date(form["date"])
        version = self.store.version()
        occupant = self.store.occupied_times(day).get(time)
        if occupant and occupant.id != form.get("id"):
            logger.info(f"Slot {day} {time} already taken by '{occupant.title}'")
            return SlotSelection(
                accepted=False,
                notification=Notification.error(
                    "Time unavailable", f"{time} is already booked for '{occupant.title}'."
                ),
                errors={"time": ["This time slot is already booked."]},
                occupied=True
            )

        meeting_fields = dict(
            title=form["title"],
            date=day,
            time=time,
            participants=form["participants"],
            description=form.get("description", "")
        )
        if form.get("id"):
            meeting_fields["id"] = form["id"]
        meeting = Meeting(**meeting_fields)

        try:
            self.store.upsert(meeting, expected_version=version)
        except StaleWriteError as e:
            logger.warning(f"Slot selection lost a race: {e}")
            return SlotSelection(
                accepted=False,
                notification=Notification.error(
                    "Schedule changed", f"Meetings were updated while you were choosing. {RETRY_HINT}"
                ),
                occupied=True
            )
        except MeetingStoreError as e:
            logger.error(f"Failed to save meeting: {e}")
            return SlotSelection(
                accepted=False,
                notification=Notification.error("Failed to save meeting.", f"There was an error saving the meeting. {RETRY_HINT}")
            )

        MeetingLogger.log_slot_selection(meeting)
        return SlotSelection(
            accepted=True,
            meeting=meeting,
            notification=Notification.info("Meeting added.", "Your meeting has been saved.")
        )
