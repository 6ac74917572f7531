"""
Persistent meeting store

The whole meeting collection lives under one key of a KeyValueStorage as a
single JSON document::

    {"version": 3, "meetings": [{"id": ..., "title": ..., "date": "2024-06-03",
                                 "time": "09:00", "participants": [...],
                                 "description": ...}, ...]}

A bare JSON array of meetings (the older layout) is still read, as version 0.
Every write replaces the full document; there is no partial update.
"""
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple, Any

from config.settings import Config
from src.storage.key_value_storage import KeyValueStorage, StorageError
from utils.date_utils import parse_date, parse_time, is_valid_time, normalize_time
from utils.validators import RequestValidator

logger = logging.getLogger(__name__)

# Stable ids for records written before meetings carried one
LEGACY_ID_NAMESPACE = uuid.UUID("6f1b8c52-3f0e-4c55-9a57-8f6f2c1d0e4a")


class MeetingStoreError(Exception):
    """Base error for meeting store writes"""


class InvalidMeetingError(MeetingStoreError, ValueError):
    """Raised when a meeting breaks the stored-record invariants"""


class StaleWriteError(MeetingStoreError):
    """Raised when the collection changed since the caller last read it"""

    def __init__(self, expected_version: int, current_version: int):
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Stale write: expected version {expected_version}, store is at {current_version}"
        )


def _new_id() -> str:
    return uuid.uuid4().hex


def _clean_participants(participants) -> List[str]:
    if participants is None:
        return []
    return [p for p in participants if p != ""]


@dataclass
class Meeting:
    """A scheduled meeting occupying one (date, time) slot"""

    title: str
    date: date
    time: str
    participants: List[str] = field(default_factory=list)
    description: str = ""
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        self.date = parse_date(self.date)
        self.time = normalize_time(self.time)
        self.participants = _clean_participants(self.participants)
        if self.description is None:
            self.description = ""

    @property
    def slot(self) -> Tuple[date, str]:
        return (self.date, self.time)

    @property
    def sort_key(self):
        return parse_time(self.time)

    def validate(self) -> List[str]:
        """Return a list of invariant violations (empty when valid)"""
        errors = []

        title_error = RequestValidator.validate_title(self.title)
        if title_error:
            errors.append(title_error)

        if not is_valid_time(self.time):
            errors.append(f"Invalid time: {self.time!r}. Expected: HH:MM")

        for participant in self.participants:
            if not RequestValidator.validate_email(participant):
                errors.append(f"Invalid participant email: {participant!r}")

        if not isinstance(self.description, str):
            errors.append("'description' must be text")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored record format"""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat(),
            "time": self.time,
            "participants": list(self.participants),
            "description": self.description
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Meeting":
        """Build a meeting from a stored record; raises on malformed records"""
        if not isinstance(data, dict):
            raise TypeError(f"Meeting record must be an object, got {type(data).__name__}")

        meeting_date = parse_date(data["date"])
        time = data["time"]
        if not is_valid_time(time):
            raise ValueError(f"Invalid time in stored meeting: {time!r}")

        title = data["title"]
        if not isinstance(title, str):
            raise TypeError("'title' must be a string")

        description = data.get("description")
        if description is not None and not isinstance(description, str):
            raise TypeError("'description' must be a string")

        participants = data.get("participants") or []
        if not isinstance(participants, list) or not all(isinstance(p, str) for p in participants):
            raise TypeError("'participants' must be a list of strings")

        time = normalize_time(time)
        meeting_id = data.get("id") or uuid.uuid5(
            LEGACY_ID_NAMESPACE, f"{meeting_date.isoformat()}T{time}"
        ).hex

        return cls(
            title=title,
            date=meeting_date,
            time=time,
            participants=participants,
            description=description or "",
            id=meeting_id
        )


class MeetingStore:
    """
    Read-modify-write store for the full meeting collection.

    Single-writer by assumption: the occupancy check inside ``upsert`` and the
    following write are not atomic. Callers that need to detect a concurrent
    writer pass the ``expected_version`` they read.
    """

    def __init__(self, storage: KeyValueStorage, key: str = None):
        self.storage = storage
        self.key = key or Config.STORAGE_KEY

    def _read_payload(self) -> Tuple[int, List[Meeting]]:
        """Load (version, meetings), failing soft to (0, [])"""
        try:
            raw = self.storage.get(self.key)
        except StorageError as e:
            logger.error(f"Failed to read meetings from storage: {e}")
            return 0, []

        if raw is None:
            return 0, []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Failed to parse meetings from storage: {e}")
            return 0, []

        if isinstance(data, list):
            version, records = 0, data
        elif isinstance(data, dict) and isinstance(data.get("meetings"), list):
            records = data["meetings"]
            try:
                version = int(data.get("version", 0))
            except (TypeError, ValueError):
                logger.error(f"Invalid collection version in storage: {data.get('version')!r}")
                return 0, []
        else:
            logger.error("Failed to parse meetings from storage: unexpected document shape")
            return 0, []

        meetings = []
        for i, record in enumerate(records):
            try:
                meetings.append(Meeting.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping malformed stored meeting {i}: {e}")

        return version, meetings

    def _write(self, meetings: List[Meeting], current_version: int,
               expected_version: Optional[int]) -> int:
        if expected_version is not None and expected_version != current_version:
            raise StaleWriteError(expected_version, current_version)

        new_version = current_version + 1
        payload = {
            "version": new_version,
            "meetings": [meeting.to_dict() for meeting in meetings]
        }

        try:
            self.storage.set(self.key, json.dumps(payload))
        except StorageError as e:
            raise MeetingStoreError(f"Failed to save meetings: {e}") from e

        logger.debug(f"Saved {len(meetings)} meetings (version {new_version})")
        return new_version

    def load_all(self) -> List[Meeting]:
        """Every stored meeting, in stored order. Never raises."""
        _, meetings = self._read_payload()
        return meetings

    def version(self) -> int:
        version, _ = self._read_payload()
        return version

    def save_all(self, meetings: List[Meeting], expected_version: int = None) -> int:
        """
        Overwrite the whole collection. Returns the new version.

        Raises StaleWriteError when ``expected_version`` is given and the
        stored collection has moved on.
        """
        current_version, _ = self._read_payload()
        return self._write(list(meetings), current_version, expected_version)

    def upsert(self, meeting: Meeting, expected_version: int = None) -> Meeting:
        """
        Insert ``meeting``, replacing whatever occupied its (date, time) slot.

        A stored meeting with the same id is replaced as well, so an edit that
        moves a meeting to another slot does not leave the old copy behind.
        """
        errors = meeting.validate()
        if errors:
            raise InvalidMeetingError("; ".join(errors))

        current_version, meetings = self._read_payload()
        kept = [
            existing for existing in meetings
            if existing.slot != meeting.slot and existing.id != meeting.id
        ]
        replaced = len(meetings) - len(kept)
        kept.append(meeting)

        self._write(kept, current_version, expected_version)

        if replaced:
            logger.info(f"Replaced {replaced} meeting(s) at {meeting.date} {meeting.time}")
        logger.info(f"Stored meeting '{meeting.title}' at {meeting.date} {meeting.time}")
        return meeting

    def get(self, meeting_id: str) -> Optional[Meeting]:
        for meeting in self.load_all():
            if meeting.id == meeting_id:
                return meeting
        return None

    def delete(self, meeting_id: str, expected_version: int = None) -> bool:
        current_version, meetings = self._read_payload()
        kept = [meeting for meeting in meetings if meeting.id != meeting_id]
        if len(kept) == len(meetings):
            return False

        self._write(kept, current_version, expected_version)
        logger.info(f"Deleted meeting {meeting_id}")
        return True

    def clear(self) -> None:
        """Remove the entire collection"""
        try:
            self.storage.delete(self.key)
        except StorageError as e:
            raise MeetingStoreError(f"Failed to clear meetings: {e}") from e
        logger.info("Cleared all stored meetings")

    def meetings_for_date(self, day: date) -> List[Meeting]:
        """Meetings on ``day``, ordered by time ascending"""
        day = parse_date(day)
        meetings = [meeting for meeting in self.load_all() if meeting.date == day]
        return sorted(meetings, key=lambda meeting: meeting.sort_key)

    def occupied_times(self, day: date) -> Dict[str, Meeting]:
        return {meeting.time: meeting for meeting in self.meetings_for_date(day)}

    def meeting_dates(self) -> List[date]:
        """Distinct dates that have at least one meeting, ascending"""
        return sorted({meeting.date for meeting in self.load_all()})
