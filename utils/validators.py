"""
Validation utilities for MeetingMaestro
"""
import re
from typing import Dict, Any, List, Optional

from config.settings import Config
from utils.date_utils import parse_date

class RequestValidator:
    """Shared field checks"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        if not isinstance(email, str):
            return False
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(email_pattern, email))

    @staticmethod
    def validate_title(title: Any, min_length: int = Config.MIN_TITLE_LENGTH) -> Optional[str]:
        """Return an error message for a bad title, or None"""
        if not isinstance(title, str) or len(title.strip()) < min_length:
            return f"Title must be at least {min_length} characters."
        return None

    @staticmethod
    def validate_participants(participants: Any) -> List[str]:
        """Validate a participant list, ignoring empty entries"""
        errors = []

        if not isinstance(participants, list):
            return ["'participants' must be a list"]

        cleaned = [p for p in participants if p != ""]
        for i, participant in enumerate(cleaned):
            if not RequestValidator.validate_email(participant):
                errors.append(f"Invalid email format in participant {i}: {participant}")

        if not cleaned:
            errors.append("At least one participant is required.")

        return errors


class MeetingFormValidator:
    """Validator for the meeting form"""

    @staticmethod
    def validate_slot_fields(form_data: Dict[str, Any]) -> Dict[str, List[str]]:
        """
        Validate the fields checked when a time slot is picked (title and
        participants). Returns a mapping of field name to error messages;
        an empty mapping means the form is valid.
        """
        errors: Dict[str, List[str]] = {}

        title_error = RequestValidator.validate_title(form_data.get("title"))
        if title_error:
            errors["title"] = [title_error]

        participant_errors = RequestValidator.validate_participants(form_data.get("participants", []))
        if participant_errors:
            errors["participants"] = participant_errors

        return errors

    @staticmethod
    def validate_form(form_data: Dict[str, Any]) -> Dict[str, List[str]]:
        """Validate every form field"""
        errors = MeetingFormValidator.validate_slot_fields(form_data)

        try:
            parse_date(form_data.get("date"))
        except ValueError:
            errors["date"] = ["A date is required."]

        description = form_data.get("description", "")
        if description is not None and not isinstance(description, str):
            errors["description"] = ["'description' must be text"]

        return errors


class SuggestionRequestValidator:
    """Validator for the suggest-meeting-times form"""

    @staticmethod
    def validate_request_structure(request_data: Dict[str, Any]) -> List[str]:
        """Validate request data structure and return list of errors"""
        errors = []

        title_error = RequestValidator.validate_title(request_data.get("title"))
        if title_error:
            errors.append(title_error)

        duration = request_data.get("meetingDuration")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            errors.append("'meetingDuration' must be a number of minutes")
        elif duration < Config.MIN_MEETING_DURATION:
            errors.append(f"Meeting duration must be at least {Config.MIN_MEETING_DURATION} minutes.")
        elif duration > Config.MAX_MEETING_DURATION:
            errors.append(f"Meeting duration cannot exceed {Config.MAX_MEETING_DURATION} minutes.")

        for field in ("requiredBy", "earliestStart"):
            if not isinstance(request_data.get(field), str):
                errors.append(f"'{field}' must be a string")

        attendees = request_data.get("attendees")
        if not isinstance(attendees, list):
            errors.append("'attendees' must be a list")
        elif not attendees:
            errors.append("At least one attendee is required.")
        else:
            for i, attendee in enumerate(attendees):
                if not isinstance(attendee, dict) or "email" not in attendee:
                    errors.append(f"Attendee {i} must have 'email' field")
                elif not RequestValidator.validate_email(attendee["email"]):
                    errors.append(f"Invalid email format in attendee {i}: {attendee['email']}")

        return errors


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_participants(participants: Any) -> List[str]:
        """
        Normalize the participants field into a list of emails.

        A comma separated string is split (the form's free-text input), each
        entry is stripped and empty entries are dropped.
        """
        if participants is None:
            return []
        if isinstance(participants, str):
            participants = participants.split(',')
        if not isinstance(participants, list):
            return participants

        cleaned = []
        for participant in participants:
            if not isinstance(participant, str):
                cleaned.append(participant)
                continue
            participant = participant.strip()
            if participant:
                cleaned.append(participant)
        return cleaned

    @staticmethod
    def sanitize_form(form_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize a meeting form payload"""
        sanitized = dict(form_data)

        if isinstance(sanitized.get("title"), str):
            sanitized["title"] = sanitized["title"].strip()

        sanitized["participants"] = DataSanitizer.sanitize_participants(sanitized.get("participants"))

        if sanitized.get("description") is None:
            sanitized["description"] = ""

        return sanitized
