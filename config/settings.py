"""
Configuration settings for MeetingMaestro
"""
import os
from typing import Dict, List


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # Persistent storage
    STORAGE_PATH = os.getenv("MEETING_MAESTRO_STORAGE_PATH", "meetings.json")
    STORAGE_KEY = "meetings"
    MEMORY_STORAGE = ":memory:"

    # Slot catalogue (09:00 - 17:00 hourly)
    SLOT_START_HOUR = 9
    SLOT_END_HOUR = 17
    SLOT_INTERVAL_MINUTES = 60
    DEFAULT_SLOT = "09:00"
    ALLOW_CUSTOM_TIMES = _env_bool("MEETING_MAESTRO_ALLOW_CUSTOM_TIMES", False)

    # Form rules
    MIN_TITLE_LENGTH = 2
    MIN_MEETING_DURATION = 15  # minutes
    MAX_MEETING_DURATION = 120  # minutes
    DEFAULT_MEETING_DURATION = 60  # minutes

    # Participants offered by the form's quick-add list
    AVAILABLE_PARTICIPANTS = [
        "student1@example.com",
        "student2@example.com",
        "student3@example.com",
    ]

    # LLM configuration (any OpenAI-compatible endpoint)
    LLM_PROVIDER = os.getenv("MEETING_MAESTRO_LLM_PROVIDER", "openai")
    LLM_BASE_URL = os.getenv("MEETING_MAESTRO_LLM_BASE_URL", "https://api.openai.com/v1")
    LLM_API_KEY = os.getenv("OPENAI_API_KEY", "")
    DEFAULT_MODEL = os.getenv("MEETING_MAESTRO_MODEL", "gpt-4o-mini")
    LLM_TIMEOUT = 30
    LLM_MAX_RETRIES = 0  # a failed suggestion is terminal for that request

    MAX_TOKENS = 1024
    TEMPERATURE = 0.2
    TOP_P = 0.9

    # API Configuration
    API_HOST = os.getenv("MEETING_MAESTRO_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("MEETING_MAESTRO_PORT", "5000"))

    # Date/Time Formats
    DATE_FORMAT = "%Y-%m-%d"
    TIME_FORMAT = "%H:%M"

    SUGGESTION_PROGRESS = (
        "Implemented AI flow to suggest optimal meeting times based on attendee availability."
    )

    SUGGESTION_PROMPT = """You are a meeting scheduling assistant. Given the following attendees, their availabilities, meeting title, description, and meeting duration, suggest some possible meeting times that work for most of the attendees.  Your suggestions should be as close to the earliestStart as possible, but absolutely must happen before the requiredBy date.  Explain the reasoning for each time selected.

Meeting title: {title}
Meeting description: {description}
Meeting duration: {meeting_duration} minutes
Earliest start time: {earliest_start}
Required by time: {required_by}

Attendees:
{attendees}

Output in JSON format, with startTime and endTime in ISO 8601 format.  List the attendee emails that can attend during the suggested time in the attendeesAvailable field.

The JSON must match this schema:
{output_schema}

Return ONLY the JSON object (no explanations):"""

    @classmethod
    def get_model_config(cls, model_name: str = None) -> Dict[str, str]:
        """Get completion settings for the configured model"""
        return {
            "model": model_name or cls.DEFAULT_MODEL,
            "base_url": cls.LLM_BASE_URL,
            "api_key": cls.LLM_API_KEY,
            "max_tokens": cls.MAX_TOKENS,
            "temperature": cls.TEMPERATURE,
            "top_p": cls.TOP_P
        }

    @classmethod
    def time_slots(cls) -> List[str]:
        """Fixed catalogue of bookable times, e.g. ['09:00', ..., '17:00']"""
        slots = []
        minutes = cls.SLOT_START_HOUR * 60
        last = cls.SLOT_END_HOUR * 60
        while minutes <= last:
            slots.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
            minutes += cls.SLOT_INTERVAL_MINUTES
        return slots
