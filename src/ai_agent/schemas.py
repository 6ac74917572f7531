"""
Request/response schemas for the meeting time suggestion flow
"""
import json
from typing import List

from pydantic import BaseModel, Field, field_validator

from utils.date_utils import parse_iso_datetime
from utils.validators import RequestValidator


def _check_email(value: str) -> str:
    if not RequestValidator.validate_email(value):
        raise ValueError(f"Invalid email format: {value}")
    return value


class Attendee(BaseModel):
    email: str = Field(..., description="The email address of the attendee.")
    availability: str = Field(
        "",
        description="The availability of the attendee, in a format like: Monday: 9am-5pm, Tuesday: 10am-6pm"
    )

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, value: str) -> str:
        return _check_email(value)


class SuggestMeetingTimesInput(BaseModel):
    attendees: List[Attendee] = Field(..., description="The list of attendees and their availability.")
    meetingDuration: int = Field(..., description="The duration of the meeting in minutes.")
    requiredBy: str = Field(..., description="The latest date and time that the meeting must take place by")
    earliestStart: str = Field(..., description="The earliest possible time the meeting can start")
    title: str = Field(..., description="Title of meeting")
    description: str = Field("", description="Description of meeting")


class SuggestedTime(BaseModel):
    startTime: str = Field(..., description="The suggested start time for the meeting, in ISO 8601 format.")
    endTime: str = Field(..., description="The suggested end time for the meeting, in ISO 8601 format.")
    attendeesAvailable: List[str] = Field(
        ...,
        description="List of the attendee emails that are available for the meeting during this period."
    )

    @field_validator("startTime", "endTime")
    @classmethod
    def must_be_iso_8601(cls, value: str) -> str:
        try:
            parse_iso_datetime(value)
        except ValueError:
            raise ValueError(f"Not an ISO 8601 timestamp: {value!r}")
        return value

    @field_validator("attendeesAvailable")
    @classmethod
    def emails_must_be_valid(cls, value: List[str]) -> List[str]:
        return [_check_email(email) for email in value]


class ModelSuggestion(BaseModel):
    """What the language model is asked to return"""

    suggestedTimes: List[SuggestedTime] = Field(..., description="A list of suggested meeting times.")
    reasoning: str = Field(..., description="The reason why this meeting time was selected")


class SuggestMeetingTimesOutput(ModelSuggestion):
    progress: str = Field(..., description="A short summary of the flow progress.")


def model_output_schema() -> str:
    """JSON schema of the model's expected reply, for embedding in the prompt"""
    return json.dumps(ModelSuggestion.model_json_schema(), indent=2)
