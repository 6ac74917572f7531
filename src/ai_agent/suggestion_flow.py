"""
Suggest meeting times from free-text attendee availability.

The flow renders the request into a prompt, asks the language model for
candidate windows, and validates the reply against ``ModelSuggestion``. All
scheduling judgement is left to the model; nothing here ranks or solves.
"""
import logging
from typing import Dict, Any, List, Union

from pydantic import ValidationError

from config.settings import Config
from src.ai_agent.schemas import (
    SuggestMeetingTimesInput, SuggestMeetingTimesOutput, ModelSuggestion, model_output_schema
)
from utils.meeting_logger import MeetingLogger

logger = logging.getLogger(__name__)


class SuggestionFlowError(Exception):
    """The flow could not produce a validated suggestion"""


class SuggestionInputError(SuggestionFlowError):
    """The request itself does not match the input schema"""

    def __init__(self, message: str, errors: List[str] = None):
        super().__init__(message)
        self.errors = errors or []


def _format_validation_errors(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]


def create_llm_client(config: Config = None, model_name: str = None):
    """Build the completion client named by ``Config.LLM_PROVIDER``"""
    config = config or Config()
    if config.LLM_PROVIDER == "mock":
        from src.ai_agent.mock_llm_client import MockLLMClient
        return MockLLMClient(model_name)

    from src.ai_agent.llm_client import LLMClient
    return LLMClient(model_name, config=config)


class SuggestionFlow:
    """Schema-validated wrapper around the time-suggesting completion call"""

    def __init__(self, llm_client=None, config: Config = None):
        self.config = config or Config()
        self.llm_client = llm_client or create_llm_client(self.config)

    def build_prompt(self, request: SuggestMeetingTimesInput) -> str:
        attendee_lines = "\n".join(
            f"- Email: {attendee.email}, Availability: {attendee.availability}"
            for attendee in request.attendees
        )

        return self.config.SUGGESTION_PROMPT.format(
            title=request.title,
            description=request.description,
            meeting_duration=request.meetingDuration,
            earliest_start=request.earliestStart,
            required_by=request.requiredBy,
            attendees=attendee_lines,
            output_schema=model_output_schema()
        )

    def suggest(self, request_data: Union[Dict[str, Any], SuggestMeetingTimesInput]) -> SuggestMeetingTimesOutput:
        """
        Suggest meeting times.

        Raises SuggestionInputError for a malformed request and
        SuggestionFlowError when the model call fails or its reply does not
        match the schema. Partial replies are never returned.
        """
        try:
            request = SuggestMeetingTimesInput.model_validate(request_data)
        except ValidationError as e:
            errors = _format_validation_errors(e)
            raise SuggestionInputError("Invalid suggestion request", errors) from e

        logger.info(f"Suggesting times for '{request.title}' with {len(request.attendees)} attendee(s)")

        prompt = self.build_prompt(request)
        payload = self.llm_client.complete_json(prompt)

        if payload is None:
            error = SuggestionFlowError("The suggestion service did not return a usable reply")
            MeetingLogger.log_suggestion_failure(request.title, error)
            raise error

        try:
            model_output = ModelSuggestion.model_validate(payload)
        except ValidationError as e:
            errors = "; ".join(_format_validation_errors(e))
            MeetingLogger.log_suggestion_failure(request.title, e)
            raise SuggestionFlowError(f"Suggestion reply does not match the schema: {errors}") from e

        output = SuggestMeetingTimesOutput(
            suggestedTimes=model_output.suggestedTimes,
            reasoning=model_output.reasoning,
            progress=self.config.SUGGESTION_PROGRESS
        )

        MeetingLogger.log_suggestions(output, self.config.SLOT_START_HOUR, self.config.SLOT_END_HOUR)
        return output
