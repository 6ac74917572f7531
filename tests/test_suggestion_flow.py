"""Tests for the suggestion flow, its schemas and the LLM clients."""

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from config.settings import Config
from src.ai_agent.llm_client import LLMClient
from src.ai_agent.mock_llm_client import MockLLMClient
from src.ai_agent.schemas import SuggestMeetingTimesOutput
from src.ai_agent.suggestion_flow import (
    SuggestionFlow,
    SuggestionFlowError,
    SuggestionInputError,
    create_llm_client,
)

PROGRESS = "Implemented AI flow to suggest optimal meeting times based on attendee availability."


def request_data(**overrides):
    data = {
        "title": "Design review",
        "description": "Walk through the new slot picker",
        "meetingDuration": 45,
        "earliestStart": "2024-06-03T09:00:00",
        "requiredBy": "2024-06-07T17:00:00",
        "attendees": [
            {"email": "a@x.com", "availability": "Monday: 9am-5pm, Tuesday: 10am-6pm"},
            {"email": "b@y.com", "availability": "Mornings only"},
        ],
    }
    data.update(overrides)
    return data


VALID_REPLY = {
    "suggestedTimes": [
        {
            "startTime": "2024-06-03T10:00:00Z",
            "endTime": "2024-06-03T10:45:00Z",
            "attendeesAvailable": ["a@x.com", "b@y.com"],
        }
    ],
    "reasoning": "Monday morning suits both attendees",
}


class MockConfig(Config):
    LLM_PROVIDER = "mock"


class TestSuggest:

    def test_valid_reply_passes_through_with_fixed_progress(self):
        reply = dict(VALID_REPLY, progress="model says it is done")
        flow = SuggestionFlow(MockLLMClient(response=reply))

        output = flow.suggest(request_data())

        assert isinstance(output, SuggestMeetingTimesOutput)
        assert output.progress == PROGRESS
        assert output.reasoning == "Monday morning suits both attendees"
        assert output.suggestedTimes[0].attendeesAvailable == ["a@x.com", "b@y.com"]
        assert output.model_dump()["suggestedTimes"][0]["startTime"] == "2024-06-03T10:00:00Z"

    def test_prompt_lists_every_attendee_raw_availability(self):
        llm = MockLLMClient(response=VALID_REPLY)
        flow = SuggestionFlow(llm)

        flow.suggest(request_data(attendees=[
            {"email": "a@x.com", "availability": "Monday: 9am-5pm"},
            {"email": "c@z.com", "availability": ""},
        ]))

        prompt = llm.prompts[0]
        assert "- Email: a@x.com, Availability: Monday: 9am-5pm" in prompt
        assert "- Email: c@z.com, Availability: \n" in prompt
        assert "Meeting duration: 45 minutes" in prompt
        assert "Earliest start time: 2024-06-03T09:00:00" in prompt
        assert "Required by time: 2024-06-07T17:00:00" in prompt
        assert '"suggestedTimes"' in prompt

    def test_empty_availability_still_yields_validated_output(self):
        flow = SuggestionFlow(MockLLMClient())

        output = flow.suggest(request_data(attendees=[{"email": "solo@x.com", "availability": ""}]))

        assert output.progress == PROGRESS
        assert output.suggestedTimes[0].startTime == "2024-06-03T09:00:00"
        assert output.suggestedTimes[0].endTime == "2024-06-03T09:45:00"
        assert output.suggestedTimes[0].attendeesAvailable == ["solo@x.com"]

    def test_failed_completion_raises(self):
        flow = SuggestionFlow(MockLLMClient(fail=True))

        with pytest.raises(SuggestionFlowError):
            flow.suggest(request_data())

    @pytest.mark.parametrize("reply", [
        {"suggestedTimes": []},
        {"reasoning": "no times key"},
        {"suggestedTimes": "tomorrow", "reasoning": "x"},
        {"suggestedTimes": [{"startTime": "next tuesday", "endTime": "2024-06-03T10:00:00",
                             "attendeesAvailable": []}], "reasoning": "x"},
        {"suggestedTimes": [{"startTime": "2024-06-03T09:00:00", "endTime": "2024-06-03T10:00:00",
                             "attendeesAvailable": ["not-an-email"]}], "reasoning": "x"},
        {"suggestedTimes": [{"startTime": "2024-06-03T09:00:00", "endTime": "2024-06-03T10:00:00"}],
         "reasoning": "x"},
    ])
    def test_non_conforming_reply_raises(self, reply):
        flow = SuggestionFlow(MockLLMClient(response=reply))

        with pytest.raises(SuggestionFlowError) as exc_info:
            flow.suggest(request_data())

        assert not isinstance(exc_info.value, SuggestionInputError)

    def test_invalid_request_never_reaches_the_model(self):
        llm = MockLLMClient(response=VALID_REPLY)
        flow = SuggestionFlow(llm)

        with pytest.raises(SuggestionInputError) as exc_info:
            flow.suggest(request_data(attendees=[{"email": "nope", "availability": ""}]))

        assert exc_info.value.errors
        assert llm.prompts == []

    def test_flow_is_stateless_across_calls(self):
        llm = MockLLMClient()
        flow = SuggestionFlow(llm)

        first = flow.suggest(request_data())
        second = flow.suggest(request_data(earliestStart="2024-06-05T14:00:00"))

        assert first.suggestedTimes[0].startTime == "2024-06-03T09:00:00"
        assert second.suggestedTimes[0].startTime == "2024-06-05T14:00:00"


class TestCreateLLMClient:

    def test_mock_provider(self):
        assert isinstance(create_llm_client(MockConfig()), MockLLMClient)

    def test_openai_provider(self):
        assert isinstance(create_llm_client(Config()), LLMClient)


class TestLLMClient:

    @pytest.fixture
    def llm(self):
        return LLMClient("test-model")

    def _reply(self, content):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    def test_complete_json(self, llm, monkeypatch):
        calls = []

        def fake_create(**kwargs):
            calls.append(kwargs)
            return self._reply(json.dumps(VALID_REPLY))

        monkeypatch.setattr(llm.client.chat.completions, "create", fake_create)

        assert llm.complete_json("prompt") == VALID_REPLY
        assert calls[0]["model"] == "test-model"
        assert calls[0]["messages"] == [{"role": "user", "content": "prompt"}]

    def test_request_failure_returns_none(self, llm, monkeypatch):
        def failing_create(**kwargs):
            raise openai.APIConnectionError(request=httpx.Request("POST", "http://localhost/v1/chat/completions"))

        monkeypatch.setattr(llm.client.chat.completions, "create", failing_create)

        assert llm.complete_json("prompt") is None

    def test_reply_without_json_returns_none(self, llm, monkeypatch):
        monkeypatch.setattr(llm.client.chat.completions, "create",
                            lambda **kwargs: self._reply("I cannot help with that."))

        assert llm.complete_json("prompt") is None

    @pytest.mark.parametrize("reply", [
        '{"a": 1}',
        '```json\n{"a": 1}\n```',
        'Here you go: {"a": 1} hope that helps',
        'JSON: {"a": 1}',
    ])
    def test_json_extraction(self, llm, reply):
        assert llm._extract_json_from_response(reply) == {"a": 1}

    def test_braces_inside_strings(self, llm):
        reply = 'Sure! {"reasoning": "use {curly} braces", "n": 2} done'

        assert llm._extract_json_from_response(reply) == {"reasoning": "use {curly} braces", "n": 2}
