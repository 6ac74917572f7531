"""
Mock LLM Client for running without a model endpoint
"""
import logging
import re
from datetime import timedelta
from typing import Dict, Any, List, Optional

from utils.date_utils import parse_iso_datetime

logger = logging.getLogger(__name__)

class MockLLMClient:
    """
    Offline stand-in for LLMClient.

    With a canned ``response`` it returns that payload for every prompt;
    with ``fail=True`` it behaves like a failed completion request. Otherwise
    it proposes one window at the earliest start for every listed attendee.
    """

    def __init__(self, model_name: str = None, response: Optional[Dict[str, Any]] = None,
                 fail: bool = False):
        self.model_name = model_name or "mock-llm"
        self.response = response
        self.fail = fail
        self.prompts: List[str] = []
        logger.info(f"Initialized Mock LLM client: {self.model_name}")

    def complete_json(self, prompt: str) -> Optional[Dict[str, Any]]:
        logger.info(f"🤖 MOCK: Completing prompt ({len(prompt)} characters)")
        self.prompts.append(prompt)

        if self.fail:
            return None
        if self.response is not None:
            return self.response

        return self._suggest_from_prompt(prompt)

    def _suggest_from_prompt(self, prompt: str) -> Dict[str, Any]:
        emails = re.findall(r'^- Email: ([^,\s]+),', prompt, re.MULTILINE)

        duration = 60
        match = re.search(r'Meeting duration: (\d+) minutes', prompt)
        if match:
            duration = int(match.group(1))

        match = re.search(r'Earliest start time: (.+)$', prompt, re.MULTILINE)
        try:
            start = parse_iso_datetime(match.group(1)) if match else None
        except ValueError:
            start = None

        if start is None:
            return {
                "suggestedTimes": [],
                "reasoning": "MOCK: earliest start time could not be read, no times suggested"
            }

        end = start + timedelta(minutes=duration)
        return {
            "suggestedTimes": [{
                "startTime": start.isoformat(),
                "endTime": end.isoformat(),
                "attendeesAvailable": emails
            }],
            "reasoning": "MOCK: earliest start time, assuming every attendee is free"
        }
