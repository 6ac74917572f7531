"""
LLM client for MeetingMaestro's time suggestions
"""
import json
import logging
import time
from typing import Dict, Any, Optional

from openai import OpenAI, OpenAIError

from config.settings import Config

logger = logging.getLogger(__name__)

class LLMClient:
    """Chat-completion client for any OpenAI-compatible endpoint"""

    def __init__(self, model_name: str = None, config: Config = None):
        self.config = config or Config()
        self.model_config = self.config.get_model_config(model_name)
        self.model_name = self.model_config["model"]

        self.client = OpenAI(
            api_key=self.model_config["api_key"] or "NULL",  # local servers ignore the key
            base_url=self.model_config["base_url"],
            timeout=self.config.LLM_TIMEOUT,
            max_retries=self.config.LLM_MAX_RETRIES
        )

        self.max_tokens = self.model_config["max_tokens"]
        self.temperature = self.model_config["temperature"]
        self.top_p = self.model_config["top_p"]

        logger.info(f"Initialized LLM client: {self.model_name} at {self.model_config['base_url']}")

    def _make_completion_request(self, prompt: str, temperature: float = None) -> Optional[str]:
        """Send one chat completion; returns the reply text or None on failure"""
        temperature = temperature if temperature is not None else self.temperature

        try:
            start_time = time.time()

            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=temperature,
                top_p=self.top_p,
                response_format={"type": "json_object"}
            )

            content = response.choices[0].message.content
            response_time = time.time() - start_time
            logger.info(f"{self.model_name} response: {response_time:.2f}s")

            return content.strip() if content else None

        except OpenAIError as e:
            logger.error(f"{self.model_name} completion request failed: {e}")
            return None

    def complete_json(self, prompt: str) -> Optional[Dict[str, Any]]:
        """Run ``prompt`` and return the JSON object in the reply, or None"""
        response = self._make_completion_request(prompt)

        if not response:
            return None

        parsed = self._extract_json_from_response(response)
        if parsed is None:
            logger.warning(f"No JSON object found in model reply: {response[:200]}")
        return parsed

    def _extract_json_from_response(self, response: str) -> Optional[Dict[str, Any]]:
        """Extract JSON from a model reply with multiple strategies"""
        strategies = [
            # Strategy 1: the whole reply is the object
            lambda r: self._parse_whole(r),
            # Strategy 2: look for a complete JSON object
            lambda r: self._extract_json_by_braces(r),
            # Strategy 3: look for JSON after a "JSON:" marker
            lambda r: self._extract_json_after_marker(r, "JSON:"),
        ]

        for strategy in strategies:
            try:
                result = strategy(response)
                if isinstance(result, dict):
                    return result
            except (json.JSONDecodeError, ValueError) as e:
                logger.debug(f"JSON extraction strategy failed: {e}")
                continue

        return None

    def _parse_whole(self, response: str) -> Optional[Dict[str, Any]]:
        text = response.strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.lower().startswith("json"):
                text = text[4:]
        return json.loads(text)

    def _extract_json_by_braces(self, response: str) -> Optional[Dict[str, Any]]:
        """Extract JSON by finding balanced braces"""
        start = response.find('{')
        if start == -1:
            return None

        brace_count = 0
        in_string = False
        escaped = False
        for i, char in enumerate(response[start:], start):
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == '{':
                brace_count += 1
            elif char == '}':
                brace_count -= 1
                if brace_count == 0:
                    json_str = response[start:i+1]
                    return json.loads(json_str)
        return None

    def _extract_json_after_marker(self, response: str, marker: str) -> Optional[Dict[str, Any]]:
        """Extract JSON after a specific marker"""
        marker_pos = response.find(marker)
        if marker_pos != -1:
            json_part = response[marker_pos + len(marker):].strip()
            return self._extract_json_by_braces(json_part)
        return None
