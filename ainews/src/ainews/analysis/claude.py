import logging
from typing import Any, ClassVar, Dict

import requests

from ..errors import AnalyzerError, ParseError, RequestTimeoutError
from .base import LLMAnalyzer

logger = logging.getLogger(__name__)

API_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"


def _extract_text(data: Dict[str, Any]) -> str:
    for block in data.get("content") or []:
        if isinstance(block, dict) and block.get("type") == "text":
            return str(block.get("text", ""))
    raise AnalyzerError("Claude response contained no text block")


class ClaudeAnalyzer(LLMAnalyzer):
    """Completion binding: Anthropic Messages API."""

    name: ClassVar[str] = "claude"

    def __init__(self, api_key: str, *, model: str = DEFAULT_MODEL, max_tokens: int = 2000,
                 temperature: float = 0.3, **kwargs) -> None:
        super().__init__(api_key, model=model, **kwargs)
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }

        logger.debug(f"POST {API_URL} model={self.model}")
        try:
            resp = requests.post(API_URL, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            raise RequestTimeoutError("Claude API request timeout")
        except requests.RequestException as e:
            raise AnalyzerError(f"Claude API request failed: {e}")

        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(f"Failed to parse Claude API response: {e}")

        if not isinstance(data, dict):
            raise AnalyzerError("Invalid Claude API response format")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise AnalyzerError(f"Claude API Error: {message}")
        if resp.status_code >= 400:
            raise AnalyzerError(f"Claude API returned HTTP {resp.status_code}")

        return _extract_text(data)
