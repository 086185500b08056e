import logging
from typing import ClassVar

import requests

from ..errors import AnalyzerError, ParseError, RequestTimeoutError
from .base import LLMAnalyzer

logger = logging.getLogger(__name__)

API_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
DEFAULT_MODEL = "glm-4-flash"


class ZhipuAnalyzer(LLMAnalyzer):
    """Chat-completion binding: Zhipu GLM."""

    name: ClassVar[str] = "zhipu"

    def __init__(self, api_key: str, *, model: str = DEFAULT_MODEL, temperature: float = 0.3,
                 max_tokens: int = 2000, top_p: float = 0.7, **kwargs) -> None:
        super().__init__(api_key, model=model, **kwargs)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }

        logger.debug(f"POST {API_URL} model={self.model}")
        try:
            resp = requests.post(API_URL, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            raise RequestTimeoutError("GLM API request timeout")
        except requests.RequestException as e:
            raise AnalyzerError(f"GLM API request failed: {e}")

        try:
            result = resp.json()
        except ValueError as e:
            raise ParseError(f"Failed to parse GLM API response: {e}")

        if not isinstance(result, dict):
            raise AnalyzerError("Invalid GLM API response format")
        if result.get("error"):
            error = result["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise AnalyzerError(f"GLM API Error: {message}")
        if resp.status_code >= 400:
            raise AnalyzerError(f"GLM API returned HTTP {resp.status_code}")

        try:
            return str(result["choices"][0]["message"]["content"])
        except (KeyError, IndexError, TypeError):
            raise AnalyzerError("Invalid GLM API response format")
