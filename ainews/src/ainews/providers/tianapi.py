import logging
from typing import Any, Dict, List
from urllib.parse import quote_plus

import requests
from pydantic import ValidationError

from ..config import AppConfig
from ..errors import ParseError, RequestTimeoutError, UpstreamError
from ..models.news import RawNewsItem

logger = logging.getLogger(__name__)

SUCCESS_CODE = 200


def _redact_key(text: str, api_key: str) -> str:
    """Mask the key in text that may echo the request URL (requests errors do)."""
    if not api_key:
        return text
    for form in {api_key, quote_plus(api_key)}:
        text = text.replace(form, "***")
    return text


def fetch_raw_news(config: AppConfig) -> List[Dict[str, Any]]:
    """
    Fetch the latest AI news list from TianAPI.
    Reference: https://www.tianapi.com/apiview/223

    Envelope: {"code": 200, "msg": "success", "result": {"newslist": [...]}}
    Exactly one request is made; the caller decides what to do on failure.
    """
    params = {
        "key": config.api_key,
        "num": config.max_topics,
    }

    logger.info(f"Fetching AI news from {config.api_name}")
    logger.info(f"  API: {config.api_endpoint}")
    logger.info(f"  Max topics: {config.max_topics}")

    try:
        resp = requests.get(config.api_endpoint, params=params, timeout=config.api_timeout_seconds)
        resp.raise_for_status()
    except requests.Timeout:
        logger.error(f"{config.api_name} request timed out after {config.api_timeout} ms")
        raise RequestTimeoutError(
            f"{config.api_name} request timeout",
            {"timeout_ms": config.api_timeout},
        )
    except requests.RequestException as e:
        # The key travels in the query string, so error text can carry it
        reason = _redact_key(str(e), config.api_key)
        logger.error(f"{config.api_name} request failed: {reason}")
        raise UpstreamError(f"{config.api_name} fetch failed: {reason}")

    try:
        data = resp.json()
    except ValueError as e:
        raise ParseError(f"{config.api_name} returned invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ParseError(f"{config.api_name} returned an unexpected payload type: {type(data).__name__}")

    code = data.get("code")
    if code != SUCCESS_CODE:
        msg = data.get("msg") or "unknown error"
        raise UpstreamError(f"API Error: {msg}", {"code": code})

    result = data.get("result")
    newslist = result.get("newslist") if isinstance(result, dict) else None
    if not isinstance(newslist, list):
        raise ParseError(f"{config.api_name} response is missing result.newslist")

    return newslist


def parse_news_list(records: List[Any]) -> List[RawNewsItem]:
    """Validate raw records into RawNewsItem objects, preserving order."""
    items = []
    for idx, record in enumerate(records):
        if not isinstance(record, dict):
            raise ParseError(f"News record #{idx + 1} is not an object")
        try:
            items.append(RawNewsItem.model_validate(record))
        except ValidationError as e:
            raise ParseError(f"News record #{idx + 1} is malformed: {e}")
    return items


def fetch_news(config: AppConfig) -> List[RawNewsItem]:
    return parse_news_list(fetch_raw_news(config))
