import json
import re
from typing import Any, Dict, List, Optional

from ..errors import ParseError
from ..models.news import RawNewsItem, ScoredTopic, SourceLink
from .heuristic import (
    BASE_INTERESTINGNESS,
    BASE_USEFULNESS,
    MAX_INTERESTINGNESS,
    MAX_USEFULNESS,
    VIEW_ORIGINAL,
    default_sources,
)

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    text = _FENCE_OPEN_RE.sub("", text)
    return _FENCE_CLOSE_RE.sub("", text)


def _first_object_span(text: str) -> Optional[str]:
    """Return the first balanced {...} span, ignoring braces inside JSON strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            ch = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:pos + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply (plain, fenced or wrapped in prose)."""
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty analysis response")

    cleaned = _strip_code_fence(text)
    span = _first_object_span(cleaned)
    if span is None:
        raise ParseError("No JSON object found in analysis response", {"response": text[:200]})

    try:
        data = json.loads(span)
    except ValueError as e:
        raise ParseError(f"Failed to parse analysis response: {e}", {"response": text[:200]})

    if not isinstance(data, dict):
        raise ParseError("Analysis response is not a JSON object")
    return data


def _as_score(data: Dict[str, Any], key: str, default: int, high: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ParseError(f"Field '{key}' must be a number, got {value!r}")
    if not isinstance(value, (int, float, str)):
        raise ParseError(f"Field '{key}' must be a number, got {type(value).__name__}")
    try:
        number = int(float(value.strip()) if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise ParseError(f"Field '{key}' must be a number, got {value!r}")
    return max(0, min(high, number))


def _as_text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ParseError(f"Field '{key}' must be text")
    return str(value)


def _as_timeline(data: Dict[str, Any]) -> List[str]:
    value = data.get("timeline")
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError("Field 'timeline' must be a list")
    return [str(entry) for entry in value if entry is not None]


def _as_sources(data: Dict[str, Any], item: RawNewsItem) -> List[SourceLink]:
    value = data.get("sources")
    if value is None:
        return default_sources(item)
    if not isinstance(value, list):
        raise ParseError("Field 'sources' must be a list")

    links = []
    for entry in value:
        if not isinstance(entry, dict):
            raise ParseError("Each source must be an object with title/url")
        url = entry.get("url")
        if not url:
            continue
        links.append(SourceLink(title=str(entry.get("title") or VIEW_ORIGINAL), url=str(url)))
    return links or default_sources(item)


def parse_analysis_response(text: str, item: RawNewsItem) -> ScoredTopic:
    """
    Turn a model reply into a ScoredTopic.

    Missing fields fall back to neutral defaults (50 / 10, empty timeline,
    the raw description, the original link). Scores are clamped and the
    total is always recomputed from the two components.
    """
    data = extract_json_object(text)

    interestingness = _as_score(data, "interestingness", BASE_INTERESTINGNESS, MAX_INTERESTINGNESS)
    usefulness = _as_score(data, "usefulness", BASE_USEFULNESS, MAX_USEFULNESS)

    return ScoredTopic.from_raw(
        item,
        interestingness=interestingness,
        usefulness=usefulness,
        timeline=_as_timeline(data),
        product_details=_as_text(data, "productDetails") or item.description,
        analysis=_as_text(data, "analysis") or "",
        sources=_as_sources(data, item),
    )
