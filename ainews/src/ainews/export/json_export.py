import json
from pathlib import Path
from typing import Any, List, Sequence

from pydantic import ValidationError

from ..errors import ParseError
from ..models.news import ScoredTopic
from .atomic import write_text_atomic


def export_json(data: Any, path: Path) -> Path:
    """
    Export data to JSON file.
    """
    text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    return write_text_atomic(path, text)


def export_scored_topics(topics: Sequence[ScoredTopic], path: Path) -> Path:
    """Write analyzed topics using their camelCase wire names."""
    return export_json([t.model_dump(mode="json", by_alias=True) for t in topics], path)


def load_scored_topics(path: Path) -> List[ScoredTopic]:
    """Read an analyzed-news-*.json file back into ScoredTopic objects."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ParseError(f"Cannot read analyzed data {path}: {e}")

    if not isinstance(data, list):
        raise ParseError(f"Analyzed data {path} must be a JSON array")

    try:
        return [ScoredTopic.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise ParseError(f"Analyzed data {path} is malformed: {e}")
