from typing import Dict, List, Sequence

from ..analysis.heuristic import TIER_EXCELLENT, TIER_GOOD, TIER_NORMAL, classify_tier
from ..models.news import ScoredTopic
from ..models.report import ReportStatistics


def sort_topics(topics: Sequence[ScoredTopic]) -> List[ScoredTopic]:
    """Highest total score first; ties keep their input order."""
    return sorted(topics, key=lambda t: t.total_score, reverse=True)


def group_by_tier(topics: Sequence[ScoredTopic]) -> Dict[str, List[ScoredTopic]]:
    groups: Dict[str, List[ScoredTopic]] = {TIER_EXCELLENT: [], TIER_GOOD: [], TIER_NORMAL: []}
    for topic in topics:
        groups[classify_tier(topic.total_score)].append(topic)
    return groups


def calculate_statistics(topics: Sequence[ScoredTopic]) -> ReportStatistics:
    groups = group_by_tier(topics)
    total = len(topics)
    avg = sum(t.total_score for t in topics) / total if total else 0.0
    return ReportStatistics(
        total=total,
        excellent=len(groups[TIER_EXCELLENT]),
        good=len(groups[TIER_GOOD]),
        normal=len(groups[TIER_NORMAL]),
        avg_score=avg,
    )


def top_topics(topics: Sequence[ScoredTopic], limit: int = 5) -> List[ScoredTopic]:
    return sort_topics(topics)[:limit]
