"""
Keyword heuristics for scoring AI news items.

Interestingness starts at 50 and usefulness at 10 (an ordinary news item);
marker terms found in the title/description add fixed bonuses, and each
component is clamped to its maximum (80 / 20).
"""
import datetime
import re
from typing import Iterable, List, Optional, Sequence

from ..models.news import RawNewsItem, ScoredTopic, SourceLink

BASE_INTERESTINGNESS = 50
BASE_USEFULNESS = 10
MAX_INTERESTINGNESS = 80
MAX_USEFULNESS = 20

TIER_EXCELLENT = "excellent"
TIER_GOOD = "good"
TIER_NORMAL = "normal"

# Terms are matched against lower-cased text. Latin terms must stand as whole
# words ("ai" does not match "said"); CJK terms match as substrings.
_BREAKTHROUGH_TERMS = ("突破", "首发", "首次", "breakthrough", "first-ever", "first time")
_CORE_AI_TERMS = ("模型", "ai", "人工智能", "model", "artificial intelligence")
_SUBSTANCE_TERMS = ("研究", "论文", "发布", "research", "paper", "release")
_APPLICABILITY_TERMS = ("应用", "工具", "功能", "application", "tool", "feature")
_OPENNESS_TERMS = ("开源", "免费", "开放", "open source", "free", "open")

DEFAULT_ORGANIZATIONS = (
    "openai", "谷歌", "google", "苹果", "apple", "英伟达", "nvidia",
    "智谱", "anthropic", "微软", "microsoft", "deepmind", "meta",
)

BREAKTHROUGH_BONUS = 20
CORE_AI_BONUS = 10
ORGANIZATION_BONUS = 15
SUBSTANCE_BONUS = 5
APPLICABILITY_BONUS = 5
OPENNESS_BONUS = 3

IMPORTANT_THRESHOLD = 70
VIEW_ORIGINAL = "查看原文"


def _term_in(term: str, text: str) -> bool:
    if term.isascii():
        # \b treats CJK as word characters, so bound on ASCII alphanumerics only
        pattern = rf"(?<![a-z0-9]){re.escape(term)}(?![a-z0-9])"
        return re.search(pattern, text) is not None
    return term in text


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    return any(_term_in(term, text) for term in terms)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def classify_tier(total_score: int) -> str:
    """Map a total score onto excellent (>80), good (60-80) or normal (<60)."""
    if total_score > 80:
        return TIER_EXCELLENT
    if total_score >= 60:
        return TIER_GOOD
    return TIER_NORMAL


def score_components(
    title: str,
    description: str,
    organizations: Sequence[str] = DEFAULT_ORGANIZATIONS,
) -> tuple:
    """Return clamped (interestingness, usefulness) for a title/description pair."""
    title = (title or "").lower()
    desc = (description or "").lower()
    orgs = [o.lower() for o in organizations if o]

    interestingness = BASE_INTERESTINGNESS
    usefulness = BASE_USEFULNESS

    if _contains_any(title, _BREAKTHROUGH_TERMS):
        interestingness += BREAKTHROUGH_BONUS
    if _contains_any(title, _CORE_AI_TERMS):
        interestingness += CORE_AI_BONUS
    if _contains_any(title, orgs):
        interestingness += ORGANIZATION_BONUS
    if _contains_any(desc, _SUBSTANCE_TERMS):
        interestingness += SUBSTANCE_BONUS

    if _contains_any(desc, _APPLICABILITY_TERMS):
        usefulness += APPLICABILITY_BONUS
    if _contains_any(title, _OPENNESS_TERMS) or _contains_any(desc, _OPENNESS_TERMS):
        usefulness += OPENNESS_BONUS

    return (
        _clamp(interestingness, 0, MAX_INTERESTINGNESS),
        _clamp(usefulness, 0, MAX_USEFULNESS),
    )


def placeholder_timeline(item: RawNewsItem, *, today: Optional[datetime.date] = None) -> List[str]:
    day = item.published or (today or datetime.date.today()).isoformat()
    return [
        f"{day}: 新闻发布",
        f"来源: {item.source}",
        f"原文链接: {item.url}",
    ]


def summary_sentence(source: str, total_score: int) -> str:
    verdict = "这是重要资讯，值得深入关注。" if total_score > IMPORTANT_THRESHOLD else "这是常规行业动态。"
    return f"基于 {source} 的报道。此话题反映了当前AI行业的发展动向。{verdict}"


def default_sources(item: RawNewsItem) -> List[SourceLink]:
    return [SourceLink(title=VIEW_ORIGINAL, url=item.url)]


def score(
    item: RawNewsItem,
    organizations: Sequence[str] = DEFAULT_ORGANIZATIONS,
    *,
    today: Optional[datetime.date] = None,
) -> ScoredTopic:
    """Score a news item using keyword heuristics only."""
    interestingness, usefulness = score_components(item.title, item.description, organizations)
    total = interestingness + usefulness

    return ScoredTopic.from_raw(
        item,
        interestingness=interestingness,
        usefulness=usefulness,
        timeline=placeholder_timeline(item, today=today),
        product_details=item.description,
        analysis=summary_sentence(item.source, total),
        sources=default_sources(item),
    )
