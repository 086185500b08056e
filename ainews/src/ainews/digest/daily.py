import datetime
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..analysis.base import Analyzer, HeuristicAnalyzer
from ..export import html_export, json_export
from ..export.paths import ANALYZED_PREFIX, RAW_PREFIX, REPORT_PREFIX, artifact_path
from ..models.news import RawNewsItem, ScoredTopic
from ..models.report import ReportStatistics
from .html_report import render_report
from .stats import calculate_statistics, top_topics

logger = logging.getLogger(__name__)


def analyze_topics(
    items: Sequence[RawNewsItem],
    analyzer: Analyzer,
    *,
    fallback: Optional[Analyzer] = None,
) -> List[ScoredTopic]:
    """
    Score items one at a time, in input order.
    A failing item is scored heuristically instead of being dropped.
    """
    fallback = fallback or HeuristicAnalyzer()
    analyzed = []
    total = len(items)
    for idx, item in enumerate(items, start=1):
        logger.info(f"[{idx}/{total}] Analyzing: {item.title[:50]}")
        try:
            topic = analyzer.analyze(item)
        except Exception as e:
            logger.warning(f"[{idx}/{total}] {analyzer.name} failed ({e}); using heuristic score")
            topic = fallback.analyze(item)
        logger.info(f"[{idx}/{total}] Score: {topic.total_score}/100")
        analyzed.append(topic)
    return analyzed


def save_raw_news(records: List[Dict[str, Any]], reports_dir: Path, *, now: Optional[datetime.datetime] = None) -> Path:
    path = artifact_path(reports_dir, RAW_PREFIX, ".json", now=now)
    json_export.export_json(records, path)
    logger.info(f"Raw data saved to {path}")
    return path


def save_analyzed_topics(topics: Sequence[ScoredTopic], reports_dir: Path, *, now: Optional[datetime.datetime] = None) -> Path:
    path = artifact_path(reports_dir, ANALYZED_PREFIX, ".json", now=now)
    json_export.export_scored_topics(topics, path)
    logger.info(f"Analyzed data saved to {path}")
    return path


def generate_daily_report(
    topics: Sequence[ScoredTopic],
    reports_dir: Path,
    *,
    now: Optional[datetime.datetime] = None,
) -> Path:
    """
    Render the HTML report for a set of scored topics and write it to
    {reports_dir}/ai-news-report-{timestamp}.html.
    """
    now = now or datetime.datetime.now()
    html_text = render_report(topics, generated_at=now)
    path = artifact_path(reports_dir, REPORT_PREFIX, ".html", now=now)
    html_export.export_html(html_text, path)
    logger.info(f"Report written to {path}")
    return path


def log_statistics(topics: Sequence[ScoredTopic]) -> ReportStatistics:
    stats = calculate_statistics(topics)
    logger.info("Report statistics:")
    logger.info(f"  Total topics: {stats.total}")
    logger.info(f"  Excellent (>80): {stats.excellent}")
    logger.info(f"  Good (60-80): {stats.good}")
    logger.info(f"  Normal (<60): {stats.normal}")
    logger.info(f"  Average score: {stats.avg_score:.1f}")

    best = top_topics(topics)
    if best:
        logger.info(f"Top {len(best)} topics:")
        for idx, topic in enumerate(best, start=1):
            logger.info(f"  {idx}. [{topic.total_score}] {topic.title}")
    return stats
