import sys
import json
import click
import logging
import datetime
from pathlib import Path
from typing import Optional

from .errors import InvalidUsageError, format_error
from .logging import configure_logging
from .config import AppConfig, load_config, load_env_file
from .analysis.base import HeuristicAnalyzer
from .analysis.factory import build_analyzer
from .providers import tianapi
from .digest import daily as daily_report
from .export.json_export import load_scored_topics
from .export.paths import find_latest_artifact, get_reports_dir

logger = logging.getLogger(__name__)

VERSION = "0.1.0"
ANALYZER_CHOICES = ["heuristic", "claude", "zhipu"]


def _config_options(func):
    func = click.option("--max-topics", type=click.IntRange(min=1), default=None,
                        help="Override maxTopics from config")(func)
    func = click.option("--config", "config_path", default=None,
                        help="Config file (JSON or YAML, default: api-config.json)")(func)
    return func


def _build_config(config_path: Optional[str], max_topics: Optional[int] = None,
                  analyzer: Optional[str] = None) -> AppConfig:
    load_env_file()
    config = load_config(config_path)
    overrides = {}
    if max_topics is not None:
        overrides["max_topics"] = max_topics
    if analyzer is not None:
        overrides["analyzer"] = analyzer
    if overrides:
        config = config.model_copy(update=overrides)
    logger.debug(f"Configuration: {config.redacted()}")
    return config


def _fetch_and_analyze(config: AppConfig, reports_dir: Path, *, now: datetime.datetime):
    # Resolve the analyzer first so a missing LLM key fails before any request
    analyzer = build_analyzer(config)
    logger.info(f"Analyzer: {analyzer.name}")

    logger.info("Phase 1: fetching news")
    records = tianapi.fetch_raw_news(config)
    items = tianapi.parse_news_list(records)
    logger.info(f"Fetched {len(items)} topics")
    raw_path = daily_report.save_raw_news(records, reports_dir, now=now)

    logger.info(f"Phase 2: analyzing topics ({analyzer.name})")
    topics = daily_report.analyze_topics(
        items, analyzer, fallback=HeuristicAnalyzer(config.organizations)
    )
    analyzed_path = daily_report.save_analyzed_topics(topics, reports_dir, now=now)
    return topics, raw_path, analyzed_path


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """ainews: AI industry news analyzer."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)


@cli.command()
@_config_options
@click.option("--analyzer", type=click.Choice(ANALYZER_CHOICES), default=None, help="Scoring strategy")
@click.option("--out", default="./reports", show_default=True, help="Reports directory")
@click.option("--use-latest", is_flag=True, help="Render the most recent analyzed file if one exists")
@click.option("--open", "open_report", is_flag=True, help="Open the report when done")
def run(config_path, max_topics, analyzer, out, use_latest, open_report):
    """
    Fetch, analyze and render today's AI news report.
    """
    reports_dir = get_reports_dir(out)
    now = datetime.datetime.now()
    topics = None
    raw_path = None
    analyzed_path = None

    if use_latest:
        latest = find_latest_artifact(reports_dir)
        if latest:
            logger.info(f"Found analyzed data: {latest.name}")
            topics = load_scored_topics(latest)
            analyzed_path = latest
            logger.info(f"Loaded {len(topics)} analyzed topics")
        else:
            logger.info("No analyzed data found; running a fresh analysis")

    if topics is None:
        config = _build_config(config_path, max_topics, analyzer)
        topics, raw_path, analyzed_path = _fetch_and_analyze(config, reports_dir, now=now)

    logger.info("Phase 3: rendering HTML report")
    report_path = daily_report.generate_daily_report(topics, reports_dir, now=now)
    stats = daily_report.log_statistics(topics)

    if open_report:
        logger.info("Opening report")
        if click.launch(str(report_path)) != 0:
            logger.info(f"Open the report manually: {report_path}")

    _print_json({
        "report_file": str(report_path),
        "analyzed_file": str(analyzed_path) if analyzed_path else None,
        "raw_file": str(raw_path) if raw_path else None,
        "stats": stats.model_dump(by_alias=True),
    })


@cli.command()
@_config_options
@click.option("--out", default="./reports", show_default=True, help="Reports directory")
def fetch(config_path, max_topics, out):
    """Fetch news and save the raw response only."""
    config = _build_config(config_path, max_topics)
    records = tianapi.fetch_raw_news(config)
    items = tianapi.parse_news_list(records)
    raw_path = daily_report.save_raw_news(records, get_reports_dir(out))

    for idx, item in enumerate(items, start=1):
        logger.info(f"{idx}. {item.title}")
        logger.info(f"   {item.published} | {item.source}")

    _print_json({
        "raw_file": str(raw_path),
        "count": len(items),
        "topics": [
            {
                "title": item.title,
                "source": item.source,
                "date": item.published,
                "url": item.url,
                "description": item.description[:100],
            }
            for item in items
        ],
    })


@cli.command()
@_config_options
@click.option("--analyzer", type=click.Choice(ANALYZER_CHOICES), default=None, help="Scoring strategy")
@click.option("--out", default="./reports", show_default=True, help="Reports directory")
def analyze(config_path, max_topics, analyzer, out):
    """Fetch and score news; save raw and analyzed data without rendering."""
    config = _build_config(config_path, max_topics, analyzer)
    reports_dir = get_reports_dir(out)
    topics, raw_path, analyzed_path = _fetch_and_analyze(
        config, reports_dir, now=datetime.datetime.now()
    )
    stats = daily_report.log_statistics(topics)

    _print_json({
        "raw_file": str(raw_path),
        "analyzed_file": str(analyzed_path),
        "stats": stats.model_dump(by_alias=True),
    })


@cli.command()
@click.option("--input", "input_path", default=None, help="Analyzed data file (default: most recent)")
@click.option("--out", default="./reports", show_default=True, help="Reports directory")
@click.option("--open", "open_report", is_flag=True, help="Open the report when done")
def render(input_path, out, open_report):
    """Render an analyzed data file to HTML."""
    reports_dir = get_reports_dir(out)
    if input_path:
        source = Path(input_path)
        if not source.exists():
            raise click.BadParameter(f"input file not found: {input_path}")
    else:
        source = find_latest_artifact(reports_dir)
        if source is None:
            raise click.BadParameter(f"no analyzed-news-*.json found in {reports_dir}; run `ainews analyze` first.")

    topics = load_scored_topics(source)
    logger.info(f"Loaded {len(topics)} analyzed topics from {source}")
    report_path = daily_report.generate_daily_report(topics, reports_dir)
    stats = daily_report.log_statistics(topics)

    if open_report:
        click.launch(str(report_path))

    _print_json({
        "report_file": str(report_path),
        "analyzed_file": str(source),
        "stats": stats.model_dump(by_alias=True),
    })


@cli.command()
def version():
    """Print version information."""
    _print_json({"version": VERSION})


def _print_json(data):
    """Helper to print standard JSON envelope."""
    payload = {
        "ok": True,
        "data": data,
        "meta": {
            "version": 1,
        }
    }
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def main():
    """Entry point for the CLI."""
    try:
        cli(standalone_mode=False)
    except Exception as e:
        if isinstance(e, click.exceptions.Exit):
            sys.exit(e.exit_code)
        if isinstance(e, click.exceptions.Abort):
            sys.exit(130)

        # Usage errors keep the JSON error envelope
        if isinstance(e, click.exceptions.UsageError):
            print(format_error(InvalidUsageError(e.format_message())))
            sys.exit(e.exit_code)

        logger.error(f"{e.__class__.__name__}: {e}")
        print(format_error(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
