import datetime
from pathlib import Path
from typing import Optional

RAW_PREFIX = "raw-news-"
ANALYZED_PREFIX = "analyzed-news-"
REPORT_PREFIX = "ai-news-report-"

# Minute granularity; lexicographic order of the rendered string is chronological
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M"


def get_reports_dir(root: str = "reports") -> Path:
    """
    Get (and create) the reports directory.
    """
    path = Path(root)
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_timestamp(now: Optional[datetime.datetime] = None) -> str:
    return (now or datetime.datetime.now()).strftime(TIMESTAMP_FORMAT)


def artifact_path(
    reports_dir: Path,
    prefix: str,
    suffix: str,
    *,
    now: Optional[datetime.datetime] = None,
) -> Path:
    """Structure: {reports_dir}/{prefix}{YYYY-MM-DDTHH-MM}{suffix}"""
    return Path(reports_dir) / f"{prefix}{artifact_timestamp(now)}{suffix}"


def find_latest_artifact(
    reports_dir: Path,
    prefix: str = ANALYZED_PREFIX,
    suffix: str = ".json",
) -> Optional[Path]:
    """Return the most recent artifact matching prefix/suffix, or None."""
    directory = Path(reports_dir)
    if not directory.is_dir():
        return None

    names = sorted(
        p.name for p in directory.iterdir()
        if p.is_file() and p.name.startswith(prefix) and p.name.endswith(suffix)
    )
    if not names:
        return None
    return directory / names[-1]
