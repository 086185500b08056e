from pathlib import Path

from .atomic import write_text_atomic


def export_html(html_text: str, path: Path) -> Path:
    """Write a rendered report to disk."""
    return write_text_atomic(path, html_text)
