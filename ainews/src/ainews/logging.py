import logging
import sys

# urllib3 logs each request line at DEBUG, and the news API key is a query parameter
QUIET_LOGGERS = ("urllib3",)


def configure_logging(level=logging.INFO):
    """
    Configure logging to stderr.

    Third-party HTTP loggers stay at WARNING even with --verbose so request
    URLs (and the credential inside them) never reach the log.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    if root_logger.handlers:
        root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
