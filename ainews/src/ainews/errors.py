import json
import traceback


class AINewsError(Exception):
    """Base exception for ainews"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(AINewsError):
    """Missing or invalid configuration / credentials"""
    pass


class UpstreamError(AINewsError):
    """News source returned a non-success status or failed in transport"""
    pass


class RequestTimeoutError(AINewsError):
    """An outbound request exceeded its timeout"""
    pass


class ParseError(AINewsError):
    """Malformed JSON or an unexpected payload shape"""
    pass


class AnalyzerError(AINewsError):
    """Language-model backend failure (recovered by heuristic fallback)"""
    pass


class InvalidUsageError(AINewsError):
    """Bad command-line arguments"""
    pass


def format_error(e: Exception) -> str:
    """Format exception as the JSON error envelope."""

    if isinstance(e, AINewsError):
        error_type = e.__class__.__name__
        message = e.message
        details = e.details
    else:
        error_type = "UnknownError"
        message = str(e)
        details = {
            "traceback": traceback.format_exc().splitlines()
        }

    payload = {
        "ok": False,
        "error": {
            "type": error_type,
            "message": message,
            "details": details
        },
        "meta": {
            "version": 1
        }
    }

    return json.dumps(payload, indent=2, ensure_ascii=False)
