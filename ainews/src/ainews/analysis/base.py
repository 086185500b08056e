import logging
from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Sequence

from ..models.news import RawNewsItem, ScoredTopic
from . import heuristic
from .parsing import parse_analysis_response
from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


class Analyzer(ABC):
    """Turns one raw news item into one scored topic."""

    name: ClassVar[str] = "base"

    @abstractmethod
    def analyze(self, item: RawNewsItem) -> ScoredTopic:
        raise NotImplementedError


class HeuristicAnalyzer(Analyzer):
    name: ClassVar[str] = "heuristic"

    def __init__(self, organizations: Sequence[str] = heuristic.DEFAULT_ORGANIZATIONS) -> None:
        self.organizations = tuple(organizations)

    def analyze(self, item: RawNewsItem) -> ScoredTopic:
        return heuristic.score(item, self.organizations)


class LLMAnalyzer(Analyzer):
    """
    Analyzer backed by a text-generation service.

    Subclasses only implement `complete`; prompting, parsing and the
    per-item heuristic fallback are shared.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        timeout: float = 60.0,
        fallback: Optional[HeuristicAnalyzer] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.fallback = fallback or HeuristicAnalyzer()

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send the prompt pair and return the raw completion text."""
        raise NotImplementedError

    def analyze(self, item: RawNewsItem) -> ScoredTopic:
        try:
            response = self.complete(SYSTEM_PROMPT, build_user_prompt(item))
            return parse_analysis_response(response, item)
        except Exception as e:
            # One item's enrichment failure must not abort the run
            logger.warning(f"{self.name} analysis failed, using heuristic scoring: {e}")
            return self.fallback.analyze(item)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r}, timeout={self.timeout})"
