from typing import Mapping, Optional

from ..config import AppConfig, get_llm_api_key
from ..errors import ConfigError
from .base import Analyzer, HeuristicAnalyzer
from .claude import ClaudeAnalyzer
from .zhipu import ZhipuAnalyzer

_LLM_ANALYZERS = {
    "claude": ClaudeAnalyzer,
    "zhipu": ZhipuAnalyzer,
}


def build_analyzer(config: AppConfig, env: Optional[Mapping[str, str]] = None) -> Analyzer:
    """Pick the analyzer strategy named by config.analyzer."""
    heuristic = HeuristicAnalyzer(config.organizations)
    if config.analyzer == "heuristic":
        return heuristic

    cls = _LLM_ANALYZERS.get(config.analyzer)
    if cls is None:
        raise ConfigError(f"Unsupported analyzer: {config.analyzer}")

    api_key = get_llm_api_key(config.analyzer, env)
    kwargs = {"timeout": config.llm_timeout_seconds, "fallback": heuristic}
    if config.llm_model:
        kwargs["model"] = config.llm_model
    return cls(api_key, **kwargs)
