import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .analysis.heuristic import DEFAULT_ORGANIZATIONS
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "api-config.json"
DEFAULT_ENDPOINT = "https://apis.tianapi.com/ai/index"

# Template placeholders that count as "no key configured"
_PLACEHOLDER_KEYS = {"", "your_key_here", "your-api-key"}

LLM_KEY_ENV = {
    "claude": "ANTHROPIC_API_KEY",
    "zhipu": "ZHIPU_API_KEY",
}


def load_env_file(path: str = ".env"):
    """
    Load environment variables from a .env file into os.environ.
    Does not override existing strings.
    """
    p = Path(path)
    if not p.exists():
        return

    try:
        with open(p, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' in line:
                    key, val = line.split('=', 1)
                    key = key.strip()
                    val = val.strip().strip('"').strip("'")
                    if key not in os.environ:
                        os.environ[key] = val
    except OSError as e:
        logger.warning(f"Failed to load .env: {e}")


class AppConfig(BaseModel):
    """
    Run configuration. Field aliases follow the api-config.json layout.
    """
    api_endpoint: str = Field(DEFAULT_ENDPOINT, alias="apiEndpoint")
    api_key: str = Field("", alias="apiKey", repr=False)
    api_name: str = Field("TianAPI", alias="apiName")
    max_topics: int = Field(20, alias="maxTopics", ge=1)
    api_timeout: int = Field(30000, alias="apiTimeout", ge=1)  # ms

    analyzer: Literal["heuristic", "claude", "zhipu"] = "heuristic"
    llm_timeout: int = Field(60000, alias="llmTimeout", ge=1)  # ms
    llm_model: Optional[str] = Field(None, alias="llmModel")
    organizations: List[str] = Field(default_factory=lambda: list(DEFAULT_ORGANIZATIONS))

    class Config:
        populate_by_name = True
        extra = "ignore"

    @property
    def api_timeout_seconds(self) -> float:
        return self.api_timeout / 1000.0

    @property
    def llm_timeout_seconds(self) -> float:
        return self.llm_timeout / 1000.0

    def redacted(self) -> Dict[str, Any]:
        """Loggable view with the credential masked."""
        data = self.model_dump(by_alias=True)
        key = data.get("apiKey") or ""
        data["apiKey"] = f"{key[:4]}***" if len(key) > 8 else "***"
        return data


def _read_config_file(p: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid config file {p}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {p} must contain an object.")
    return data


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the run configuration.

    Values come from the config file (api-config.json unless `path` is given),
    then TIANAPI_ENDPOINT / TIANAPI_KEY / MAX_TOPICS / AINEWS_ANALYZER from the
    environment override them. A missing API key is fatal.
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}

    if path is not None:
        p = Path(path)
        if not p.exists():
            raise ConfigError(f"Config file not found: {path}")
        data = _read_config_file(p)
        logger.info(f"Using config file: {p}")
    else:
        p = Path(DEFAULT_CONFIG_PATH)
        if p.exists():
            data = _read_config_file(p)
            logger.info(f"Using config file: {p}")

    if env.get("TIANAPI_ENDPOINT"):
        data["apiEndpoint"] = env["TIANAPI_ENDPOINT"]
    if env.get("TIANAPI_KEY"):
        data["apiKey"] = env["TIANAPI_KEY"]
        logger.info("Using API key from environment")
    if env.get("MAX_TOPICS"):
        try:
            data["maxTopics"] = int(env["MAX_TOPICS"])
        except ValueError:
            raise ConfigError(f"MAX_TOPICS must be an integer, got {env['MAX_TOPICS']!r}")
    if env.get("AINEWS_ANALYZER"):
        data["analyzer"] = env["AINEWS_ANALYZER"].strip().lower()

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    if config.api_key.strip() in _PLACEHOLDER_KEYS:
        raise ConfigError(
            "News API key is missing. "
            "Set TIANAPI_KEY or add apiKey to the config file."
        )

    return config


def get_llm_api_key(analyzer: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Get the API key for an LLM-backed analyzer or raise ConfigError if missing."""
    env = os.environ if env is None else env
    var = LLM_KEY_ENV.get(analyzer)
    if var is None:
        raise ConfigError(f"Analyzer '{analyzer}' does not use an API key.")
    key = (env.get(var) or "").strip()
    # Handle the template default left by user
    if key in _PLACEHOLDER_KEYS:
        raise ConfigError(f"{var} environment variable is required for analyzer '{analyzer}'.")
    return key
