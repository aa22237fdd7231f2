"""Runtime settings loaded from the YAML config file with environment overrides.

Precedence, lowest to highest: built-in defaults from constants.py, the
config file (config/research.yaml or RESEARCH_CONFIG_PATH), then
environment variables.

Usage:
    from company_research.settings import get_research_settings

    settings = get_research_settings()
    limit = settings.concurrency_limit
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from company_research import constants
from company_research.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "research.yaml"


@dataclass(frozen=True)
class ResearchSettings:
    """Immutable research pipeline configuration, built once per process."""

    base_url: str = constants.DEFAULT_BASE_URL
    model: str = constants.DEFAULT_MODEL
    referer: str = constants.DEFAULT_REFERER
    app_title: str = constants.DEFAULT_APP_TITLE
    timeout: float = constants.DEFAULT_TIMEOUT
    research_temperature: float = constants.INITIAL_TEMPERATURE
    research_max_tokens: int = constants.INITIAL_MAX_TOKENS
    followup_temperature: float = constants.FOLLOWUP_TEMPERATURE
    followup_max_tokens: int = constants.FOLLOWUP_MAX_TOKENS
    concurrency_limit: int = constants.DEFAULT_CONCURRENCY_LIMIT
    field_guidance: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))


def _get_config_path() -> Optional[str]:
    """Get config file path from environment."""
    return os.environ.get("RESEARCH_CONFIG_PATH")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in research config {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read research config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Research config {path} must be a mapping at the top level")
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")
    return value


def _coerce(name: str, value: Any, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Setting '{name}' must be {kind.__name__}, got {value!r}") from e


def build_settings(data: Dict[str, Any], env: Mapping[str, str]) -> ResearchSettings:
    """
    Build settings from a parsed config mapping and an environment mapping.

    Args:
        data: Parsed YAML content (may be empty)
        env: Environment variables (os.environ in production)

    Returns:
        Validated ResearchSettings

    Raises:
        ConfigurationError: On wrongly typed or out-of-range values
    """
    provider = _section(data, "provider")
    research = _section(data, "research")
    followup = _section(data, "followup")
    batch = _section(data, "batch")

    guidance = data.get("field_guidance") or {}
    if not isinstance(guidance, dict):
        raise ConfigurationError("Config section 'field_guidance' must be a mapping")

    settings = ResearchSettings(
        base_url=str(env.get("OPENROUTER_BASE_URL") or provider.get("base_url", constants.DEFAULT_BASE_URL)),
        model=str(env.get("RESEARCH_MODEL") or provider.get("model", constants.DEFAULT_MODEL)),
        referer=str(provider.get("referer", constants.DEFAULT_REFERER)),
        app_title=str(provider.get("app_title", constants.DEFAULT_APP_TITLE)),
        timeout=_coerce(
            "timeout", env.get("RESEARCH_TIMEOUT") or provider.get("timeout", constants.DEFAULT_TIMEOUT), float
        ),
        research_temperature=_coerce(
            "research.temperature", research.get("temperature", constants.INITIAL_TEMPERATURE), float
        ),
        research_max_tokens=_coerce(
            "research.max_tokens", research.get("max_tokens", constants.INITIAL_MAX_TOKENS), int
        ),
        followup_temperature=_coerce(
            "followup.temperature", followup.get("temperature", constants.FOLLOWUP_TEMPERATURE), float
        ),
        followup_max_tokens=_coerce(
            "followup.max_tokens", followup.get("max_tokens", constants.FOLLOWUP_MAX_TOKENS), int
        ),
        concurrency_limit=_coerce(
            "batch.concurrency_limit",
            env.get("RESEARCH_CONCURRENCY")
            or batch.get("concurrency_limit", constants.DEFAULT_CONCURRENCY_LIMIT),
            int,
        ),
        field_guidance=MappingProxyType({str(k): str(v) for k, v in guidance.items()}),
    )

    if settings.concurrency_limit < 1:
        raise ConfigurationError(
            f"Concurrency limit must be at least 1, got {settings.concurrency_limit}"
        )
    if settings.timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {settings.timeout}")

    return settings


@lru_cache(maxsize=1)
def get_research_settings(config_path: Optional[str] = None) -> ResearchSettings:
    """
    Get research settings from the config file with environment overrides.

    Results are cached for the lifetime of the process.

    Args:
        config_path: Optional config file path (uses env var, then the
            bundled config/research.yaml, if not provided)

    Returns:
        ResearchSettings
    """
    explicit = config_path or _get_config_path()
    path = Path(explicit) if explicit else _DEFAULT_CONFIG_PATH

    if path.exists():
        data = _read_yaml(path)
        logger.debug("Loaded research settings from %s", path)
    elif explicit:
        raise ConfigurationError(f"Research config not found: {path}")
    else:
        data = {}

    return build_settings(data, os.environ)


def clear_settings_cache() -> None:
    """Clear cached settings (useful for testing or config reload)."""
    get_research_settings.cache_clear()
