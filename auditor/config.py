"""
Configuration loaded from config.json
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

from auditor.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "SEO-Analyzer-Bot/1.0 (+https://seo-analyzer.com/bot)"


@dataclass
class ExtractorConfig:
    """Headless browser settings for the page extractor"""

    timeout_ms: int = 30000
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 768
    wait_for_selector: str = "body"
    settle_delay: float = 1.0  # Seconds to let client-side rendering finish
    headless: bool = True
    accept_language: str = "en,*;q=0.8"
    collect_web_vitals: bool = True


@dataclass
class AnalysisConfig:
    """Prompt orchestration settings"""

    max_content_chars: int = 8000
    prompt_concurrency: int = 1  # 1 = prompts run one at a time
    default_categories: list[str] = field(
        default_factory=lambda: ["technical", "content", "competitive"]
    )
    prompts_file: str | None = None


@dataclass
class StorageConfig:
    path: str = "data/analyses.json"
    max_jobs: int = 1000


@dataclass
class LoggingConfig:
    log_file: str | None = "logs/auditor.log"
    level: str = "INFO"


@dataclass
class AppConfig:
    """Top-level config container"""

    llm: list[dict] = field(default_factory=list)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: str | None = None


def load_config(config_path: str | Path = "config.json") -> AppConfig:
    """Load config.json; a missing file yields the defaults"""
    config_file = Path(config_path)
    if not config_file.exists():
        logger.info(f"Config file {config_file} not found, using defaults")
        return AppConfig()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {config_file} is not valid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a JSON object")

    llm_configs = data.get("llm") or []
    if isinstance(llm_configs, dict):
        llm_configs = [llm_configs]

    return AppConfig(
        llm=llm_configs,
        extractor=_section(ExtractorConfig, data, "extractor"),
        analysis=_section(AnalysisConfig, data, "analysis"),
        storage=_section(StorageConfig, data, "storage"),
        logging=_section(LoggingConfig, data, "logging"),
        source=str(config_file),
    )


def _section(cls, data: dict, name: str):
    """Build one config dataclass, ignoring unknown keys"""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be an object")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning(f"Ignoring unknown keys in '{name}' config: {', '.join(unknown)}")

    try:
        return cls(**{k: v for k, v in section.items() if k in known})
    except TypeError as e:
        raise ConfigError(f"Invalid '{name}' config: {e}") from e
