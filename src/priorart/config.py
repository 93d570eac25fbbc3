"""
Prior-Art Ranker - Configuration
================================
Environment-driven settings grouped by concern.

All values can be overridden through environment variables or a local `.env` file.

License: MIT
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# Paths
# =============================================================================

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.environ.get("DATA_DIR", PROJECT_ROOT / "data"))
RESULTS_DIR = DATA_DIR / "results"
MONITORING_DIR = DATA_DIR / "monitoring"
OUTPUT_DIR = DATA_DIR / "outputs"


# =============================================================================
# Config Sections
# =============================================================================

@dataclass
class OpenAIConfig:
    """OpenAI embedding and chat settings."""
    api_key: str = field(default_factory=lambda: os.environ.get("OPENAI_API_KEY", ""))
    embedding_model: str = field(
        default_factory=lambda: os.environ.get("EMBEDDING_MODEL", "text-embedding-3-small")
    )
    analysis_model: str = field(
        default_factory=lambda: os.environ.get("ANALYSIS_MODEL", "gpt-4o-mini")
    )
    embedding_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("EMBEDDING_MAX_CHARS", "8000"))
    )


@dataclass
class RankingConfig:
    """Blended ranking weights and caps."""
    semantic_weight: float = field(
        default_factory=lambda: float(os.environ.get("SEMANTIC_WEIGHT", "0.6"))
    )
    keyword_weight: float = field(
        default_factory=lambda: float(os.environ.get("KEYWORD_WEIGHT", "0.4"))
    )
    # Max candidates sent to the embedding API per search
    embedding_candidate_limit: int = field(
        default_factory=lambda: int(os.environ.get("EMBEDDING_CANDIDATE_LIMIT", "20"))
    )
    result_limit: int = field(default_factory=lambda: int(os.environ.get("RESULT_LIMIT", "15")))
    query_keyword_limit: int = field(
        default_factory=lambda: int(os.environ.get("QUERY_KEYWORD_LIMIT", "10"))
    )
    embedding_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("EMBEDDING_CONCURRENCY", "5"))
    )
    analysis_threshold: float = field(
        default_factory=lambda: float(os.environ.get("ANALYSIS_THRESHOLD", "0.3"))
    )
    enable_overlap_analysis: bool = field(
        default_factory=lambda: _env_bool("ENABLE_OVERLAP_ANALYSIS", True)
    )


@dataclass
class SourceConfig:
    """External patent database settings."""
    patentsview_url: str = field(
        default_factory=lambda: os.environ.get(
            "PATENTSVIEW_API_URL", "https://search.patentsview.org/api/v1/patent/"
        )
    )
    patentsview_api_key: str = field(
        default_factory=lambda: os.environ.get("PATENTSVIEW_API_KEY", "")
    )
    lens_url: str = field(
        default_factory=lambda: os.environ.get("LENS_API_URL", "https://api.lens.org/patent/search")
    )
    lens_api_key: str = field(default_factory=lambda: os.environ.get("LENS_API_KEY", ""))
    timeout: float = field(default_factory=lambda: float(os.environ.get("SOURCE_TIMEOUT", "15")))
    result_limit: int = field(
        default_factory=lambda: int(os.environ.get("SOURCE_RESULT_LIMIT", "10"))
    )
    # 1 = single attempt, no retry
    max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("EXTERNAL_MAX_ATTEMPTS", "1"))
    )


@dataclass
class MonitoringConfig:
    """Prior-art monitoring thresholds."""
    alert_threshold: float = field(
        default_factory=lambda: float(os.environ.get("ALERT_THRESHOLD", "0.7"))
    )
    critical_threshold: float = field(
        default_factory=lambda: float(os.environ.get("CRITICAL_THRESHOLD", "0.85"))
    )
    interval_days: int = field(
        default_factory=lambda: int(os.environ.get("MONITORING_INTERVAL_DAYS", "7"))
    )


@dataclass
class StorageConfig:
    results_dir: Path = RESULTS_DIR
    monitoring_dir: Path = MONITORING_DIR
    output_dir: Path = OUTPUT_DIR


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Top-level configuration."""
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    sources: SourceConfig = field(default_factory=SourceConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


config = Config()
