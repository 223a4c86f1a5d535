"""Application configuration."""
import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class EngineConfig:
    """Mapping engine thresholds and limits."""

    bulk_map_limit: int = 5
    bulk_map_threshold: float = 0.6
    similar_field_threshold: float = 0.6
    direct_confidence_threshold: float = 0.6
    fragment_confidence_threshold: float = 0.5
    command_confidence: float = 0.85
    max_pending_instructions: int = 16

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load config from environment variables."""
        return cls(
            bulk_map_limit=_env_int("SCHEMAMAP_BULK_MAP_LIMIT", 5),
            bulk_map_threshold=_env_float("SCHEMAMAP_BULK_MAP_THRESHOLD", 0.6),
            similar_field_threshold=_env_float("SCHEMAMAP_SIMILAR_FIELD_THRESHOLD", 0.6),
            direct_confidence_threshold=_env_float("SCHEMAMAP_DIRECT_THRESHOLD", 0.6),
            fragment_confidence_threshold=_env_float("SCHEMAMAP_FRAGMENT_THRESHOLD", 0.5),
            command_confidence=_env_float("SCHEMAMAP_COMMAND_CONFIDENCE", 0.85),
            max_pending_instructions=_env_int("SCHEMAMAP_MAX_PENDING", 16),
        )


@dataclass
class AppConfig:
    """Application configuration."""

    output_dir: str = "./output"
    config_dir: str = "./config"
    log_level: str = "WARNING"
    engine: EngineConfig = None

    def __post_init__(self):
        """Initialize default values."""
        if self.engine is None:
            self.engine = EngineConfig.from_env()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            output_dir=os.getenv("SCHEMAMAP_OUTPUT_DIR", "./output"),
            config_dir=os.getenv("SCHEMAMAP_CONFIG_DIR", "./config"),
            log_level=os.getenv("SCHEMAMAP_LOG_LEVEL", "WARNING"),
            engine=EngineConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
