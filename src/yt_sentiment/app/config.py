"""
Configuration Management for YouTube Comment Sentiment Analysis
Standalone configuration system with environment variable overrides
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Any, Optional, Literal, List
from functools import lru_cache

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ============================================================================
# Core Configuration Classes
# ============================================================================


class APIConfig(BaseSettings):
    """API Server Configuration"""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8000, description="API port")
    prefix: str = Field(default="/api/v1", description="API prefix")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="CORS allowed origins (comma-separated)",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


class CacheConfig(BaseSettings):
    """Analysis result cache configuration"""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    analysis_ttl_seconds: int = Field(
        default=30 * 60, description="How long an analysis result stays fresh"
    )

    @field_validator("analysis_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Cache TTL must be positive")
        return v


class LoggingConfig(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file_path: Optional[str] = Field(
        default="./logs/yt_sentiment.log", description="Log file path"
    )


class YouTubeAPISettings(BaseSettings):
    """YouTube API specific settings"""

    model_config = SettingsConfigDict(env_prefix="YOUTUBE_")

    api_key: str = Field(default="", description="YouTube Data API v3 key")

    # Quota Management
    daily_quota_limit: int = Field(
        default=10000, description="YouTube API daily quota limit"
    )

    # Rate Limiting
    requests_per_second: float = Field(
        default=10.0, description="Maximum API requests per second"
    )
    burst_capacity: int = Field(
        default=20, description="Maximum burst request capacity"
    )
    inter_video_delay_seconds: float = Field(
        default=1.0,
        description="Pause between per-video comment fetches in channel analysis",
    )

    # Request Settings
    max_retries: int = Field(
        default=3, description="Maximum retry attempts for failed requests"
    )
    request_timeout: int = Field(default=30, description="Request timeout in seconds")

    # Comment Fetching
    max_comments_per_video: int = Field(
        default=20, description="Top-level comment threads fetched per video"
    )
    comment_order: Literal["time", "relevance"] = Field(
        default="relevance", description="Comment ordering"
    )
    max_channel_videos: int = Field(
        default=10, description="Most recent videos inspected per channel"
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate API key format"""
        if v and len(v) < 20:
            raise ValueError("YouTube API key appears to be invalid (too short)")
        return v

    @field_validator("daily_quota_limit")
    @classmethod
    def validate_quota(cls, v: int) -> int:
        """Validate quota limit"""
        if v < 100:
            raise ValueError("Daily quota limit must be at least 100")
        return v


class GeminiSettings(BaseSettings):
    """Gemini inference settings"""

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    api_key: str = Field(default="", description="Google AI Studio API key")
    model: str = Field(default="gemini-1.5-flash", description="Model name")
    temperature: float = Field(default=0.2, description="Sampling temperature")
    request_timeout: int = Field(
        default=120, description="Inference request timeout in seconds"
    )


class AnalysisSettings(BaseSettings):
    """Orchestration settings for the sentiment analysis flow"""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    max_attempts: int = Field(
        default=3, description="Inference attempts before degrading"
    )
    backoff_step_seconds: float = Field(
        default=2.0, description="Linear backoff step between inference attempts"
    )
    overload_markers: List[str] = Field(
        default=["503", "overloaded"],
        description="Error message fragments that mark an inference error as transient",
    )

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("At least one inference attempt is required")
        return v


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Main Application Configuration
    Aggregates all configuration modules with unified access
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize application configuration

        Args:
            config_path: Optional YAML config file path
        """
        self.config_path = config_path or "configs/app.yaml"
        self.yaml_config = self._load_yaml_config()

        self.api = APIConfig()
        self.cache = CacheConfig()
        self.logging = LoggingConfig()

        self.youtube_api = YouTubeAPISettings()
        self.gemini = GeminiSettings()
        self.analysis = AnalysisSettings()

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file"""
        config_file = Path(self.config_path)

        if not config_file.exists():
            logger.debug(f"Config file not found: {config_file}, using defaults")
            return {}

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config: {e}")
            return {}

    def to_dict(self) -> Dict[str, Any]:
        """Export full configuration as dictionary"""
        return {
            "api": self.api.model_dump(),
            "cache": self.cache.model_dump(),
            "logging": self.logging.model_dump(),
            "youtube_api": self.youtube_api.model_dump(exclude={"api_key"}),
            "gemini": self.gemini.model_dump(exclude={"api_key"}),
            "analysis": self.analysis.model_dump(),
        }

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary"""
        return {
            "app": self.yaml_config.get("app", {}),
            "api": {
                "host": self.api.host,
                "port": self.api.port,
                "prefix": self.api.prefix,
                "debug": self.api.debug,
            },
            "cache": {
                "analysis_ttl_seconds": self.cache.analysis_ttl_seconds,
            },
            "youtube_api": {
                "api_key_set": bool(self.youtube_api.api_key),
                "quota_limit": self.youtube_api.daily_quota_limit,
                "requests_per_second": self.youtube_api.requests_per_second,
                "max_comments_per_video": self.youtube_api.max_comments_per_video,
                "max_channel_videos": self.youtube_api.max_channel_videos,
            },
            "gemini": {
                "api_key_set": bool(self.gemini.api_key),
                "model": self.gemini.model,
            },
            "analysis": {
                "max_attempts": self.analysis.max_attempts,
                "backoff_step_seconds": self.analysis.backoff_step_seconds,
            },
        }


# ============================================================================
# Global Configuration Instance (Singleton)
# ============================================================================

_config: Optional[Config] = None
_config_lock = threading.Lock()


@lru_cache()
def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get or create global configuration instance (Thread-safe singleton)

    Args:
        config_path: Optional path to config file

    Returns:
        Config instance
    """
    global _config

    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config(config_path)
                logger.info("✅ Configuration initialized")

    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """
    Force reload configuration

    Args:
        config_path: Optional new config path

    Returns:
        New Config instance
    """
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = Config(config_path)
        logger.info("🔄 Configuration reloaded")

    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)"""
    global _config

    with _config_lock:
        get_config.cache_clear()
        _config = None
        logger.info("🗑️ Configuration reset")


# ============================================================================
# Configuration Validation
# ============================================================================


def validate_config(config: Optional[Config] = None) -> Dict[str, Any]:
    """
    Validate configuration

    Args:
        config: Config instance (uses global if None)

    Returns:
        Validation result with errors and warnings
    """
    if config is None:
        config = get_config()

    errors = []
    warnings = []

    # Check log path
    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        if not log_path.parent.exists():
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Cannot create log directory: {e}")

    if not config.youtube_api.api_key:
        warnings.append("YouTube API key not set - comment fetching will fail")

    if not config.gemini.api_key:
        warnings.append("Gemini API key not set - sentiment inference will fail")

    if config.youtube_api.inter_video_delay_seconds < 0:
        errors.append("Inter-video delay cannot be negative")

    if config.analysis.backoff_step_seconds < 0:
        errors.append("Backoff step cannot be negative")

    if not config.analysis.overload_markers:
        warnings.append("No overload markers configured - inference is never retried")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


# ============================================================================
# Logging
# ============================================================================

_installed_handlers: List[logging.Handler] = []


def setup_logging(config: Optional[Config] = None) -> None:
    """
    Setup logging based on configuration

    Handlers installed by an earlier call are replaced, so repeated app
    startups do not duplicate log lines.

    Args:
        config: Config instance (uses global if None)
    """
    import logging.handlers

    if config is None:
        config = get_config()

    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(config.logging.format))
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    # File handler (if specified)
    if config.logging.file_path:
        log_path = Path(config.logging.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    logger.info(f"📝 Logging configured: level={config.logging.level}")
