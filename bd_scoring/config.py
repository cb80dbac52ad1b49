"""Configuration management using Pydantic Settings."""
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Redis (optional result-cache backend)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Cache namespaces: max entries / default TTL (seconds)
    cache_default_max_size: int = 1000
    cache_default_ttl: int = 300  # 5 minutes
    cache_comparables_max_size: int = 500
    cache_comparables_ttl: int = 1800  # 30 minutes
    cache_company_data_max_size: int = 200
    cache_company_data_ttl: int = 600  # 10 minutes
    cache_reports_max_size: int = 100
    cache_reports_ttl: int = 3600  # 1 hour
    cache_scoring_max_size: int = 500
    cache_ttl_scoring: int = 1800  # 30 minutes
    cache_eviction_ratio: float = Field(default=0.8, gt=0, le=1)

    # Confidence model
    model_accuracy: float = Field(default=0.85, ge=0, le=1)

    # Weighting
    weight_sum_tolerance: float = Field(default=0.001, gt=0)

    # Instrumentation thresholds (seconds)
    threshold_scoring: float = 5.0
    threshold_report_generation: float = 10.0
    threshold_batch_processing: float = 30.0
    threshold_comparable_search: float = 2.0
    threshold_database_query: float = 1.0
    threshold_pillar: float = 5.0
    metrics_history_size: int = 1000
    alert_history_size: int = 20

    def cache_namespaces(self) -> dict[str, tuple[int, int]]:
        """Namespace → (max_size, default_ttl_seconds)."""
        return {
            "default": (self.cache_default_max_size, self.cache_default_ttl),
            "comparables": (self.cache_comparables_max_size, self.cache_comparables_ttl),
            "company_data": (self.cache_company_data_max_size, self.cache_company_data_ttl),
            "reports": (self.cache_reports_max_size, self.cache_reports_ttl),
            "scoring": (self.cache_scoring_max_size, self.cache_ttl_scoring),
        }

    def performance_thresholds(self) -> dict[str, float]:
        """Operation type → alert threshold in seconds."""
        return {
            "scoring": self.threshold_scoring,
            "report_generation": self.threshold_report_generation,
            "batch_processing": self.threshold_batch_processing,
            "comparable_search": self.threshold_comparable_search,
            "database_query": self.threshold_database_query,
            "pillar": self.threshold_pillar,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
