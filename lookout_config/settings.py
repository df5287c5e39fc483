"""
Application Settings (Pydantic Settings).

Loads configuration from environment variables (.env file or system env).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # ========================================================================
    # OBSERVATION HANDLERS
    # ========================================================================
    OBSERVATION_LOG_TAG_KEY: str = Field(
        default="userType",
        description="Low-cardinality tag the logging handler reports on start/stop",
    )
    METRICS_HANDLER_ENABLED: bool = Field(default=True)
    METRICS_TAG_KEYS: str = Field(
        default="userType,method,uri,status,outcome,exception",
        description="Comma-separated low-cardinality tag keys exported as metric labels",
    )
    TRACING_HANDLER_ENABLED: bool = Field(default=True)

    # ========================================================================
    # INBOUND REQUEST OBSERVATION
    # ========================================================================
    OBSERVED_URL_PATTERNS: str = Field(
        default="/user/*",
        description="Comma-separated fnmatch patterns of request paths to observe",
    )

    # ========================================================================
    # USER SERVICE
    # ========================================================================
    USER_SERVICE_MAX_LATENCY_MS: int = Field(
        default=200,
        description="Upper bound of the simulated lookup latency",
        ge=0,
        le=10000,
    )

    # ========================================================================
    # OPENTELEMETRY
    # ========================================================================
    OTEL_EXPORTER_OTLP_ENDPOINT: str = Field(default="http://localhost:4317")
    OTEL_SERVICE_NAME: str = Field(default="lookout")
    OTEL_TRACES_ENABLED: bool = Field(default=False)

    # ========================================================================
    # API SERVER
    # ========================================================================
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_CORS_ORIGINS: str = Field(default="http://localhost:5173")

    # ========================================================================
    # LOGGING
    # ========================================================================
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="json", pattern="^(json|text)$")

    # ========================================================================
    # DEPLOYMENT
    # ========================================================================
    ENVIRONMENT: str = Field(
        default="development", pattern="^(development|staging|production)$"
    )

    @property
    def observed_url_patterns(self) -> list[str]:
        return [p.strip() for p in self.OBSERVED_URL_PATTERNS.split(",") if p.strip()]

    @property
    def metrics_tag_keys(self) -> list[str]:
        return [k.strip() for k in self.METRICS_TAG_KEYS.split(",") if k.strip()]
