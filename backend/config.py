# FILE: backend/config.py
"""
Configuration management for Sanjeevani
Loads from environment variables with validation
"""
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    # Backend server
    backend_host: str = Field(default="0.0.0.0", alias="BACKEND_HOST")
    backend_port: int = Field(default=5000, alias="BACKEND_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Ephemeral store
    store_backend: str = Field(default="memory", alias="STORE_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    store_timeout_seconds: float = Field(default=2.0, alias="STORE_TIMEOUT_SECONDS")

    # Retention windows (seconds)
    post_ttl_seconds: int = Field(default=3600, alias="POST_TTL_SECONDS")
    chat_ttl_seconds: int = Field(default=3600, alias="CHAT_TTL_SECONDS")
    journal_ttl_seconds: int = Field(default=86400, alias="JOURNAL_TTL_SECONDS")
    mood_ttl_seconds: int = Field(default=2592000, alias="MOOD_TTL_SECONDS")

    # LLM mode
    llm_mode: str = Field(default="online", alias="LLM_MODE")

    # Offline providers
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")
    ollama_model: str = Field(default="llama3.2:3b", alias="OLLAMA_MODEL")

    # Online providers
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    moderation_model: str = Field(default="omni-moderation-latest", alias="MODERATION_MODEL")

    # Router
    router_policy: str = Field(default="online_first", alias="ROUTER_POLICY")
    router_fallback: bool = Field(default=True, alias="ROUTER_FALLBACK")
    generation_timeout_seconds: float = Field(default=15.0, alias="GENERATION_TIMEOUT_SECONDS")
    generation_max_tokens: int = Field(default=200, alias="GENERATION_MAX_TOKENS")
    generation_temperature: float = Field(default=0.7, alias="GENERATION_TEMPERATURE")

    # Safety
    moderation_enabled: bool = Field(default=True, alias="MODERATION_ENABLED")
    moderation_timeout_seconds: float = Field(default=5.0, alias="MODERATION_TIMEOUT_SECONDS")
    redaction_enabled: bool = Field(default=True, alias="REDACTION_ENABLED")
    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")
    safety_policy_path: Optional[str] = Field(default=None, alias="SAFETY_POLICY_PATH")

    # Sentiment
    google_cloud_api_key: Optional[str] = Field(default=None, alias="GOOGLE_CLOUD_API_KEY")
    sentiment_timeout_seconds: float = Field(default=5.0, alias="SENTIMENT_TIMEOUT_SECONDS")

    # Canned reply / exercise selection
    random_seed: Optional[int] = Field(default=None, alias="RANDOM_SEED")

    # Telemetry
    telemetry_enabled: bool = Field(default=True, alias="TELEMETRY_ENABLED")
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")

    # Security
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_rpm: int = Field(default=100, alias="RATE_LIMIT_RPM")
    body_size_limit_mb: int = Field(default=10, alias="BODY_SIZE_LIMIT_MB")

    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:3000"], alias="CORS_ORIGINS")

    # Validators
    @field_validator("llm_mode")
    @classmethod
    def validate_llm_mode(cls, v):
        if v not in ["offline", "online", "hybrid"]:
            raise ValueError("llm_mode must be 'offline', 'online', or 'hybrid'")
        return v

    @field_validator("router_policy")
    @classmethod
    def validate_router_policy(cls, v):
        if v not in ["offline_first", "online_first"]:
            raise ValueError("router_policy must be 'offline_first' or 'online_first'")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        if v not in ["memory", "redis"]:
            raise ValueError("store_backend must be 'memory' or 'redis'")
        return v

    @field_validator(
        "post_ttl_seconds", "chat_ttl_seconds", "journal_ttl_seconds", "mood_ttl_seconds"
    )
    @classmethod
    def validate_ttl(cls, v):
        if v <= 0:
            raise ValueError("TTL values must be positive")
        return v


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings (useful for testing)"""
    global _settings
    _settings = None
    return get_settings()
