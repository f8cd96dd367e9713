"""Core configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Optional, List


# Valid log levels
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Redis (redis_url should contain full connection string including port)
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "tickersync"
    
    # Alerting platform
    investing_base_url: str = "https://in.investing.com"
    
    # Order management platform
    kite_base_url: str = "https://api.kite.trade"
    kite_api_key: Optional[str] = None
    kite_access_token: Optional[str] = None
    
    # Logging
    log_level: str = "INFO"
    
    # Canonical ranking
    preferred_exchange: str = "NSE"
    
    # Audits
    stale_review_days: int = 90
    audit_batch_size: int = 50
    audit_page_size: int = 10
    risk_limit: float = 6400.0
    risk_tolerance: float = 0.01
    
    # Scheduler cadence
    audit_cadence_minutes: int = 30
    autosave_seconds: int = 60
    order_refresh_minutes: int = 15
    
    # Display
    display_timezone: str = "Asia/Kolkata"
    
    # API Configuration
    backend_port: int = 8000
    
    # CORS Configuration
    cors_origins: str = "http://localhost:3000"  # Comma-separated list of allowed origins
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return upper_v
    
    @field_validator('preferred_exchange')
    @classmethod
    def normalize_exchange(cls, v: str) -> str:
        """Exchange codes are compared upper-case."""
        return v.strip().upper()
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    @model_validator(mode='after')
    def validate_config(self) -> 'Settings':
        """Validate configuration after all fields are set."""
        if self.audit_batch_size < 1:
            raise ValueError("audit_batch_size must be at least 1")
        if self.risk_limit <= 0:
            raise ValueError("risk_limit must be positive")
        if not 0 <= self.risk_tolerance < 1:
            raise ValueError("risk_tolerance must be within [0, 1)")
        return self


# Global settings instance
settings = Settings()
