"""
Configuration settings for the Student Gateway service
"""
from typing import List, Optional
from enum import Enum

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Service configuration
    service_name: str = Field(default="student-gateway")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    # API configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3000)

    # Backend service
    backend_url: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("PYTHON_BACKEND_URL", "BACKEND_URL", "backend_url"),
    )
    backend_timeout_seconds: float = Field(default=30.0)

    # CORS
    enable_cors: bool = Field(default=True)
    allowed_origins: str = Field(default="http://localhost:3000")

    # Development/Testing
    enable_request_logging: bool = Field(default=True)
    enable_swagger_ui: bool = Field(default=True)

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("backend_timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("backend timeout must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING

    @property
    def cors_origins(self) -> List[str]:
        """Allowed CORS origins parsed from the comma-separated setting"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def validate_configuration(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if not self.backend_url:
            issues.append("Backend service URL is required")
        elif not self.backend_url.startswith(("http://", "https://")):
            issues.append("Backend service URL must start with http:// or https://")

        if self.is_production and "*" in self.cors_origins:
            issues.append("Wildcard CORS origin is not allowed in production")

        return issues

    def get_backend_config(self) -> dict:
        """Get backend client configuration"""
        return {
            "base_url": self.backend_url,
            "timeout_seconds": self.backend_timeout_seconds,
        }


_settings: Optional[Settings] = None

def get_settings() -> Settings:
    """Process-wide settings, loaded once from the environment"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
