"""
Configuration settings for the converse client
"""
from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MAX_STEPS = 5
CALLBACK_TIMEOUT_SECONDS = 10.0


class ConverseSettings(BaseSettings):
    """Remote service and orchestration configuration"""
    url: str = Field(default="https://api.wit.ai", description="Base URL of the NLU service")
    access_token: Optional[str] = Field(default=None, description="Bearer token for the service")
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=0)
    callback_timeout: float = Field(default=CALLBACK_TIMEOUT_SECONDS, gt=0)
    request_timeout: float = Field(default=30.0, gt=0)
    verify_ssl: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    model_config = SettingsConfigDict(
        env_prefix="WIT_",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> ConverseSettings:
    """Get cached settings instance"""
    return ConverseSettings()
