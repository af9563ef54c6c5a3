"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_planner.domain.models import DEFAULT_DAILY_CALORIE_TARGET

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    llm_api_key: str
    llm_base_url: str = "https://api.deepseek.com/v1"
    llm_model: str = "deepseek-chat"
    llm_temperature: float = 0.7
    llm_retry_attempts: int = 1
    llm_timeout_seconds: float = 60.0
    active_plan_limit: int = 256
    default_latitude: float = 1.355049655134308
    default_longitude: float = 103.68518139204353
    search_radius_km: float = 2.0
    default_daily_calorie_target: int = DEFAULT_DAILY_CALORIE_TARGET
    menu_cache_ttl_seconds: int = 600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
