"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

Services never read the environment themselves. They receive a Settings
instance (and their store handles) through their constructors.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB (one collection per logical table)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "placipy"
    assessments_table: str = "Assesment_placipy_assesments"
    questions_table: str = "Assessment_placipy_asseessment_questions"
    main_table: str = "Assesment_placipy"

    # Tenant used when the caller's identity has no email domain
    default_client_domain: str = "ksrce.ac.in"

    # Judge0 (RapidAPI-hosted by default)
    judge0_api_url: str = "https://judge0-ce.p.rapidapi.com"
    judge0_api_host: str = "judge0-ce.p.rapidapi.com"
    judge0_api_key: str = ""
    judge0_timeout_seconds: float = 30.0

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    debug: bool = True
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
