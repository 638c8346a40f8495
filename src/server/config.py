"""Application settings for the equation-to-SVG API."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "mathsvg-server"
    api_prefix: str = ""
    environment: str = "local"
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 3000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
