"""Backend and core settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from mathsvg.constants import DEFAULT_BITMAP_HEIGHT, DEFAULT_BITMAP_WIDTH

TYPESET_SCRIPT = Path(__file__).resolve().parent / "js" / "typeset.js"


class Settings(BaseSettings):
    node_command: str = "node"
    typeset_script: Path = TYPESET_SCRIPT
    backend_timeout_seconds: Optional[float] = None
    backend_line_limit: int = 16 * 1024 * 1024

    bitmap_default_width: int = DEFAULT_BITMAP_WIDTH
    bitmap_default_height: int = DEFAULT_BITMAP_HEIGHT

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="MATHSVG_", env_file=".env", extra="ignore")


settings = Settings()
