"""Pydantic Settings for the bootstrap node service.

All environment variables use the TOXBOOT_ prefix.
Example: TOXBOOT_PORT=8002, TOXBOOT_REGISTRY_LAYOUT=wiki_markup
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

BUNDLED_LAYOUTS_PATH = str(Path(__file__).with_name("registry_layouts.yaml"))


class ToxBootSettings(BaseSettings):
    """Service configuration validated from environment variables."""

    # Service
    port: int = 8002
    log_level: str = "INFO"
    log_json: bool = True

    # Registry
    registry_layout: str = "html_status"
    registry_layouts_path: str = BUNDLED_LAYOUTS_PATH
    registry_url: str | None = None  # Overrides the layout's URL
    registry_timeout_seconds: float = Field(default=10.0, gt=0)

    # Probing
    probe_timeout_seconds: float = Field(default=2.0, ge=0)
    max_probe_timeout_seconds: float = Field(default=30.0, gt=0)
    probe_grace_seconds: float = Field(default=0.5, ge=0)

    # Selection
    random_seed: int | None = None

    model_config = {"env_prefix": "TOXBOOT_"}
