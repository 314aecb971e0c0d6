# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes settings for badge storage layout, remote collaborators, retries, and logging.

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "ANIMALDEX_"


class StorageSettings(BaseModel):
    """Settings describing where the badge collection lives and how blobs are named."""

    root: Path = Field(default=Path("storage/badges"), description="Directory dedicated to the badge collection.")
    metadata_filename: str = Field(default="metadata.json", description="Name of the JSON metadata index inside root.")
    image_prefix: str = Field(default="badge_", description="Filename prefix for badge image blobs.")
    image_suffix: str = Field(default=".png", description="Filename suffix for badge image blobs.")
    original_prefix: str = Field(default="original_", description="Filename prefix for original photo blobs.")
    original_suffix: str = Field(default=".jpg", description="Filename suffix for original photo blobs.")
    integrity_file_name: str = Field(default="test.txt", description="Throwaway file used by the integrity check.")

    @property
    def metadata_path(self) -> Path:
        return self.root / self.metadata_filename


class RemoteSettings(BaseModel):
    """Settings for the identification and badge generation HTTP services."""

    identify_url: Optional[str] = Field(default=None, description="Endpoint accepting a multipart photo upload.")
    generate_url: Optional[str] = Field(default=None, description="Endpoint returning badge image data for ?name=.")
    request_timeout: float = Field(default=30.0, description="Timeout in seconds for badge generation requests.")
    upload_timeout: float = Field(default=60.0, description="Timeout in seconds for photo uploads.")
    connection_check_timeout: float = Field(default=5.0, description="Timeout in seconds for connectivity checks.")
    identify_max_tries: int = Field(default=3, ge=1, description="Attempts made for identification before failing.")
    identify_retry_delay: float = Field(default=2.0, ge=0, description="Base delay; attempt n waits n * delay.")
    generate_max_tries: int = Field(default=3, ge=1, description="Attempts made for badge generation before failing.")
    generate_retry_delay: float = Field(default=1.0, ge=0, description="Base delay; attempt n waits n * delay.")


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    stats_window_days: int = Field(default=30, ge=1, description="Trailing window for discoveries-per-day stats.")
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "AppSettings":
        """Instantiate settings from ANIMALDEX_* environment variables, loading a .env file first."""

        load_dotenv(dotenv_path=env_file)

        storage: Dict[str, object] = {}
        remote: Dict[str, object] = {}
        top: Dict[str, object] = {}

        mapping = {
            "STORAGE_ROOT": (storage, "root"),
            "METADATA_FILENAME": (storage, "metadata_filename"),
            "IDENTIFY_URL": (remote, "identify_url"),
            "GENERATE_URL": (remote, "generate_url"),
            "REQUEST_TIMEOUT": (remote, "request_timeout"),
            "UPLOAD_TIMEOUT": (remote, "upload_timeout"),
            "LOG_LEVEL": (top, "log_level"),
            "STATS_WINDOW_DAYS": (top, "stats_window_days"),
        }
        for suffix, (target, key) in mapping.items():
            value = os.getenv(ENV_PREFIX + suffix)
            if value is not None and value.strip() != "":
                target[key] = value.strip()

        # pydantic coerces the raw strings into the declared field types.
        return cls.model_validate({"storage": storage, "remote": remote, **top})


__all__ = ["AppSettings", "RemoteSettings", "StorageSettings", "ENV_PREFIX"]
