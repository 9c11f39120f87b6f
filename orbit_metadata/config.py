# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - StorageConfig (dataclass)
#     backend: str             (default "local", or "supabase")
#     supabase_url: str | None (default None)
#     supabase_key: str | None (service-role key, falls back to anon key)
#     bucket_name: str         (default "images")
#     local_root: str          (default "storage/")
#     timeout_seconds: float   (default 30.0)
#
# - CodecConfig (dataclass)
#     processor_version: str   (default "1.0.0")
#     processor_location: str  (default "local_memory_stream")
#     creator_tool: str        (default "ORBIT Metadata MCP v2.1")
#     creator: str             (default "ORBIT AI Analysis System")
#     jpeg_quality: int        (default 95)
#     max_image_bytes: int     (default 50 MiB)
#
# - AppConfig (dataclass)
#     storage: StorageConfig
#     codec: CodecConfig
#     log_level: str           (default "INFO")
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Drop the singleton so the next get_config() re-reads the env.
#
# USAGE:
# ------
#   from orbit_metadata.config import get_config
#   config = get_config()
#   print(config.storage.backend)
#   print(config.codec.jpeg_quality)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class StorageConfig:
    """Image storage collaborator configuration."""
    backend: str = "local"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    bucket_name: str = "images"
    local_root: str = "storage/"
    timeout_seconds: float = 30.0


@dataclass
class CodecConfig:
    """Values stamped into every packet the codec writes."""
    processor_version: str = "1.0.0"
    processor_location: str = "local_memory_stream"
    creator_tool: str = "ORBIT Metadata MCP v2.1"
    creator: str = "ORBIT AI Analysis System"
    jpeg_quality: int = 95
    max_image_bytes: int = 50 * 1024 * 1024


@dataclass
class AppConfig:
    """Main application configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    log_level: str = "INFO"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    storage_config = StorageConfig(
        backend=os.getenv("STORAGE_BACKEND", "local").lower(),
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_key=(
            os.getenv("SUPABASE_SERVICE_ROLE_KEY")
            or os.getenv("SUPABASE_ANON_KEY")
            or None
        ),
        bucket_name=os.getenv("SUPABASE_BUCKET_NAME", "images"),
        local_root=os.getenv("LOCAL_STORAGE_ROOT", "storage/"),
        timeout_seconds=float(os.getenv("STORAGE_TIMEOUT_SECONDS", "30"))
    )

    codec_config = CodecConfig(
        jpeg_quality=int(os.getenv("JPEG_QUALITY", "95"))
    )

    _config_instance = AppConfig(
        storage=storage_config,
        codec=codec_config,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper()
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration (used by tests and the CLI)."""
    global _config_instance
    _config_instance = None
