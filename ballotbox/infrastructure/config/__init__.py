"""
Configuration module for ballotbox.

設定管理の一元化モジュール。settings.pyが唯一のエントリーポイント。
"""

from ballotbox.infrastructure.config.async_database import AsyncDatabase
from ballotbox.infrastructure.config.settings import (
    ENV_FILE_PATH,
    Settings,
    find_env_file,
    get_settings,
    reload_settings,
)


__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    "find_env_file",
    "ENV_FILE_PATH",
    # Async database
    "AsyncDatabase",
]
