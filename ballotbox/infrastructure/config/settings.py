"""Application settings.

設定は環境変数（接頭辞 ``BALLOTBOX_``）と ``.env`` ファイルから読み込む。
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_FILE_NAME = ".env"


def find_env_file(start: Path | None = None) -> Path | None:
    """カレントディレクトリから親方向に .env ファイルを探す.

    Args:
        start: 探索を開始するディレクトリ（省略時はカレントディレクトリ）

    Returns:
        見つかった .env のパス、見つからない場合はNone
    """
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        env_file = candidate_dir / ENV_FILE_NAME
        if env_file.is_file():
            return env_file
    return None


ENV_FILE_PATH = find_env_file()
if ENV_FILE_PATH is not None:
    load_dotenv(ENV_FILE_PATH, override=False)


class Settings(BaseSettings):
    """ballotbox settings."""

    model_config = SettingsConfigDict(
        env_prefix="BALLOTBOX_",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///ballotbox.db",
        description="SQLAlchemy database URL",
    )
    admin_ids: str = Field(
        default="",
        description="Comma separated admin caller ids",
    )
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def admin_id_list(self) -> list[str]:
        """カンマ区切りの管理者IDをリストで返す."""
        return [item.strip() for item in self.admin_ids.split(",") if item.strip()]

    def get_database_url(self) -> str:
        """非同期ドライバ用のデータベースURLを返す."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql+psycopg2://"):
            return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """設定のシングルトンを返す."""
    return Settings()


def reload_settings() -> Settings:
    """キャッシュを破棄して設定を読み直す."""
    get_settings.cache_clear()
    return get_settings()
