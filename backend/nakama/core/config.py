"""
NAKAMA - Core Configuration
ユーザー探索エンジン全体の設定を管理
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "NAKAMA"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Discovery
    suggestion_limit: int = Field(
        default=20,
        ge=0,
        description="タグ候補の最大表示件数",
    )
    # 模試参加設定が無効なユーザーには模試・志望校・科目の絞り込みを適用しない
    exam_participation: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """設定のシングルトンインスタンスを取得"""
    return Settings()


settings = get_settings()
