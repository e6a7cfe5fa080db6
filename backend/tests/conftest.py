"""
NAKAMA バックエンド - 共通テストフィクスチャ

設計方針:
- ディレクトリはメモリ上の InMemoryUserDirectory を使い、外部サービスに依存しない
- 設定は Settings を直接生成して渡し、環境変数や .env の影響を受けない
- 各テストは独立して実行可能
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from nakama.core.config import Settings
from nakama.schemas.user import Tag, UserRecord
from nakama.services.auth import StaticSessionProvider
from nakama.services.directory import InMemoryUserDirectory
from nakama.services.discovery.orchestrator import QueryOrchestrator


# =============================================================================
# ユーザー生成ヘルパー
# =============================================================================

DEFAULT_COMMUNICATION: Dict[str, Any] = {
    "approachability": 3,
    "initiative": 3,
    "response_speed": 3,
    "group_preference": "small",
    "text_vs_voice": "text",
    "deep_vs_casual": 3,
    "online_activity": 3,
}


def make_user(
    user_id: str,
    nickname: Optional[str] = None,
    *,
    tags: Optional[List[str]] = None,
    communication: Optional[Dict[str, Any]] = None,
    **fields: Any,
) -> UserRecord:
    """
    テスト用 UserRecord を生成する

    tags はタグ名のリスト（カテゴリは「趣味」固定）。
    communication は DEFAULT_COMMUNICATION への上書き分だけ渡せばよい。
    """
    data: Dict[str, Any] = {
        "id": user_id,
        "nickname": nickname or f"user{user_id}",
        "school_name": "N高等学校",
        "prefecture": "東京都",
        "grade": "1",
        "age": "16",
        "career_path": "大学進学",
        "detailed_tags": [{"category": "趣味", "name": name} for name in (tags or [])],
        "communication_type": {**DEFAULT_COMMUNICATION, **(communication or {})},
    }
    data.update(fields)
    return UserRecord.model_validate(data)


def tag(name: str, category: str = "趣味") -> Tag:
    return Tag(category=category, name=name)


# =============================================================================
# サンプル母集団（元アプリのダミーユーザーに近い構成）
# =============================================================================

def sample_users() -> List[UserRecord]:
    return [
        make_user(
            "1",
            "あおい",
            tags=["ONE PIECE", "鬼滅の刃", "Apex Legends", "YOASOBI", "バスケ"],
            communication={"approachability": 4, "deep_vs_casual": 4},
            school_name="N高等学校",
            prefecture="東京都",
            grade="2",
            age="17",
            bio="アニメとゲームが大好きです！仲良くしてください！",
            follower_count=12,
            created_at=datetime(2025, 11, 1, tzinfo=timezone.utc),
            last_active=datetime(2025, 11, 21, tzinfo=timezone.utc),
            study_profile={
                "mock_exam_name": "全統模試",
                "target_university": "東京大学",
                "subjects": ["数学IA", "英語"],
            },
            seasonal_question={"question": "夏休みの予定は？", "answer": "海に行きたい"},
        ),
        make_user(
            "2",
            "けんた",
            tags=["Apex Legends", "プログラミング", "数学基礎"],
            communication={
                "approachability": 2,
                "initiative": 5,
                "response_speed": 5,
                "group_preference": "large",
                "text_vs_voice": "voice",
                "online_activity": 5,
            },
            school_name="S高等学校",
            prefecture="大阪府",
            grade="3",
            age="18",
            career_path="就職",
            follower_count=40,
            created_at=datetime(2025, 10, 15, tzinfo=timezone.utc),
            last_active=datetime(2025, 11, 25, tzinfo=timezone.utc),
        ),
        make_user(
            "3",
            "みさき",
            tags=["YOASOBI", "イラスト", "数学"],
            communication={"approachability": 5, "group_preference": "one-on-one"},
            school_name="N高等学校",
            prefecture="神奈川県",
            grade="2",
            age="17",
            career_path="専門学校",
            bio="絵を描くのが好き",
            follower_count=25,
            created_at=datetime(2025, 11, 10, tzinfo=timezone.utc),
            study_profile={
                "mock_exam_name": "進研模試",
                "target_university": "京都大学",
                "subjects": ["数学IIB", "物理"],
            },
        ),
    ]


@pytest.fixture
def users() -> List[UserRecord]:
    return sample_users()


@pytest.fixture
def directory(users) -> InMemoryUserDirectory:
    return InMemoryUserDirectory(users)


@pytest.fixture
def test_settings() -> Settings:
    """環境変数に依存しない設定"""
    return Settings(
        _env_file=None,
        suggestion_limit=20,
        exam_participation=True,
        log_level="DEBUG",
    )


@pytest.fixture
def orchestrator(directory, test_settings) -> QueryOrchestrator:
    return QueryOrchestrator(directory, settings=test_settings)


@pytest.fixture
def signed_in() -> StaticSessionProvider:
    return StaticSessionProvider("viewer-001")


# =============================================================================
# E2E シナリオ用の母集団
# =============================================================================

@pytest.fixture
def scenario_directory() -> InMemoryUserDirectory:
    """
    U1: 2年 / 数学 / 話しかけやすさ 4
    U2: 3年 / 英語 / 話しかけやすさ 2
    U3: 2年 / 数学・英語 / 話しかけやすさ 5
    """
    return InMemoryUserDirectory([
        make_user("U1", grade="2", tags=["数学"], communication={"approachability": 4}),
        make_user("U2", grade="3", tags=["英語"], communication={"approachability": 2}),
        make_user("U3", grade="2", tags=["数学", "英語"], communication={"approachability": 5}),
    ])
