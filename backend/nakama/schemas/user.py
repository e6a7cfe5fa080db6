"""
NAKAMA - User Schemas
探索対象となるユーザープロフィールのスキーマ

UserRecord はユーザーディレクトリが所有する。探索エンジンは読み取るだけで変更しない。
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GroupPreference(str, Enum):
    """好きな会話の人数"""
    ONE_ON_ONE = "one-on-one"
    SMALL = "small"
    LARGE = "large"


class TextVsVoice(str, Enum):
    """テキスト派かボイス派か"""
    TEXT = "text"
    VOICE = "voice"
    BOTH = "both"


# 閾値フィルタの対象となる 1-5 の数値ファセット
COMMUNICATION_SCALES = (
    "approachability",
    "initiative",
    "response_speed",
    "deep_vs_casual",
    "online_activity",
)


class Tag(BaseModel):
    """プロフィールタグ（一致判定は name のみで行い、category は表示用）"""

    model_config = ConfigDict(frozen=True)

    category: str = ""
    name: str


class CommunicationProfile(BaseModel):
    """コミュニケーションタイプ診断の結果"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    approachability: int = Field(..., ge=1, le=5, description="話しかけやすさ")
    initiative: int = Field(..., ge=1, le=5, description="自分から話しかける頻度")
    response_speed: int = Field(..., ge=1, le=5, alias="responseSpeed", description="返信の速さ")
    group_preference: GroupPreference = Field(
        default=GroupPreference.SMALL, alias="groupPreference"
    )
    text_vs_voice: TextVsVoice = Field(default=TextVsVoice.TEXT, alias="textVsVoice")
    deep_vs_casual: int = Field(..., ge=1, le=5, alias="deepVsCasual", description="深い話 vs 軽い話")
    online_activity: int = Field(..., ge=1, le=5, alias="onlineActivity", description="オンライン頻度")


class StudyProfile(BaseModel):
    """模試参加を公開しているユーザーのみが持つ学習プロフィール"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mock_exam_name: str = Field(..., alias="mockExamName")
    target_university: str = Field(..., alias="targetUniversity")
    subjects: List[str] = Field(default_factory=list)


class SeasonalQuestion(BaseModel):
    """季節の質問とその回答"""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class UserRecord(BaseModel):
    """探索対象ユーザー"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    nickname: str
    bio: Optional[str] = None
    school_name: str = Field(default="", alias="schoolName")
    prefecture: str = ""
    grade: str = ""
    age: str = ""
    career_path: str = Field(default="", alias="careerPath")
    detailed_tags: List[Tag] = Field(default_factory=list, alias="detailedTags")
    communication_type: CommunicationProfile = Field(..., alias="communicationType")
    study_profile: Optional[StudyProfile] = Field(default=None, alias="studyProfile")
    seasonal_question: Optional[SeasonalQuestion] = Field(default=None, alias="seasonalQuestion")

    # 表示専用（探索ロジックでは並び替えにのみ使用）
    gender: str = ""
    theme_color: str = Field(default="#6B9BD1", alias="themeColor")
    follower_count: int = Field(default=0, ge=0, alias="followerCount")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    last_active: Optional[datetime] = Field(default=None, alias="lastActive")

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.detailed_tags]
