"""
NAKAMA - Pydantic Schemas
ユーザープロフィールと探索条件のスキーマ定義
"""
from nakama.schemas.user import (
    COMMUNICATION_SCALES,
    CommunicationProfile,
    GroupPreference,
    SeasonalQuestion,
    StudyProfile,
    Tag,
    TextVsVoice,
    UserRecord,
)
from nakama.schemas.criteria import (
    CommThresholds,
    FilterCriteria,
    SuggestionResult,
)

__all__ = [
    # User
    "COMMUNICATION_SCALES",
    "CommunicationProfile",
    "GroupPreference",
    "SeasonalQuestion",
    "StudyProfile",
    "Tag",
    "TextVsVoice",
    "UserRecord",
    # Criteria
    "CommThresholds",
    "FilterCriteria",
    "SuggestionResult",
]
