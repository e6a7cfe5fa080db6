"""
NAKAMA - Filter Criteria Schemas
ユーザー探索画面の検索・絞り込み状態

全ファセットは None を「制約なし」とする。空文字は None に正規化する。
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nakama.schemas.user import GroupPreference, Tag, TextVsVoice

FACET_FIELDS = (
    "school_name",
    "prefecture",
    "grade",
    "age",
    "career_path",
    "mock_exam",
    "target_university",
    "subject",
    "seasonal_answer",
)

STUDY_FACET_FIELDS = ("mock_exam", "target_university", "subject")


class CommThresholds(BaseModel):
    """コミュニケーションタイプの「N以上」閾値（0 は制約なし）"""

    model_config = ConfigDict(frozen=True)

    approachability: int = Field(default=0, ge=0, le=5)
    initiative: int = Field(default=0, ge=0, le=5)
    response_speed: int = Field(default=0, ge=0, le=5)
    deep_vs_casual: int = Field(default=0, ge=0, le=5)
    online_activity: int = Field(default=0, ge=0, le=5)

    def is_unconstrained(self) -> bool:
        return not any(self.model_dump().values())


class FilterCriteria(BaseModel):
    """現在の検索条件"""

    model_config = ConfigDict(validate_assignment=True)

    search_text: str = ""

    school_name: Optional[str] = None
    prefecture: Optional[str] = None
    grade: Optional[str] = None
    age: Optional[str] = None
    career_path: Optional[str] = None

    mock_exam: Optional[str] = None
    target_university: Optional[str] = None
    subject: Optional[str] = None

    seasonal_answer: Optional[str] = None

    comm_thresholds: CommThresholds = Field(default_factory=CommThresholds)
    # 値の一致のみで判定する（UIからは未使用）
    group_preference: Optional[GroupPreference] = None
    text_vs_voice: Optional[TextVsVoice] = None

    selected_tags: List[Tag] = Field(default_factory=list)

    @field_validator(*FACET_FIELDS, mode="before")
    @classmethod
    def blank_means_unconstrained(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("search_text", mode="before")
    @classmethod
    def none_search_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("selected_tags")
    @classmethod
    def dedupe_selected_tags(cls, v: List[Tag]) -> List[Tag]:
        seen = set()
        unique = []
        for tag in v:
            if tag.name in seen:
                continue
            seen.add(tag.name)
            unique.append(tag)
        return unique

    @property
    def selected_tag_names(self) -> List[str]:
        return [tag.name for tag in self.selected_tags]

    def has_study_constraint(self) -> bool:
        return any(getattr(self, name) is not None for name in STUDY_FACET_FIELDS)


class SuggestionResult(BaseModel):
    """タグ候補（入力のたびに再計算され、保存されない）"""

    model_config = ConfigDict(frozen=True)

    tags: List[str] = Field(default_factory=list)
    visible: bool = False
