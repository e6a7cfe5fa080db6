"""
NAKAMA - Predicate Evaluator
1人のユーザーが現在の検索条件をすべて満たすかを判定する

各条件は独立した AND で結合される。任意項目（学習プロフィール・季節の質問）を
持たないユーザーは、その項目を必要とする条件だけを満たさない扱いにする。
"""
from typing import Iterable, List, Optional

from nakama.schemas.criteria import FilterCriteria
from nakama.schemas.user import COMMUNICATION_SCALES, UserRecord


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle in value


def matches_search_text(user: UserRecord, search_text: str) -> bool:
    query = search_text.strip()
    if not query:
        return True
    return (
        query in user.nickname
        or query in user.id
        or _contains(user.bio, query)
    )


def matches_profile_facets(user: UserRecord, criteria: FilterCriteria) -> bool:
    if criteria.grade is not None and user.grade != criteria.grade:
        return False
    if criteria.age is not None and user.age != criteria.age:
        return False
    if criteria.school_name is not None and criteria.school_name not in user.school_name:
        return False
    if criteria.prefecture is not None and criteria.prefecture not in user.prefecture:
        return False
    if criteria.career_path is not None and criteria.career_path not in user.career_path:
        return False
    return True


def matches_study_facets(user: UserRecord, criteria: FilterCriteria) -> bool:
    if not criteria.has_study_constraint():
        return True
    profile = user.study_profile
    if profile is None:
        return False
    if criteria.mock_exam is not None and criteria.mock_exam not in profile.mock_exam_name:
        return False
    if (
        criteria.target_university is not None
        and criteria.target_university not in profile.target_university
    ):
        return False
    if criteria.subject is not None and not any(
        criteria.subject in s for s in profile.subjects
    ):
        return False
    return True


def matches_seasonal_answer(user: UserRecord, criteria: FilterCriteria) -> bool:
    if criteria.seasonal_answer is None:
        return True
    if user.seasonal_question is None:
        return False
    return criteria.seasonal_answer in user.seasonal_question.answer


def matches_communication(user: UserRecord, criteria: FilterCriteria) -> bool:
    comm = user.communication_type
    thresholds = criteria.comm_thresholds
    for scale in COMMUNICATION_SCALES:
        # 閾値 0 は常に通過（ユーザー値は 1 以上）
        if getattr(comm, scale) < getattr(thresholds, scale):
            return False
    if criteria.group_preference is not None and comm.group_preference != criteria.group_preference:
        return False
    if criteria.text_vs_voice is not None and comm.text_vs_voice != criteria.text_vs_voice:
        return False
    return True


def matches_selected_tags(user: UserRecord, criteria: FilterCriteria) -> bool:
    if not criteria.selected_tags:
        return True
    wanted = set(criteria.selected_tag_names)
    return any(tag.name in wanted for tag in user.detailed_tags)


def matches(
    user: UserRecord,
    criteria: FilterCriteria,
    *,
    include_study_facets: bool = True,
) -> bool:
    """
    ユーザーが条件をすべて満たすか

    Args:
        user: 判定対象
        criteria: 現在の検索条件
        include_study_facets: False の場合、模試・志望校・科目の条件を無視する
            （閲覧者が模試参加を有効にしていない場合）
    """
    if not matches_search_text(user, criteria.search_text):
        return False
    if not matches_profile_facets(user, criteria):
        return False
    if include_study_facets and not matches_study_facets(user, criteria):
        return False
    return (
        matches_seasonal_answer(user, criteria)
        and matches_communication(user, criteria)
        and matches_selected_tags(user, criteria)
    )


def filter_users(
    users: Iterable[UserRecord],
    criteria: FilterCriteria,
    *,
    include_study_facets: bool = True,
) -> List[UserRecord]:
    """条件を満たすユーザーをディレクトリの順序のまま返す"""
    return [
        user for user in users
        if matches(user, criteria, include_study_facets=include_study_facets)
    ]
