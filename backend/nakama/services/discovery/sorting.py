"""
NAKAMA - Result Sorting
絞り込み結果の並び替え（表示層が明示的に呼ぶ場合のみ使用）

filtered_users 自体はディレクトリの順序を保持する。
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from nakama.schemas.user import Tag, UserRecord
from nakama.services.discovery.match_scorer import score

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SortKey(str, Enum):
    NEWEST = "newest"        # 登録が新しい順
    FOLLOWERS = "followers"  # フォロワーが多い順
    ACTIVE = "active"        # 最近アクティブな順
    MATCH = "match"          # 共通タグが多い順


def _timestamp(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_users(
    users: Iterable[UserRecord],
    sort_by: SortKey,
    seed_tags: Optional[Iterable[Tag]] = None,
) -> List[UserRecord]:
    """
    ユーザーを並び替えた新しいリストを返す（安定ソート）

    MATCH で seed_tags が None の場合は元の順序のまま返す。
    日時が欠けているユーザーは最も古い扱いになる。
    """
    result = list(users)
    sort_by = SortKey(sort_by)
    if sort_by is SortKey.NEWEST:
        result.sort(key=lambda u: _timestamp(u.created_at), reverse=True)
    elif sort_by is SortKey.FOLLOWERS:
        result.sort(key=lambda u: u.follower_count, reverse=True)
    elif sort_by is SortKey.ACTIVE:
        result.sort(key=lambda u: _timestamp(u.last_active), reverse=True)
    elif sort_by is SortKey.MATCH and seed_tags is not None:
        seed = list(seed_tags)
        result.sort(key=lambda u: score(seed, u.detailed_tags), reverse=True)
    return result
