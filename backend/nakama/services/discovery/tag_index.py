"""
NAKAMA - Tag Index
候補ユーザー全体のタグ名を集約し、入力補完用の部分一致検索を提供する
"""
from typing import Dict, Iterable, List, Optional

from nakama.schemas.user import Tag, UserRecord


class TagIndex:
    """
    タグ名インデックス

    - タグ名は大文字小文字を区別して重複排除し、名前順に保持する
    - カテゴリは最初に見つかったものを保持する（表示用）
    - ユーザー集合のスナップショットから毎回作り直す前提で、自身は更新しない
    """

    def __init__(self, tags: Iterable[Tag] = ()):
        categories: Dict[str, str] = {}
        for tag in tags:
            categories.setdefault(tag.name, tag.category)
        self._categories = categories
        self._names: List[str] = sorted(categories)

    @classmethod
    def build(cls, users: Iterable[UserRecord]) -> "TagIndex":
        return cls(tag for user in users for tag in user.detailed_tags)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def prefix_search(self, prefix: str, limit: int) -> List[str]:
        """
        prefix を含むタグ名を最大 limit 件返す

        入力途中の語にも候補を出すため、前方一致ではなく部分一致で判定する。
        空文字の場合は何も返さない。
        """
        if not prefix or limit <= 0:
            return []
        hits: List[str] = []
        for name in self._names:
            if prefix in name:
                hits.append(name)
                if len(hits) >= limit:
                    break
        return hits

    def lookup(self, name: str) -> Optional[Tag]:
        if name not in self._categories:
            return None
        return Tag(category=self._categories[name], name=name)
