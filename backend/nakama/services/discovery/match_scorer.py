"""
NAKAMA - Match Scorer
2つのタグ集合の共通タグ数（「◯個一致」バッジ用）を数える
"""
from typing import Iterable

from nakama.schemas.user import Tag


def score(seed_tags: Iterable[Tag], candidate_tags: Iterable[Tag]) -> int:
    """
    candidate_tags のうち、seed_tags に同名タグがあるものの数

    候補側の重複はそれぞれ1件として数える。
    score([A, B], [B, C, B]) == 2
    """
    seed_names = {tag.name for tag in seed_tags}
    if not seed_names:
        return 0
    return sum(1 for tag in candidate_tags if tag.name in seed_names)
