"""
NAKAMA - User Discovery Services
タグ索引・条件判定・候補提示・共通タグ数・再計算の管理
"""
from nakama.services.discovery.match_scorer import score
from nakama.services.discovery.orchestrator import QueryOrchestrator, open_discovery_session
from nakama.services.discovery.predicate import filter_users, matches
from nakama.services.discovery.sorting import SortKey, sort_users
from nakama.services.discovery.suggestion import suggest
from nakama.services.discovery.tag_index import TagIndex

__all__ = [
    "QueryOrchestrator",
    "SortKey",
    "TagIndex",
    "filter_users",
    "matches",
    "open_discovery_session",
    "score",
    "sort_users",
    "suggest",
]
