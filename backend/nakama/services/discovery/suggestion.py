"""
NAKAMA - Suggestion Engine
検索欄で入力中の語からタグ候補を提示する
"""
import re

from nakama.schemas.criteria import SuggestionResult
from nakama.services.discovery.tag_index import TagIndex

# 全角スペースも区切りとして扱う
_WHITESPACE = re.compile(r"\s")


def trailing_token(raw_text: str) -> str:
    """最後の空白より後ろ（入力中の語）を返す。末尾が空白なら空文字"""
    return _WHITESPACE.split(raw_text)[-1]


def strip_trailing_token(raw_text: str) -> str:
    """入力中の語を取り除いたテキストを返す（手前の空白は残す）"""
    token = trailing_token(raw_text)
    if not token:
        return raw_text
    return raw_text[: len(raw_text) - len(token)]


def suggest(raw_text: str, index: TagIndex, limit: int) -> SuggestionResult:
    prefix = trailing_token(raw_text)
    if not prefix:
        return SuggestionResult(tags=[], visible=False)
    tags = index.prefix_search(prefix, limit)
    return SuggestionResult(tags=tags, visible=bool(tags))
