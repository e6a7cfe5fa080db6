"""
NAKAMA - Session Trace Context
探索セッション単位の trace_id を contextvars で管理する

探索画面を開くたびに一意のIDを払い出し、再計算ログをセッションごとに追跡できるようにする。
"""
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_trace_id_var: ContextVar[str] = ContextVar("trace_id", default="no-trace")


def new_session_id() -> str:
    """短い探索セッションIDを生成する（contextvar は変更しない）"""
    return uuid.uuid4().hex[:12]


def get_trace_id() -> str:
    """現在の trace_id を取得"""
    return _trace_id_var.get()


@contextmanager
def session_scope(session_id: Optional[str]) -> Iterator[str]:
    """
    ブロック内のログに session_id を trace_id として付与する

    ブロックを抜けると元の trace_id に戻る。
    session_id が None の場合は現在の値をそのまま使う。
    """
    if session_id is None:
        yield get_trace_id()
        return
    token = _trace_id_var.set(session_id)
    try:
        yield session_id
    finally:
        _trace_id_var.reset(token)
