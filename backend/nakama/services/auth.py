"""
NAKAMA - Auth/Session Provider
ログイン中のユーザーIDを供給する外部コラボレーター

探索エンジンは探索画面を開けるかどうかの判定にのみ使用する。
"""
from typing import Optional, Protocol


class NotSignedInError(PermissionError):
    """ログインしていないため探索画面を開けない"""


class SessionProvider(Protocol):
    def current_user_id(self) -> Optional[str]:
        """ログイン中のユーザーID。未ログインなら None"""
        ...


class StaticSessionProvider:
    """固定のユーザーIDを返すセッションプロバイダー（スクリプト・テスト用）"""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def sign_in(self, user_id: str) -> None:
        self._user_id = user_id

    def sign_out(self) -> None:
        self._user_id = None


def require_signed_in(auth: SessionProvider) -> str:
    """ログイン中のユーザーIDを返す。未ログインなら NotSignedInError"""
    user_id = auth.current_user_id()
    if not user_id:
        raise NotSignedInError("Sign-in required to open user discovery")
    return user_id
