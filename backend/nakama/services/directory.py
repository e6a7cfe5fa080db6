"""
NAKAMA - User Directory
探索候補となるユーザー集合を供給する外部コラボレーター

探索エンジンは list_users() のスナップショットを読むだけで、変更は行わない。
InMemoryUserDirectory は管理画面からの更新・削除を想定した参照実装。
"""
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from nakama.core.logger import get_traced_logger
from nakama.schemas.user import UserRecord

logger = get_traced_logger("UserDirectory")


class UserNotFoundError(LookupError):
    """指定IDのユーザーが存在しない"""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class UserDirectory(Protocol):
    """探索エンジンが依存するディレクトリのインターフェース"""

    def list_users(self) -> List[UserRecord]:
        """現在の候補ユーザー一覧（安定した順序）"""
        ...


class InMemoryUserDirectory:
    """
    メモリ上のユーザーディレクトリ

    - 登録順を保持する
    - update_user / delete_user は UserRecord を丸ごと置き換える
    - revision は集合が変わるたびに増える
    """

    def __init__(self, users: Optional[Iterable[Union[UserRecord, Dict[str, Any]]]] = None):
        self._users: List[UserRecord] = [
            u if isinstance(u, UserRecord) else UserRecord.model_validate(u)
            for u in (users or [])
        ]
        self.revision = 0

    def __len__(self) -> int:
        return len(self._users)

    def list_users(self) -> List[UserRecord]:
        return list(self._users)

    def get_user(self, user_id: str) -> UserRecord:
        for user in self._users:
            if user.id == user_id:
                return user
        raise UserNotFoundError(user_id)

    def add_user(self, user: Union[UserRecord, Dict[str, Any]]) -> UserRecord:
        record = user if isinstance(user, UserRecord) else UserRecord.model_validate(user)
        self._users.append(record)
        self.revision += 1
        logger.info("User added", metadata={"user_id": record.id})
        return record

    def update_user(self, user_id: str, **updates: Any) -> UserRecord:
        """
        指定ユーザーのフィールドを更新する

        更新後の値は再検証され、不正な値の場合は既存レコードを変更せずに
        pydantic.ValidationError を送出する。
        """
        for i, user in enumerate(self._users):
            if user.id != user_id:
                continue
            data = user.model_dump(by_alias=False)
            data.update(updates)
            updated = UserRecord.model_validate(data)
            self._users[i] = updated
            self.revision += 1
            logger.info(
                "User updated",
                metadata={"user_id": user_id, "fields": sorted(updates)},
            )
            return updated
        raise UserNotFoundError(user_id)

    def delete_user(self, user_id: str) -> None:
        remaining = [u for u in self._users if u.id != user_id]
        if len(remaining) == len(self._users):
            raise UserNotFoundError(user_id)
        self._users = remaining
        self.revision += 1
        logger.info("User deleted", metadata={"user_id": user_id})
