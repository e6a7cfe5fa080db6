"""
NAKAMA - Query Orchestrator
ユーザー探索画面の検索状態を保持し、条件が変わるたびに結果を再計算する

制御フロー:
1. 表示層が setter で検索条件を変更する
2. 新しい条件全体を検証してから確定する（不正値なら何も変わらない）
3. ディレクトリのスナップショットからタグ候補と絞り込み結果を全件再計算する
4. 購読者に on_criteria_changed を通知する

探索セッションごとに1インスタンスを生成し、画面を閉じたら close() で破棄する。
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from nakama.core.config import Settings, get_settings
from nakama.core.logger import get_traced_logger, trace_execution
from nakama.core.trace_context import new_session_id, session_scope
from nakama.schemas.criteria import CommThresholds, FilterCriteria, SuggestionResult
from nakama.schemas.user import (
    COMMUNICATION_SCALES,
    GroupPreference,
    Tag,
    TextVsVoice,
    UserRecord,
)
from nakama.services.auth import SessionProvider, require_signed_in
from nakama.services.directory import UserDirectory
from nakama.services.discovery.match_scorer import score
from nakama.services.discovery.predicate import filter_users
from nakama.services.discovery.sorting import SortKey, sort_users
from nakama.services.discovery.suggestion import strip_trailing_token, suggest
from nakama.services.discovery.tag_index import TagIndex

logger = get_traced_logger("QueryOrchestrator")

CriteriaListener = Callable[["QueryOrchestrator"], None]


class QueryOrchestrator:
    """
    Query Orchestrator (探索クエリ管理)

    機能:
    - 検索条件の保持と項目ごとの setter
    - 入力中の語からのタグ候補
    - 条件に一致するユーザー一覧と共通タグ数
    - 絞り込みパネルの表示切替（結果には影響しない）
    """

    def __init__(
        self,
        directory: UserDirectory,
        *,
        settings: Optional[Settings] = None,
        exam_participation: Optional[bool] = None,
        session_id: Optional[str] = None,
        viewer_id: Optional[str] = None,
    ):
        self._directory = directory
        self._settings = settings or get_settings()
        self.exam_participation = (
            self._settings.exam_participation
            if exam_participation is None
            else exam_participation
        )
        self.session_id = session_id
        self.viewer_id = viewer_id

        self._criteria = FilterCriteria()
        self._show_filters = False
        self._tag_index = TagIndex()
        self._suggestions = SuggestionResult()
        self._filtered: List[UserRecord] = []
        self._listeners: List[CriteriaListener] = []

        with session_scope(self.session_id):
            self._recompute()

    # ------------------------------------------------------------------
    # 読み取り
    # ------------------------------------------------------------------

    @property
    def criteria(self) -> FilterCriteria:
        # 呼び出し側が書き換えても内部状態に影響しないようコピーを返す
        return self._criteria.model_copy(deep=True)

    @property
    def filtered_users(self) -> List[UserRecord]:
        return list(self._filtered)

    @property
    def tag_suggestions(self) -> List[str]:
        return list(self._suggestions.tags)

    @property
    def show_suggestions(self) -> bool:
        return self._suggestions.visible

    @property
    def show_filters(self) -> bool:
        return self._show_filters

    @property
    def tag_index(self) -> TagIndex:
        return self._tag_index

    @property
    def match_scores(self) -> Dict[str, int]:
        """絞り込み結果の各ユーザーについて、選択タグとの共通タグ数"""
        seed = self._criteria.selected_tags
        return {user.id: score(seed, user.detailed_tags) for user in self._filtered}

    def match_score_for(self, user: UserRecord, seed_tags: Optional[Iterable[Tag]] = None) -> int:
        seed = self._criteria.selected_tags if seed_tags is None else seed_tags
        return score(seed, user.detailed_tags)

    def sorted_users(
        self,
        sort_by: Union[SortKey, str],
        seed_tags: Optional[Iterable[Tag]] = None,
    ) -> List[UserRecord]:
        """絞り込み結果を並び替えたコピー。MATCH の基準は既定で選択タグ"""
        seed = self._criteria.selected_tags if seed_tags is None else seed_tags
        return sort_users(self._filtered, SortKey(sort_by), seed)

    # ------------------------------------------------------------------
    # 検索条件の setter
    # ------------------------------------------------------------------

    def set_search_text(self, text: str) -> None:
        self._update(search_text=text)

    # 元画面の handleSearch と同じ操作
    handle_search = set_search_text

    def set_school_name(self, value: Optional[str]) -> None:
        self._update(school_name=value)

    def set_prefecture(self, value: Optional[str]) -> None:
        self._update(prefecture=value)

    def set_grade(self, value: Optional[str]) -> None:
        self._update(grade=value)

    def set_age(self, value: Optional[str]) -> None:
        self._update(age=value)

    def set_career_path(self, value: Optional[str]) -> None:
        self._update(career_path=value)

    def set_mock_exam(self, value: Optional[str]) -> None:
        self._update(mock_exam=value)

    def set_target_university(self, value: Optional[str]) -> None:
        self._update(target_university=value)

    def set_subject(self, value: Optional[str]) -> None:
        self._update(subject=value)

    def set_seasonal_answer(self, value: Optional[str]) -> None:
        self._update(seasonal_answer=value)

    def set_comm_threshold(self, facet: str, value: int) -> None:
        if facet not in COMMUNICATION_SCALES:
            raise ValueError(f"Unknown communication facet: {facet}")
        thresholds = self._criteria.comm_thresholds.model_dump()
        thresholds[facet] = value
        self._update(comm_thresholds=thresholds)

    def set_comm_thresholds(self, thresholds: Union[CommThresholds, Dict[str, int]]) -> None:
        self._update(comm_thresholds=thresholds)

    def set_group_preference(self, value: Optional[Union[GroupPreference, str]]) -> None:
        self._update(group_preference=value)

    def set_text_vs_voice(self, value: Optional[Union[TextVsVoice, str]]) -> None:
        self._update(text_vs_voice=value)

    def set_selected_tags(self, tags: Iterable[Tag]) -> None:
        self._update(selected_tags=list(tags))

    def remove_selected_tag(self, name: str) -> None:
        remaining = [t for t in self._criteria.selected_tags if t.name != name]
        self._update(selected_tags=remaining)

    # ------------------------------------------------------------------
    # コマンド
    # ------------------------------------------------------------------

    def select_tag(self, name: str) -> None:
        """
        タグ候補を選択する

        選択タグに追加（同名は追加しない）し、検索欄から入力中の語を消す。
        入力中の語が空になるため、再計算後の候補は非表示になる。
        """
        tag = self._tag_index.lookup(name) or Tag(name=name)
        selected = list(self._criteria.selected_tags)
        if all(t.name != tag.name for t in selected):
            selected.append(tag)
        self._update(
            selected_tags=selected,
            search_text=strip_trailing_token(self._criteria.search_text),
        )

    def handle_reset_filters(self) -> None:
        """全条件を一度に初期値へ戻す（途中状態の結果は公開しない）"""
        self._commit(FilterCriteria())

    def set_show_filters(self, visible: bool) -> None:
        self._show_filters = bool(visible)

    def refresh(self) -> None:
        """ディレクトリ側の更新（管理画面での編集・削除など）を反映する"""
        self._commit(self._criteria)

    def subscribe(self, listener: CriteriaListener) -> Callable[[], None]:
        """再計算のたびに呼ばれるリスナーを登録し、解除関数を返す"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """画面破棄時の後始末。条件を初期化し、リスナーを外す"""
        with session_scope(self.session_id):
            self._listeners.clear()
            self._criteria = FilterCriteria()
            self._show_filters = False
            self._suggestions = SuggestionResult()
            self._filtered = []
            logger.info("Discovery session closed", metadata={"viewer_id": self.viewer_id})

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------

    def _update(self, **changes: Any) -> None:
        data = self._criteria.model_dump()
        data.update(changes)
        # 検証に失敗した場合は ValidationError が送出され、現在の条件は変わらない
        self._commit(FilterCriteria.model_validate(data))

    def _commit(self, criteria: FilterCriteria) -> None:
        with session_scope(self.session_id):
            self._criteria = criteria
            self._recompute()
            self._notify()

    @trace_execution("QueryOrchestrator", "recompute")
    def _recompute(self) -> None:
        users = self._directory.list_users()
        self._tag_index = TagIndex.build(users)
        self._suggestions = suggest(
            self._criteria.search_text,
            self._tag_index,
            self._settings.suggestion_limit,
        )
        self._filtered = filter_users(
            users,
            self._criteria,
            include_study_facets=self.exam_participation,
        )
        logger.debug(
            "Results recomputed",
            metadata={
                "candidates": len(users),
                "matched": len(self._filtered),
                "suggestions": len(self._suggestions.tags),
            },
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Criteria listener failed")
                raise


def open_discovery_session(
    directory: UserDirectory,
    auth: SessionProvider,
    *,
    settings: Optional[Settings] = None,
    exam_participation: Optional[bool] = None,
) -> QueryOrchestrator:
    """
    ログイン中のユーザー向けに探索セッションを開始する

    Raises:
        NotSignedInError: ログインしていない場合
    """
    viewer_id = require_signed_in(auth)
    session_id = new_session_id()
    with session_scope(session_id):
        logger.info("Discovery session opened", metadata={"viewer_id": viewer_id})
    return QueryOrchestrator(
        directory,
        settings=settings,
        exam_participation=exam_participation,
        session_id=session_id,
        viewer_id=viewer_id,
    )
