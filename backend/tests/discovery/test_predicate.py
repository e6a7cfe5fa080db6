"""
Predicate Evaluator の単体テスト

テスト方針:
1. 各条件を個別に検証（フリーテキスト / プロフィール / 学習 / 季節 / コミュ / タグ）
2. 任意項目を持たないユーザーは該当条件のみ不一致になり、例外は出ない
3. 条件追加で結果が増えない（単調性）
"""
import pytest

from nakama.schemas.criteria import CommThresholds, FilterCriteria
from nakama.services.discovery.predicate import filter_users, matches
from tests.conftest import make_user, tag


def ids(users):
    return [u.id for u in users]


# =============================================================================
# フリーテキスト検索
# =============================================================================

class TestSearchText:

    def test_empty_passes(self, users):
        assert ids(filter_users(users, FilterCriteria())) == ["1", "2", "3"]

    def test_whitespace_only_passes(self, users):
        assert len(filter_users(users, FilterCriteria(search_text="   "))) == 3

    def test_matches_nickname(self, users):
        assert ids(filter_users(users, FilterCriteria(search_text="けんた"))) == ["2"]

    def test_matches_id(self, users):
        assert ids(filter_users(users, FilterCriteria(search_text="3"))) == ["3"]

    def test_matches_bio(self, users):
        assert ids(filter_users(users, FilterCriteria(search_text="アニメ"))) == ["1"]

    def test_query_is_trimmed(self, users):
        assert ids(filter_users(users, FilterCriteria(search_text=" みさき "))) == ["3"]

    def test_user_without_bio_does_not_raise(self):
        user = make_user("x", "たろう", bio=None)
        assert matches(user, FilterCriteria(search_text="ゲーム")) is False

    def test_case_sensitive(self):
        user = make_user("x", "Taro")
        assert matches(user, FilterCriteria(search_text="taro")) is False


# =============================================================================
# プロフィール条件
# =============================================================================

class TestProfileFacets:

    def test_grade_exact(self, users):
        assert ids(filter_users(users, FilterCriteria(grade="2"))) == ["1", "3"]

    def test_grade_is_not_substring(self):
        user = make_user("x", grade="12")
        assert matches(user, FilterCriteria(grade="1")) is False

    def test_age_exact(self, users):
        assert ids(filter_users(users, FilterCriteria(age="18"))) == ["2"]

    def test_school_substring(self, users):
        assert ids(filter_users(users, FilterCriteria(school_name="N高"))) == ["1", "3"]

    def test_prefecture_substring(self, users):
        assert ids(filter_users(users, FilterCriteria(prefecture="大阪"))) == ["2"]

    def test_career_path_substring(self, users):
        assert ids(filter_users(users, FilterCriteria(career_path="進学"))) == ["1"]


# =============================================================================
# 学習プロフィール条件
# =============================================================================

class TestStudyFacets:

    def test_mock_exam(self, users):
        assert ids(filter_users(users, FilterCriteria(mock_exam="全統"))) == ["1"]

    def test_target_university(self, users):
        assert ids(filter_users(users, FilterCriteria(target_university="大学"))) == ["1", "3"]

    def test_subject_in_any_subject(self, users):
        assert ids(filter_users(users, FilterCriteria(subject="数学"))) == ["1", "3"]
        assert ids(filter_users(users, FilterCriteria(subject="物理"))) == ["3"]

    def test_user_without_study_profile_fails_only_study_clause(self, users):
        """学習プロフィールなしのユーザー（けんた）は除外されるが、他ユーザーの判定は続く"""
        result = filter_users(users, FilterCriteria(subject="数学"))
        assert "2" not in ids(result)
        assert len(result) == 2

    def test_user_without_study_profile_passes_when_unconstrained(self, users):
        assert "2" in ids(filter_users(users, FilterCriteria()))

    def test_ignored_when_exam_participation_disabled(self, users):
        result = filter_users(
            users,
            FilterCriteria(mock_exam="存在しない模試"),
            include_study_facets=False,
        )
        assert len(result) == 3


# =============================================================================
# 季節の質問
# =============================================================================

class TestSeasonalAnswer:

    def test_substring_of_answer(self, users):
        assert ids(filter_users(users, FilterCriteria(seasonal_answer="海"))) == ["1"]

    def test_users_without_question_fail(self, users):
        assert ids(filter_users(users, FilterCriteria(seasonal_answer="山"))) == []


# =============================================================================
# コミュニケーション閾値
# =============================================================================

class TestCommunicationThresholds:

    @pytest.mark.parametrize(
        "facet",
        ["approachability", "initiative", "response_speed", "deep_vs_casual", "online_activity"],
    )
    def test_zero_threshold_passes_everyone(self, facet):
        user = make_user("x", communication={facet: 1})
        criteria = FilterCriteria(comm_thresholds=CommThresholds(**{facet: 0}))
        assert matches(user, criteria) is True

    @pytest.mark.parametrize(
        "facet",
        ["approachability", "initiative", "response_speed", "deep_vs_casual", "online_activity"],
    )
    def test_threshold_five_requires_five(self, facet):
        criteria = FilterCriteria(comm_thresholds=CommThresholds(**{facet: 5}))
        assert matches(make_user("x", communication={facet: 5}), criteria) is True
        assert matches(make_user("y", communication={facet: 4}), criteria) is False

    def test_at_least_semantics(self, users):
        criteria = FilterCriteria(comm_thresholds=CommThresholds(approachability=4))
        assert ids(filter_users(users, criteria)) == ["1", "3"]

    def test_thresholds_combine_with_and(self, users):
        criteria = FilterCriteria(
            comm_thresholds=CommThresholds(approachability=2, initiative=5)
        )
        assert ids(filter_users(users, criteria)) == ["2"]

    def test_group_preference_equality(self, users):
        assert ids(filter_users(users, FilterCriteria(group_preference="one-on-one"))) == ["3"]

    def test_text_vs_voice_equality(self, users):
        assert ids(filter_users(users, FilterCriteria(text_vs_voice="voice"))) == ["2"]


# =============================================================================
# 選択タグ
# =============================================================================

class TestSelectedTags:

    def test_or_semantics(self):
        """[A, B] を選択したとき、A だけ持つユーザーは通過し、どちらもなければ不一致"""
        criteria = FilterCriteria(selected_tags=[tag("A"), tag("B")])
        assert matches(make_user("x", tags=["A"]), criteria) is True
        assert matches(make_user("y", tags=["C"]), criteria) is False

    def test_empty_selection_passes(self):
        assert matches(make_user("x", tags=[]), FilterCriteria()) is True

    def test_name_match_is_exact(self):
        criteria = FilterCriteria(selected_tags=[tag("数学")])
        assert matches(make_user("x", tags=["数学基礎"]), criteria) is False


# =============================================================================
# 単調性
# =============================================================================

class TestMonotonicity:

    @pytest.mark.parametrize(
        "constraint",
        [
            {"grade": "2"},
            {"prefecture": "東京"},
            {"school_name": "N高"},
            {"subject": "数学"},
            {"seasonal_answer": "海"},
            {"search_text": "あ"},
            {"comm_thresholds": {"approachability": 4}},
            {"selected_tags": [{"name": "YOASOBI"}]},
        ],
    )
    def test_adding_constraint_never_increases_count(self, users, constraint):
        base = FilterCriteria(career_path="大学")
        narrowed = FilterCriteria(career_path="大学", **constraint)

        assert len(filter_users(users, narrowed)) <= len(filter_users(users, base))
        assert len(filter_users(users, base)) <= len(filter_users(users, FilterCriteria()))

    def test_order_follows_directory(self, users):
        reversed_users = list(reversed(users))
        assert ids(filter_users(reversed_users, FilterCriteria(grade="2"))) == ["3", "1"]
