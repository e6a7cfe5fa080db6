#!/usr/bin/env python3
"""
ユーザー探索スクリプト
JSON のユーザー一覧に検索条件を適用し、一致したユーザーと共通タグ数を出力します。

使用方法:
    # プロジェクトルートから実行
    python backend/scripts/search_users.py users.json --grade 2 --tag 数学

    # コミュニケーション閾値（N以上）を指定する場合
    python backend/scripts/search_users.py users.json --comm approachability=4

    # 入力途中の語に対するタグ候補だけを表示する場合
    python backend/scripts/search_users.py users.json --text "あおい 数" --suggest-only
"""
import argparse
import json
import os
import sys
from typing import Dict, List

# プロジェクトルートから実行されることを想定し、backendディレクトリをパスに追加
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.dirname(SCRIPT_DIR)

sys.path.insert(0, BACKEND_DIR)

from nakama.core.config import get_settings  # noqa: E402
from nakama.core.logger import configure_logging  # noqa: E402
from nakama.schemas.user import Tag  # noqa: E402
from nakama.services.auth import StaticSessionProvider  # noqa: E402
from nakama.services.directory import InMemoryUserDirectory  # noqa: E402
from nakama.services.discovery.orchestrator import open_discovery_session  # noqa: E402
from nakama.services.discovery.sorting import SortKey  # noqa: E402

FACET_OPTIONS = (
    "school_name",
    "prefecture",
    "grade",
    "age",
    "career_path",
    "mock_exam",
    "target_university",
    "subject",
    "seasonal_answer",
)


def parse_thresholds(values: List[str]) -> Dict[str, int]:
    """approachability=4 形式の指定を辞書に変換する"""
    thresholds: Dict[str, int] = {}
    for item in values:
        facet, sep, raw = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"--comm は facet=値 の形式で指定してください: {item}")
        try:
            thresholds[facet.strip()] = int(raw)
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"閾値は整数で指定してください: {item}") from e
    return thresholds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ユーザー一覧 (JSON) に検索条件を適用します"
    )
    parser.add_argument("users_file", help="ユーザー一覧の JSON ファイル（配列）")
    parser.add_argument("--text", default="", help="フリーテキスト検索")
    for facet in FACET_OPTIONS:
        parser.add_argument(f"--{facet.replace('_', '-')}", dest=facet, default=None)
    parser.add_argument(
        "--comm",
        action="append",
        default=[],
        metavar="FACET=N",
        help="コミュニケーション閾値（複数指定可）",
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="選択タグ（複数指定可、いずれかを持つユーザーが一致）",
    )
    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="並び替え（省略時はファイルの順序）",
    )
    parser.add_argument(
        "--no-exam",
        action="store_true",
        help="模試・志望校・科目の条件を適用しない",
    )
    parser.add_argument(
        "--suggest-only",
        action="store_true",
        help="--text に対するタグ候補のみ出力する",
    )
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    configure_logging(get_settings())

    with open(args.users_file, encoding="utf-8") as f:
        directory = InMemoryUserDirectory(json.load(f))

    orchestrator = open_discovery_session(
        directory,
        StaticSessionProvider("cli"),
        exam_participation=False if args.no_exam else None,
    )

    orchestrator.set_search_text(args.text)
    if args.suggest_only:
        print(json.dumps(
            {"visible": orchestrator.show_suggestions, "tags": orchestrator.tag_suggestions},
            ensure_ascii=False,
            indent=2,
        ))
        return

    for facet in FACET_OPTIONS:
        value = getattr(args, facet)
        if value is not None:
            getattr(orchestrator, f"set_{facet}")(value)
    try:
        thresholds = parse_thresholds(args.comm)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    for facet, value in thresholds.items():
        orchestrator.set_comm_threshold(facet, value)
    if args.tag:
        index = orchestrator.tag_index
        orchestrator.set_selected_tags(
            index.lookup(name) or Tag(name=name) for name in args.tag
        )

    users = (
        orchestrator.sorted_users(args.sort)
        if args.sort
        else orchestrator.filtered_users
    )
    scores = orchestrator.match_scores
    output = [
        {
            "id": user.id,
            "nickname": user.nickname,
            "match_count": scores.get(user.id, 0),
            "tags": user.tag_names,
        }
        for user in users
    ]
    print(json.dumps(output, ensure_ascii=False, indent=2))
    orchestrator.close()


if __name__ == "__main__":
    main()
