"""
データモデル定義モジュール。

スコア行のパース結果 (KsmScore)、取り込み結果の集計 (ImportSummary)、
および取り込み処理がホストへ通知する進捗イベントを定義する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union


@dataclass(frozen=True)
class KsmScore:
    """
    KSMスコアログ1行分のプレー結果を保持するモデル。

    - crit/near はKSMのスコアログに存在しないため常に0
    - miss はバッジ段階から導出する (badge > 1 ならクリア扱いで0)
    - gauge は0〜1に正規化したゲージ残量
    """

    score: int
    crit: int
    near: int
    miss: int
    gauge: float
    badge: int
    hard: bool


@dataclass
class ImportSummary:
    """
    1回の取り込み実行の集計結果。

    Attributes:
        scores_found: 列挙されたスコアファイル数。列挙時に一度だけ設定される。
        scores_imported: 登録に成功したスコア行数。
        fail_messages: スコア単位の失敗内容 (発生順)。
    """

    scores_found: int = 0
    scores_imported: int = 0
    fail_messages: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Started:
    """取り込み開始イベント。"""


@dataclass(frozen=True)
class Advanced:
    """
    スコアファイル1件の処理完了イベント。

    Attributes:
        progress: 0.0〜1.0 の進捗率。
        score_file: 処理したスコアファイル。
    """

    progress: float
    score_file: Path


@dataclass(frozen=True)
class Finished:
    """取り込み完了イベント。集計結果を伴う。"""

    summary: ImportSummary


@dataclass(frozen=True)
class Errored:
    """実行全体の失敗イベント。集計結果は伴わない。"""

    message: str


Progress = Union[Started, Advanced, Finished, Errored]
