"""
スキーマバージョンごとのスコア登録処理を提供するモジュール。

USCのDBはDatabaseテーブルのversionで行レイアウトが変わるため、
バージョンをキーに登録関数を切り替える。新しいバージョンへの対応は
register_inserter で関数を追加するだけでよく、取り込み処理本体は変更しない。

登録方針:
- KSMのログに無い項目はUSC側の互換性を保つ固定値で埋める
- 既存行の更新(upsert)は行わない。同じスコアを再取り込みすると重複行になる
"""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Callable, Dict

from ksm_importer.chart_hash import ChartHashCache
from ksm_importer.errors import ImportIoError, InsertError, UnsupportedVersionError
from ksm_importer.models import KsmScore
from ksm_importer.score_files import resolve_chart_path

InsertFn = Callable[[KsmScore, sqlite3.Connection, Path, ChartHashCache], None]

_INSERTERS: Dict[int, InsertFn] = {}

# USC v19 既定の判定幅 (ms)
WINDOW_PERFECT = 46
WINDOW_GOOD = 92
WINDOW_HOLD = 138
WINDOW_MISS = 250
WINDOW_SLAM = 84

GAUGE_TYPE_NORMAL = 0
GAUGE_TYPE_HARD = 1


def register_inserter(version: int) -> Callable[[InsertFn], InsertFn]:
    """指定スキーマバージョンの登録関数として登録するデコレータ。"""

    def decorator(func: InsertFn) -> InsertFn:
        _INSERTERS[version] = func
        return func

    return decorator


def supported_versions() -> list[int]:
    """対応しているスキーマバージョンの一覧を返す。"""
    return sorted(_INSERTERS)


def select_inserter(version: int) -> InsertFn:
    """
    スキーマバージョンに対応する登録関数を返す。

    Raises:
        UnsupportedVersionError: 対応する登録関数が無い場合。
    """
    func = _INSERTERS.get(version)
    if func is None:
        raise UnsupportedVersionError(f"Unsupported DB version: {version}")
    return func


def _modified_epoch_seconds(path: Path) -> int:
    try:
        return int(os.stat(path).st_mtime)
    except OSError as e:
        raise ImportIoError(f"Failed to read modified time of {str(path)!r}: {e}") from e


@register_inserter(19)
def insert_v19(
    score: KsmScore,
    con: sqlite3.Connection,
    score_path: Path,
    hash_cache: ChartHashCache,
) -> None:
    """
    スキーマバージョン19のScoresテーブルへ1行登録する。

    Args:
        score: パース済みスコア。
        con: SQLite接続。
        score_path: スコアファイルのパス (譜面パスと記録日時の取得に使う)。
        hash_cache: 譜面ハッシュのキャッシュ。

    Raises:
        NotFoundError: 譜面ファイルが見つからない場合。
        ImportIoError: スコアファイルの日時または譜面ファイルを読めない場合。
        InsertError: INSERTに失敗した場合。
    """
    chart_path = resolve_chart_path(score_path)
    timestamp = _modified_epoch_seconds(score_path)
    chart_hash = hash_cache.digest(chart_path)
    gauge_type = GAUGE_TYPE_HARD if score.hard else GAUGE_TYPE_NORMAL

    try:
        con.execute("""
        INSERT INTO Scores (
            score, crit, near, miss, gauge, auto_flags, replay, timestamp,
            chart_hash, user_name, user_id, local_score,
            window_perfect, window_good, window_hold, window_miss, window_slam,
            gauge_type, gauge_opt, mirror, random
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            score.score,
            score.crit,
            score.near,
            score.miss,
            score.gauge,
            0,
            "",
            timestamp,
            chart_hash,
            "",
            0,
            True,
            WINDOW_PERFECT,
            WINDOW_GOOD,
            WINDOW_HOLD,
            WINDOW_MISS,
            WINDOW_SLAM,
            gauge_type,
            0,
            False,
            False,
        ))
    except (sqlite3.Error, OverflowError) as e:
        raise InsertError(f"Failed to insert score from {str(score_path)!r}: {e}") from e
