"""
KSMフォルダ内のファイル探索処理を提供するモジュール。

- score フォルダ配下からスコアファイル (.ksc) を列挙する
- スコアファイルのパスから対応する譜面ファイル (.ksh) のパスを導出する

KSMのフォルダ構成:
    <KSM>/score/<プレイヤー>/<パック>/<曲>/<譜面>.ksc
    <KSM>/songs/<パック>/<曲>/<譜面>.ksh

列挙方針 (ベストエフォート列挙):
- 走査中に読めなかったディレクトリは黙ってスキップする
- スキップしたディレクトリは取り込み失敗としては扱わず、DEBUGログのみ出力する
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from ksm_importer.errors import NotFoundError, PathError

logger = logging.getLogger(__name__)

SCORE_DIR_NAME = "score"
SONGS_DIR_NAME = "songs"
SCORE_EXTENSION = "ksc"
CHART_EXTENSION = "ksh"

PathLike = Union[str, os.PathLike]


def validate_paths(ksm_path: PathLike, db_path: PathLike) -> None:
    """
    取り込み開始前に、KSMフォルダとDBファイルの存在を確認する。

    Args:
        ksm_path: KSMのインストールフォルダ。
        db_path: USCの maps.db。

    Raises:
        PathError: いずれかのパスが存在しない場合。
    """
    if not Path(ksm_path).exists():
        raise PathError(f"KSM path invalid: {str(ksm_path)!r}")
    if not Path(db_path).exists():
        raise PathError(f"maps.db path invalid: {str(db_path)!r}")


def _skip_unreadable(err: OSError) -> None:
    """ベストエフォート列挙: 読めないエントリはスキップする。"""
    logger.debug("Skipping unreadable entry during scan: %s", err)


def enumerate_score_files(ksm_path: PathLike) -> List[Path]:
    """
    score フォルダ配下のスコアファイルを再帰的に列挙する。

    拡張子は大文字小文字を区別せずに `ksc` と比較する。
    返却順は保証しない。

    Args:
        ksm_path: KSMのインストールフォルダ。

    Returns:
        スコアファイルのパスのリスト。

    Raises:
        PathError: score フォルダが存在しない場合。
    """
    score_dir = Path(ksm_path) / SCORE_DIR_NAME
    if not score_dir.is_dir():
        raise PathError(f"Path does not exist: {str(score_dir)!r}")

    found: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(score_dir, onerror=_skip_unreadable):
        for name in filenames:
            suffix = os.path.splitext(name)[1]
            if suffix[1:].lower() == SCORE_EXTENSION:
                found.append(Path(dirpath) / name)

    return found


def resolve_chart_path(score_path: PathLike) -> Path:
    """
    スコアファイルのパスから対応する譜面ファイルのパスを導出する。

    拡張子を ksh に置き換えたうえで、末尾から数えて4番目の要素
    (プレイヤー名) を取り除き、5番目の要素 (score) を songs に置き換える。

    Args:
        score_path: スコアファイルの絶対パス。

    Returns:
        譜面ファイルのパス。

    Raises:
        NotFoundError: パスが浅すぎる場合、または導出した譜面ファイルが存在しない場合。
    """
    parts = list(Path(score_path).with_suffix("." + CHART_EXTENSION).parts)
    if len(parts) < 5:
        raise NotFoundError(f"Cannot derive chart path from: {str(score_path)!r}")

    depth = len(parts)
    parts[depth - 5] = SONGS_DIR_NAME
    del parts[depth - 4]
    chart_path = Path(*parts)

    if not chart_path.exists():
        raise NotFoundError(f"File does not exist: {str(chart_path)!r}")

    return chart_path
