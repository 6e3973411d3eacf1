"""
KSMスコアログのパーサ。

スコアファイル (.ksc) の1行を KsmScore へ変換する責務を持つ。

想定仕様:
- 1行は `設定=成績` の形式で、設定・成績ともにカンマ区切り
- 設定は固定の6項目で、対応するのは2種類のみ (ゲージ種別 hard/normal)
- 成績は `score,badge,_,gauge*100,...` の順に並ぶ
- 対応外の設定で記録された行はベストエフォートで読まず、エラーとする
"""

from __future__ import annotations

import math
import re
from typing import List

from ksm_importer.errors import FormatError
from ksm_importer.models import KsmScore

SUPPORTED_SETTINGS = (
    "hard,normal,normal,on,on,on",
    "normal,normal,normal,on,on,on",
)

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

UINT32_MAX = 0xFFFFFFFF


def _parse_unsigned(text: str, name: str, line: str) -> int:
    """
    符号なし整数の成績項目を解析する。

    Args:
        text: 項目の文字列。
        name: エラーメッセージ用の項目名。
        line: エラーメッセージ用の元の行。

    Returns:
        解析した整数値。

    Raises:
        FormatError: 32bit符号なし整数として解釈できない場合。
    """
    if not _UNSIGNED_RE.fullmatch(text):
        raise FormatError(f"invalid {name} {text!r} in score entry: {line!r}")

    value = int(text)
    if value > UINT32_MAX:
        raise FormatError(f"{name} {text!r} out of range in score entry: {line!r}")
    return value


def _parse_gauge(text: str, line: str) -> float:
    """ゲージ項目 (百分率) を解析し、0〜1の値で返す。"""
    if not _DECIMAL_RE.fullmatch(text):
        raise FormatError(f"invalid gauge {text!r} in score entry: {line!r}")

    value = float(text)
    if not math.isfinite(value):
        raise FormatError(f"invalid gauge {text!r} in score entry: {line!r}")

    return value / 100.0


def _field(fields: List[str], index: int, name: str, line: str) -> str:
    """成績項目を位置指定で取り出す。欠落していれば FormatError。"""
    if index >= len(fields):
        raise FormatError(f"missing {name} in score entry: {line!r}")
    return fields[index]


def parse_score_line(line: str) -> KsmScore:
    """
    スコアログ1行を解析して KsmScore を返す。

    Args:
        line: スコアファイルの1行。末尾の改行は除去される。

    Returns:
        KsmScore。

    Raises:
        FormatError: 対応外の設定、項目欠落、数値変換失敗の場合。
    """
    line = line.rstrip("\r\n")

    if not line.startswith(SUPPORTED_SETTINGS):
        raise FormatError("unsupported score entry")

    settings_part, sep, stats_part = line.partition("=")
    if not sep:
        raise FormatError(f"missing stats segment in score entry: {line!r}")

    settings = settings_part.split(",")
    stats = stats_part.split(",")

    hard = settings[0] == "hard"
    score = _parse_unsigned(_field(stats, 0, "score", line), "score", line)
    badge = _parse_unsigned(_field(stats, 1, "badge", line), "badge", line)
    gauge = _parse_gauge(_field(stats, 3, "gauge", line), line)
    miss = 0 if badge > 1 else 1

    return KsmScore(
        score=score,
        crit=0,
        near=0,
        miss=miss,
        gauge=gauge,
        badge=badge,
        hard=hard,
    )
