"""
USCのスコアDB (maps.db) への接続処理を提供するモジュール。

取り込み先DBはUSC本体が作成・管理するものであり、本ツールは既存ファイルに
追記するのみとする。そのため接続時にファイルを新規作成しない。
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def connect_db(path: Union[str, os.PathLike]) -> sqlite3.Connection:
    """
    既存のSQLite DBへ読み書きモードで接続する。

    Args:
        path: SQLiteファイルパス。

    Returns:
        sqlite3.Connectionオブジェクト。

    Raises:
        sqlite3.OperationalError: ファイルが存在しない、または開けない場合。
    """
    uri = Path(path).resolve().as_uri() + "?mode=rw"
    con = sqlite3.connect(uri, uri=True)
    con.row_factory = sqlite3.Row
    return con


def read_schema_version(con: sqlite3.Connection) -> int:
    """
    Databaseテーブルからスキーマバージョンを取得する。

    読み取りに失敗した場合は未対応バージョンとして0を返す。

    Args:
        con: SQLite接続。

    Returns:
        スキーマバージョン。
    """
    try:
        row = con.execute('SELECT version FROM "Database"').fetchone()
    except sqlite3.Error as e:
        logger.warning("Failed to read schema version: %s", e)
        return 0

    if row is None or row[0] is None:
        return 0

    try:
        return int(row[0])
    except (TypeError, ValueError):
        return 0
