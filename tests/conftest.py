from __future__ import annotations

import sqlite3
import sys
from pathlib import Path
from typing import Callable, Iterable

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

USC_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS "Database" (
    version INTEGER
);
CREATE TABLE IF NOT EXISTS Scores (
    rowid INTEGER PRIMARY KEY AUTOINCREMENT,
    score INTEGER,
    crit INTEGER,
    near INTEGER,
    early INTEGER,
    late INTEGER,
    combo INTEGER,
    miss INTEGER,
    gauge REAL,
    auto_flags INTEGER,
    replay TEXT,
    timestamp INTEGER,
    chart_hash TEXT,
    user_name TEXT,
    user_id TEXT,
    local_score INTEGER,
    window_perfect INTEGER,
    window_good INTEGER,
    window_hold INTEGER,
    window_miss INTEGER,
    window_slam INTEGER,
    gauge_type INTEGER,
    gauge_opt INTEGER,
    mirror INTEGER,
    random INTEGER
);
"""


def init_usc_schema(conn: sqlite3.Connection, version: int) -> None:
    """USCと同じ Database/Scores テーブルを作成し、スキーマバージョンを登録する。"""
    conn.executescript(USC_SCHEMA_SQL)
    conn.execute('DELETE FROM "Database"')
    conn.execute('INSERT INTO "Database" (version) VALUES (?)', (version,))
    conn.commit()


def _write_score_file(
    ksm_root: Path,
    lines: Iterable[str],
    player: str = "player",
    pack: str = "pack",
    song: str = "song",
    chart: str = "exh",
    with_chart: bool = True,
    chart_bytes: bytes = b"title=Test Song\n--\n",
) -> Path:
    """KSMフォルダ構成に沿ってスコアファイル(と譜面ファイル)を作成する。"""
    score_dir = ksm_root / "score" / player / pack / song
    score_dir.mkdir(parents=True, exist_ok=True)
    score_path = score_dir / f"{chart}.ksc"
    score_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")

    if with_chart:
        chart_dir = ksm_root / "songs" / pack / song
        chart_dir.mkdir(parents=True, exist_ok=True)
        (chart_dir / f"{chart}.ksh").write_bytes(chart_bytes)

    return score_path


@pytest.fixture
def ksm_root(tmp_path: Path) -> Path:
    root = tmp_path / "KShootMania"
    (root / "score").mkdir(parents=True)
    (root / "songs").mkdir(parents=True)
    return root


@pytest.fixture
def add_score(ksm_root: Path) -> Callable[..., Path]:
    def _add(lines: Iterable[str], **kwargs) -> Path:
        return _write_score_file(ksm_root, lines, **kwargs)

    return _add


@pytest.fixture
def make_usc_db(tmp_path: Path) -> Callable[[int], Path]:
    """指定スキーマバージョンのUSC maps.db を作成する。"""

    def _make(version: int = 19, name: str = "maps.db") -> Path:
        db_path = tmp_path / name
        conn = sqlite3.connect(str(db_path))
        try:
            init_usc_schema(conn, version)
        finally:
            conn.close()
        return db_path

    return _make


@pytest.fixture
def read_scores() -> Callable[[Path], list]:
    """Scoresテーブルの全行を登録順に返す関数。"""

    def _read(db_path: Path) -> list:
        conn = sqlite3.connect(str(db_path))
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute("SELECT * FROM Scores ORDER BY rowid").fetchall()
        finally:
            conn.close()

    return _read


@pytest.fixture
def count_scores() -> Callable[[sqlite3.Connection], int]:
    """接続から見えるScoresテーブルの行数を返す関数。"""

    def _count(conn: sqlite3.Connection) -> int:
        return int(conn.execute("SELECT COUNT(*) FROM Scores").fetchone()[0])

    return _count
