"""
スコア取り込み処理本体。

KSMのスコアファイルを1件ずつ読み込み、USCのScoresテーブルへ登録する。
処理は advance() を呼ぶたびに1ステップだけ進み、進捗イベントを1件返す。
ホストは advance() を呼ぶのをやめるだけで一時停止・中断できる。

状態遷移:
    Ready -> Importing -> Finished

イベント列:
    Started, Advanced*, (Finished | Errored)

例外方針:
- 行のパース失敗、譜面が見つからない、登録失敗などはスコア単位の失敗として
  fail_messages に記録し、処理を継続する
- score フォルダが無い、DBを開けない、未対応のスキーマバージョンの場合は
  Errored を1件返して終了する
"""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ksm_importer.chart_hash import ChartHashCache
from ksm_importer.db import connect_db, read_schema_version
from ksm_importer.errors import FormatError, KsmImportError
from ksm_importer.inserters import InsertFn, select_inserter, supported_versions
from ksm_importer.models import (
    Advanced,
    Errored,
    Finished,
    ImportSummary,
    Progress,
    Started,
)
from ksm_importer.parser import parse_score_line
from ksm_importer.score_files import enumerate_score_files

logger = logging.getLogger(__name__)


@dataclass
class _Ready:
    ksm_path: Path
    db_path: Path


@dataclass
class _Importing:
    db_version: int
    connection: sqlite3.Connection
    summary: ImportSummary
    score_files: List[Path] = field(default_factory=list)


@dataclass
class _Finished:
    pass


class ImportDriver:
    """
    KSMスコアの取り込みを1ファイルずつ進めるステートマシン。

    DB接続と集計結果は本クラスが専有し、Finished に到達した時点で接続を閉じる。
    """

    def __init__(
        self,
        ksm_path: Union[str, os.PathLike],
        db_path: Union[str, os.PathLike],
        hash_cache: Optional[ChartHashCache] = None,
    ) -> None:
        self.hash_cache = hash_cache if hash_cache is not None else ChartHashCache()
        self._state: Union[_Ready, _Importing, _Finished] = _Ready(
            ksm_path=Path(ksm_path),
            db_path=Path(db_path),
        )

    def __iter__(self) -> Iterator[Progress]:
        while True:
            event = self.advance()
            if event is None:
                return
            yield event

    def advance(self) -> Optional[Progress]:
        """
        処理を1ステップ進め、次の進捗イベントを返す。

        Returns:
            進捗イベント。Finished 状態に到達済みの場合は None。
        """
        state = self._state
        if isinstance(state, _Ready):
            return self._start(state)
        if isinstance(state, _Importing):
            return self._step(state)
        return None

    def close(self) -> None:
        """DB接続を閉じて Finished へ遷移する。以降イベントは返さない。"""
        self._finish()

    def _finish(self) -> None:
        state = self._state
        if isinstance(state, _Importing):
            state.connection.close()
        self._state = _Finished()

    def _start(self, state: _Ready) -> Progress:
        db_error: Optional[Exception] = None
        ksm_error: Optional[Exception] = None
        connection: Optional[sqlite3.Connection] = None
        score_files: List[Path] = []

        try:
            connection = connect_db(state.db_path)
        except sqlite3.Error as e:
            db_error = e

        try:
            score_files = enumerate_score_files(state.ksm_path)
        except KsmImportError as e:
            ksm_error = e

        if db_error is not None or ksm_error is not None:
            if connection is not None:
                connection.close()
            if db_error is not None and ksm_error is not None:
                message = f"DB Error: '{db_error}', KSM Path error: '{ksm_error}'"
            else:
                message = str(db_error if db_error is not None else ksm_error)
            logger.error("Import could not start: %s", message)
            self._state = _Finished()
            return Errored(message)

        db_version = read_schema_version(connection)
        logger.info(
            "Import started: %d score files found, DB version %d",
            len(score_files),
            db_version,
        )
        self._state = _Importing(
            db_version=db_version,
            connection=connection,
            summary=ImportSummary(scores_found=len(score_files)),
            score_files=score_files,
        )
        return Started()

    def _step(self, state: _Importing) -> Progress:
        try:
            insert = select_inserter(state.db_version)
        except KsmImportError as e:
            logger.error("Import aborted: %s (supported versions: %s)", e, supported_versions())
            self._finish()
            return Errored(str(e))

        if not state.score_files:
            summary = state.summary
            logger.info(
                "Import finished: %d/%d scores imported, %d failures",
                summary.scores_imported,
                summary.scores_found,
                len(summary.fail_messages),
            )
            self._finish()
            return Finished(summary)

        score_path = state.score_files.pop()
        imported = self._import_file(state, insert, score_path)

        # コミットできた行だけを取り込み件数に数える
        try:
            state.connection.commit()
        except sqlite3.Error as e:
            state.connection.rollback()
            self._fail(
                state.summary,
                f"Failed to commit {imported} scores from \"{score_path}\": {e}",
            )
        else:
            state.summary.scores_imported += imported

        progress = 1.0 - len(state.score_files) / state.summary.scores_found
        return Advanced(progress=progress, score_file=score_path)

    def _import_file(self, state: _Importing, insert: InsertFn, score_path: Path) -> int:
        """スコアファイル1件を登録し、未コミットの登録件数を返す。"""
        summary = state.summary
        imported = 0
        try:
            file_obj = open(score_path, "r", encoding="utf-8-sig", errors="replace")
        except OSError as e:
            self._fail(summary, f"Failed to open \"{score_path}\": {e}")
            return imported

        with file_obj:
            try:
                for line in file_obj:
                    if self._import_line(state, insert, score_path, line):
                        imported += 1
            except OSError as e:
                self._fail(summary, f"Failed to read \"{score_path}\": {e}")

        return imported

    def _import_line(
        self,
        state: _Importing,
        insert: InsertFn,
        score_path: Path,
        line: str,
    ) -> bool:
        try:
            score = parse_score_line(line)
        except FormatError as e:
            self._fail(state.summary, f"Score parse failed in \"{score_path}\": {e}")
            return False

        try:
            insert(score, state.connection, score_path, self.hash_cache)
        except KsmImportError as e:
            self._fail(state.summary, f"Score insert failed: {e}")
            return False

        return True

    @staticmethod
    def _fail(summary: ImportSummary, message: str) -> None:
        logger.warning(message)
        summary.fail_messages.append(message)


def run_import(
    ksm_path: Union[str, os.PathLike],
    db_path: Union[str, os.PathLike],
    hash_cache: Optional[ChartHashCache] = None,
) -> Iterator[Progress]:
    """ImportDriver を最後まで進め、進捗イベントを順に返すジェネレータ。"""
    driver = ImportDriver(ksm_path, db_path, hash_cache=hash_cache)
    try:
        yield from driver
    finally:
        driver.close()
