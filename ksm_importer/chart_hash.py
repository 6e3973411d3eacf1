"""
譜面ファイルのハッシュ計算とキャッシュを提供するモジュール。

USCのScoresテーブルは譜面をファイル内容のSHA1で識別する。
同じ譜面に対するスコアは多数存在するため、計算結果をパス単位でキャッシュする。

キャッシュ方針:
- キーは譜面ファイルパスの文字列表現
- 取り込み実行中に譜面ファイルは変更されない前提で、無効化・削除は行わない
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from typing import Dict, Union

from ksm_importer.errors import ImportIoError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def file_sha1(path: Union[str, os.PathLike]) -> str:
    """
    ファイル内容全体のSHA1を16進文字列で返す。

    Raises:
        OSError: ファイルを読めない場合。
    """
    digest = hashlib.sha1()
    with open(path, "rb") as file_obj:
        while True:
            chunk = file_obj.read(_CHUNK_SIZE)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


class ChartHashCache:
    """譜面パス → SHA1 のキャッシュ。スレッドセーフ。"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._digests: Dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._digests)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return str(path) in self._digests

    def seed(self, path: Union[str, os.PathLike], digest: str) -> None:
        """既知のハッシュを登録する。"""
        with self._lock:
            self._digests[str(path)] = digest

    def digest(self, path: Union[str, os.PathLike]) -> str:
        """
        譜面ファイルのSHA1を返す。

        キャッシュにあればファイルに触れずにそれを返し、
        無ければファイル全体を読んで計算し、キャッシュへ保存する。

        Args:
            path: 譜面ファイルのパス。

        Returns:
            SHA1の16進表現。

        Raises:
            ImportIoError: 譜面ファイルの読み込みに失敗した場合。
        """
        key = str(path)
        with self._lock:
            cached = self._digests.get(key)
            if cached is not None:
                logger.debug("Chart hash cache hit: %s", key)
                return cached

            try:
                result = file_sha1(path)
            except OSError as e:
                raise ImportIoError(f"Failed to read chart {key!r}: {e}") from e

            self._digests[key] = result
            return result
