"""
アプリケーション固有の例外定義モジュール。

スコア取り込み処理で発生する例外を、スコア1件単位で記録して継続するもの
(PathError以外の大半) と、実行全体を中断するもの (PathError /
UnsupportedVersionError) に分類して扱うために、基底例外および派生例外を定義する。
"""


class KsmImportError(Exception):
    """スコア取り込みシステム全体の基底例外。"""


class PathError(KsmImportError):
    """KSMフォルダやDBファイルなど、入力パスが不正な場合の例外。"""


class FormatError(KsmImportError):
    """スコア行が対応フォーマットを満たさない場合の例外。"""


class NotFoundError(KsmImportError):
    """スコアに対応する譜面ファイルが見つからない場合の例外。"""


class ImportIoError(KsmImportError):
    """譜面ファイルやスコアファイルの読み込みに失敗した場合の例外。"""


class InsertError(KsmImportError):
    """Scoresテーブルへの登録に失敗した場合の例外。"""


class UnsupportedVersionError(KsmImportError):
    """取り込み先DBのスキーマバージョンに対応していない場合の例外。"""
