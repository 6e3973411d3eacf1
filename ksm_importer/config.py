"""
設定ファイル(settings.yaml)の読み込み処理を提供するモジュール。

settings.yaml からスコア取り込みに必要な各種設定を読み込み、
アプリ内で扱いやすい dataclass に変換する。
環境変数が設定されている場合は settings.yaml の値より優先する。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import yaml

DEFAULT_SETTINGS_PATH = "settings.yaml"
DEFAULT_MESSAGE_LIMIT = 1900


@dataclass(frozen=True)
class NotifyConfig:
    """
    取り込み結果の通知設定。

    Attributes:
        webhook_url: Discord Webhook URL。空の場合は通知しない。
        message_limit: 通知本文の最大文字数。
    """

    webhook_url: str
    message_limit: int


@dataclass(frozen=True)
class Settings:
    """
    アプリケーション全体設定。

    Attributes:
        ksm_path: KSMのインストールフォルダ。
        db_path: USCの maps.db のパス。
        report_path: 取り込みレポート(JSON)の出力先。空の場合は出力しない。
        log_level: ログレベル名。
        notify: 通知設定。
    """

    ksm_path: str
    db_path: str
    report_path: str
    log_level: str
    notify: NotifyConfig


def load_settings(
    path: str = DEFAULT_SETTINGS_PATH,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    settings.yaml を読み込み Settings に変換する。

    ファイルが存在しない場合は既定値を用いる。

    Args:
        path: settings.yaml のファイルパス。
        environ: 参照する環境変数。省略時は os.environ。

    Returns:
        Settingsオブジェクト。

    Raises:
        yaml.YAMLError: YAMLのパースに失敗した場合。
        ValueError: message_limit のint変換に失敗した場合。
    """
    env = os.environ if environ is None else environ

    data: dict = {}
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    notify_data = data.get("notify") or {}

    return Settings(
        ksm_path=str(env.get("KSM_PATH") or data.get("ksm_path") or ""),
        db_path=str(env.get("USC_DB_PATH") or data.get("db_path") or ""),
        report_path=str(data.get("report_path") or ""),
        log_level=str(data.get("log_level", "INFO")).upper(),
        notify=NotifyConfig(
            webhook_url=str(
                env.get("DISCORD_WEBHOOK_URL") or notify_data.get("webhook_url") or ""
            ).strip(),
            message_limit=int(notify_data.get("message_limit", DEFAULT_MESSAGE_LIMIT)),
        ),
    )
