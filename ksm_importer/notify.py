"""
取り込み結果をDiscord Webhookへ通知するユーティリティ。

通知失敗は取り込み処理の失敗とはみなさず、WARNINGログのみ出力する。
"""

from __future__ import annotations

import logging
from typing import List

import requests
from requests import RequestException

from ksm_importer.models import ImportSummary

logger = logging.getLogger(__name__)


def _summary_lines(summary: ImportSummary) -> List[str]:
    return [
        "✅ KSM score import finished",
        f"- Scores Found: {summary.scores_found}",
        f"- Scores Imported: {summary.scores_imported}",
        f"- Failed Imports: {len(summary.fail_messages)}",
    ]


def _with_failures(header: List[str], failures: List[str]) -> str:
    lines = list(header)
    if failures:
        lines.append("Failures:")
        lines.extend(f"- {message}" for message in failures)
    return "\n".join(lines)


def build_import_message(summary: ImportSummary, limit: int = 1900) -> str:
    """
    取り込み完了の通知本文を組み立てる。

    失敗内容は先頭10件まで載せる。limit を超える場合は5件へ減らし、
    それでも超える場合は一覧を省略する。

    Args:
        summary: 取り込み結果。
        limit: 本文の最大文字数。

    Returns:
        通知本文。
    """
    header = _summary_lines(summary)
    failures = summary.fail_messages

    for count in (10, 5):
        content = _with_failures(header, failures[:count])
        if len(content) <= limit:
            return content

    lines = list(header)
    if failures:
        lines.append("Failures: See log")
    return "\n".join(lines)


def build_error_message(message: str) -> str:
    """実行全体の失敗の通知本文を組み立てる。"""
    return f"❌ KSM score import failed\n```{message[:1800]}```"


def send_import_notification(webhook_url: str, content: str) -> bool:
    """
    Discord Webhookへメッセージを送信する。

    webhook_urlが空の場合は何もせず終了する。

    Args:
        webhook_url: Discord Webhook URL。
        content: 送信する本文。

    Returns:
        送信に成功した場合 True。
    """
    if not webhook_url:
        return False

    try:
        response = requests.post(webhook_url, json={"content": content}, timeout=15)
        response.raise_for_status()
    except RequestException as e:
        logger.warning("Failed to send Discord import notification: %s", e)
        return False

    return True
