import argparse
import logging
import sys

from ksm_importer.config import DEFAULT_SETTINGS_PATH, load_settings
from ksm_importer.errors import PathError
from ksm_importer.importer import run_import
from ksm_importer.models import Advanced, Errored, Finished, ImportSummary, Started
from ksm_importer.notify import (
    build_error_message,
    build_import_message,
    send_import_notification,
)
from ksm_importer.report import build_import_report, write_import_report
from ksm_importer.score_files import validate_paths


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Import K-Shoot MANIA scores into a USC maps.db",
    )
    parser.add_argument("ksm_path", nargs="?", help="KSM install folder (contains score/ and songs/)")
    parser.add_argument("db_path", nargs="?", help="USC maps.db")
    parser.add_argument("--settings", default=DEFAULT_SETTINGS_PATH, help="settings.yaml path")
    parser.add_argument("--report", help="write a JSON import report to this path")
    parser.add_argument("--webhook", help="Discord webhook URL to notify")
    return parser.parse_args(argv)


def print_summary(summary: ImportSummary) -> None:
    """
    取り込み結果を標準出力へ表示する。

    Args:
        summary: 取り込み結果。
    """
    print("Finished")
    print(f"Scores Imported: {summary.scores_imported}")
    print(f"Failed Imports: {len(summary.fail_messages)}")
    if summary.fail_messages:
        print()
        print("Errors:")
        for message in summary.fail_messages:
            print(message)


def main(argv=None) -> int:
    """
    KSMスコアをUSCのDBへ取り込むメイン処理。
    以下の処理を順序実行する:
    1. 設定を解決する (コマンドライン引数 > 環境変数 > settings.yaml)
    2. KSMフォルダとDBファイルの存在を確認する
    3. 取り込みを1ファイルずつ進め、進捗を表示する
    4. 結果を表示し、必要に応じてレポート出力・Discord通知を行う
    環境変数:
    - KSM_PATH: KSMのインストールフォルダ
    - USC_DB_PATH: USCの maps.db
    - DISCORD_WEBHOOK_URL: Discord通知先(オプション)

    Returns:
        int: 取り込みが完了した場合0、失敗した場合1。
    """
    args = parse_args(argv)
    settings = load_settings(args.settings)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ksm_path = args.ksm_path or settings.ksm_path
    db_path = args.db_path or settings.db_path
    report_path = args.report or settings.report_path
    webhook_url = args.webhook or settings.notify.webhook_url

    if not ksm_path or not db_path:
        print("Both the KSM path and the maps.db path are required", file=sys.stderr)
        return 1

    try:
        validate_paths(ksm_path, db_path)
    except PathError as e:
        print(f"Failed to start import: {e}", file=sys.stderr)
        send_import_notification(webhook_url, build_error_message(str(e)))
        return 1

    for event in run_import(ksm_path, db_path):
        if isinstance(event, Started):
            print("Starting")
        elif isinstance(event, Advanced):
            print(f"[{event.progress:6.1%}] {event.score_file}")
        elif isinstance(event, Finished):
            print_summary(event.summary)
            if report_path:
                write_import_report(
                    report_path,
                    build_import_report(event.summary, str(ksm_path), str(db_path)),
                )
            send_import_notification(
                webhook_url,
                build_import_message(event.summary, limit=settings.notify.message_limit),
            )
            return 0
        elif isinstance(event, Errored):
            print(f"Error: {event.message}", file=sys.stderr)
            send_import_notification(webhook_url, build_error_message(event.message))
            return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
