"""settings.yaml 読み込みのテスト。"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ksm_importer.config import DEFAULT_MESSAGE_LIMIT, load_settings


@pytest.mark.light
def test_defaults_when_settings_file_missing(tmp_path: Path):
    settings = load_settings(str(tmp_path / "settings.yaml"), environ={})

    assert settings.ksm_path == ""
    assert settings.db_path == ""
    assert settings.report_path == ""
    assert settings.log_level == "INFO"
    assert settings.notify.webhook_url == ""
    assert settings.notify.message_limit == DEFAULT_MESSAGE_LIMIT


@pytest.mark.light
def test_values_are_read_from_yaml(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "ksm_path": "C:/KShootMania",
                "db_path": "C:/usc/maps.db",
                "report_path": "out/import_report.json",
                "log_level": "debug",
                "notify": {"webhook_url": " https://discord.invalid/hook ", "message_limit": 500},
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(str(path), environ={})

    assert settings.ksm_path == "C:/KShootMania"
    assert settings.db_path == "C:/usc/maps.db"
    assert settings.report_path == "out/import_report.json"
    assert settings.log_level == "DEBUG"
    assert settings.notify.webhook_url == "https://discord.invalid/hook"
    assert settings.notify.message_limit == 500


@pytest.mark.light
def test_environment_overrides_yaml(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("ksm_path: /from/yaml\ndb_path: /from/yaml.db\n", encoding="utf-8")

    settings = load_settings(
        str(path),
        environ={
            "KSM_PATH": "/from/env",
            "USC_DB_PATH": "/from/env.db",
            "DISCORD_WEBHOOK_URL": "https://discord.invalid/env",
        },
    )

    assert settings.ksm_path == "/from/env"
    assert settings.db_path == "/from/env.db"
    assert settings.notify.webhook_url == "https://discord.invalid/env"


@pytest.mark.light
def test_empty_yaml_uses_defaults(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")

    settings = load_settings(str(path), environ={})
    assert settings.log_level == "INFO"
