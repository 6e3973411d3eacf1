"""スコアファイル列挙と譜面パス導出のテスト。"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from ksm_importer.errors import NotFoundError, PathError
from ksm_importer.score_files import (
    enumerate_score_files,
    resolve_chart_path,
    validate_paths,
)


@pytest.mark.light
def test_enumerate_finds_ksc_files_case_insensitively(ksm_root: Path):
    nested = ksm_root / "score" / "player" / "pack" / "song"
    nested.mkdir(parents=True)
    (nested / "exh.ksc").write_text("", encoding="utf-8")
    (nested / "mxm.KSC").write_text("", encoding="utf-8")
    (nested / "notes.txt").write_text("", encoding="utf-8")
    (nested / "ksc").write_text("", encoding="utf-8")
    (ksm_root / "score" / "top.Ksc").write_text("", encoding="utf-8")

    found = enumerate_score_files(ksm_root)

    assert sorted(p.name for p in found) == ["exh.ksc", "mxm.KSC", "top.Ksc"]
    assert all(p.is_absolute() for p in found)


@pytest.mark.light
def test_enumerate_empty_score_dir_returns_nothing(ksm_root: Path):
    assert enumerate_score_files(ksm_root) == []


@pytest.mark.light
def test_enumerate_requires_score_dir(tmp_path: Path):
    with pytest.raises(PathError, match="score"):
        enumerate_score_files(tmp_path)


@pytest.mark.light
def test_enumerate_skips_unreadable_entries(ksm_root: Path, monkeypatch: pytest.MonkeyPatch):
    """走査中のエラーは onerror で握りつぶされ、例外にならないことを確認する。"""
    (ksm_root / "score" / "a.ksc").write_text("", encoding="utf-8")

    real_walk = os.walk

    def _walk(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", str(top) + "/locked"))
        yield from real_walk(top, onerror=onerror, **kwargs)

    monkeypatch.setattr("ksm_importer.score_files.os.walk", _walk)

    found = enumerate_score_files(ksm_root)
    assert [p.name for p in found] == ["a.ksc"]


@pytest.mark.light
def test_resolve_chart_path_maps_score_tree_to_songs_tree(ksm_root: Path):
    chart = ksm_root / "songs" / "pack" / "song" / "exh.ksh"
    chart.parent.mkdir(parents=True)
    chart.write_bytes(b"chart")
    score = ksm_root / "score" / "player" / "pack" / "song" / "exh.ksc"

    assert resolve_chart_path(score) == chart


@pytest.mark.light
def test_resolve_chart_path_missing_chart(ksm_root: Path):
    score = ksm_root / "score" / "player" / "pack" / "song" / "exh.ksc"
    with pytest.raises(NotFoundError, match="exh.ksh"):
        resolve_chart_path(score)


@pytest.mark.light
def test_resolve_chart_path_too_shallow():
    with pytest.raises(NotFoundError):
        resolve_chart_path(Path("a/b.ksc"))


@pytest.mark.light
def test_validate_paths(tmp_path: Path):
    db = tmp_path / "maps.db"
    db.write_bytes(b"")

    validate_paths(tmp_path, db)

    with pytest.raises(PathError, match="KSM path invalid"):
        validate_paths(tmp_path / "missing", db)
    with pytest.raises(PathError, match="maps.db path invalid"):
        validate_paths(tmp_path, tmp_path / "missing.db")
