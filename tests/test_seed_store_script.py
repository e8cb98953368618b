from __future__ import annotations

from pathlib import Path

import pytest

from scripts.seed_store import main, parse_args, seed_store
from src.store.kv_store import DEFAULT_STORE_DIR


def test_parse_args_defaults_to_repo_store() -> None:
    args = parse_args([])

    assert args.store_dir == DEFAULT_STORE_DIR
    assert args.reset is False
    assert args.summary is False


def test_seed_store_seeds_once_then_skips(tmp_path: Path) -> None:
    first = seed_store(tmp_path / "store")
    second = seed_store(tmp_path / "store")

    assert first["seeded"] is True
    assert second["seeded"] is False
    assert first["summary"]["total_scholarships"] == 6
    assert first["summary"]["total_amount"] == 28000.0
    assert first["summary"]["total_users"] == 3
    assert (tmp_path / "store" / "dataInitialized.json").exists()


def test_reset_reseeds_from_scratch(tmp_path: Path) -> None:
    store_dir = tmp_path / "store"
    seed_store(store_dir)
    (store_dir / "scholarships.json").write_text("[]", encoding="utf-8")

    result = seed_store(store_dir, reset=True)

    assert result["seeded"] is True
    assert result["summary"]["total_scholarships"] == 6


def test_main_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--store-dir", str(tmp_path), "--summary"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert f"Store: {tmp_path}" in output
    assert "Seeded: yes" in output
    assert "total_applications: 0" in output
    assert "pending_approvals: 0" in output


def test_main_reports_unreadable_store(tmp_path: Path) -> None:
    (tmp_path / "dataInitialized.json").write_text("true", encoding="utf-8")
    (tmp_path / "users.json").write_text("{broken", encoding="utf-8")

    assert main(["--store-dir", str(tmp_path)]) == 1
