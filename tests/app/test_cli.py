from __future__ import annotations

import json

import pytest

from certimap.domain.model import (
    CategoryFilter,
    ChangelogRecord,
    ChangelogStats,
    ChangelogStatus,
)
from certimap.ui import cli as cli_module
from tests.helpers.establishments import make_establishment


def test_refresh_command_passes_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_refresh(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "refresh", fake_refresh)

    cli_module.main(["refresh", "--force", "--batch-size", "50"])

    assert captured == {"force": True, "write_batch_size": 50}


def test_refresh_command_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_refresh(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "refresh", fake_refresh)

    cli_module.main(["refresh"])

    assert captured == {"force": False, "write_batch_size": None}


def test_invalid_batch_size_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "refresh", lambda **_: None)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["refresh", "--batch-size", "0"])

    assert excinfo.value.code == 2


def test_unknown_category_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["list", "--category", "bakeries"])

    assert excinfo.value.code == 2


def test_runtime_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_refresh(**_: object) -> None:
        raise RuntimeError("network down")

    monkeypatch.setattr(cli_module, "refresh", failing_refresh)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["refresh"])

    assert excinfo.value.code == 1


def test_list_prints_documents(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    requested: list[CategoryFilter] = []

    def fake_list(*, category: CategoryFilter) -> list[object]:
        requested.append(category)
        return [make_establishment("ach-1", name="Café")]

    monkeypatch.setattr(cli_module, "list_establishments", fake_list)

    cli_module.main(["list", "--category", "boucheries"])

    payload = json.loads(capsys.readouterr().out)
    assert requested == [CategoryFilter.BOUCHERIES]
    assert [document["id"] for document in payload] == ["ach-1"]
    assert payload[0]["name"] == "Café"


def test_history_prints_summaries(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    record = ChangelogRecord(
        id=3,
        date="2024-01-01T00:00:00.000Z",
        status=ChangelogStatus.COMPLETED,
        added=[make_establishment("ach-9")],
        stats=ChangelogStats(added=1, total=1),
    )
    monkeypatch.setattr(cli_module, "recent_changelog", lambda *, limit: [record][:limit])

    cli_module.main(["history", "--limit", "1"])

    [summary] = json.loads(capsys.readouterr().out)
    assert summary["id"] == 3
    assert summary["status"] == "completed"
    assert summary["added"] == ["ach-9"]
    assert summary["stats"] == {"added": 1, "removed": 0, "modified": 0, "total": 1}
