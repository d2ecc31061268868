from __future__ import annotations

import pytest

from labelsync.domain.data_integration import PullResult
from labelsync.domain.membership import Group
from labelsync.ui import cli as cli_module
from tests.helpers.registry import make_entity


def test_pull_command_prints_new_groups(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_pull(**kwargs: object) -> PullResult:
        captured.update(kwargs)
        return PullResult(fetched=3, stored=2, skipped_empty=1, discovered_groups=["Night"])

    monkeypatch.setattr(cli_module, "pull_registry", fake_pull)

    cli_module.main(["pull", "--page-size", "50"])

    assert captured["page_size"] == 50
    assert "new group: Night" in capsys.readouterr().out


def test_allocate_command_prints_slots(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_preview(count: int, **kwargs: object) -> list[str]:
        captured["count"] = count
        captured.update(kwargs)
        return ["POOL-0003", "POOL-0004"]

    monkeypatch.setattr(cli_module, "preview_allocation", fake_preview)

    cli_module.main(["allocate", "2", "--prefer", "POOL-0003"])

    assert captured == {"count": 2, "preferred_ids": ["POOL-0003"]}
    assert capsys.readouterr().out.split() == ["POOL-0003", "POOL-0004"]


def test_groups_command_lists_groups(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    member = make_entity()
    group = Group(name="Night_Shift", display_name="Night Shift", members=(member,))
    monkeypatch.setattr(cli_module, "list_groups", lambda: [group])

    cli_module.main(["groups"])

    assert capsys.readouterr().out == "Night Shift\t1\n"


@pytest.mark.parametrize("argv", [[], ["allocate", "0"], ["allocate", "many"], ["unknown"]])
def test_invalid_arguments_exit_with_code_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_runtime_errors_exit_with_code_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_pull(**_: object) -> PullResult:
        raise RuntimeError("registry down")

    monkeypatch.setattr(cli_module, "pull_registry", failing_pull)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["pull"])

    assert excinfo.value.code == 1
