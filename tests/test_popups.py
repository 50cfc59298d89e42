import pytest
from conftest import FakeInput, FakeSurface
from rich.console import Console

import keypop.console.rendering as rendering
import keypop.popups as popups_module
from keypop.popup.dispatch import build_dispatch_table
from keypop.popup.session import PopupSession
from keypop.popups import build_commands, build_entry_points, build_registry


@pytest.fixture
def console(monkeypatch: pytest.MonkeyPatch) -> Console:
    console = Console(record=True, width=80)
    monkeypatch.setattr(rendering, "console", console)
    return console


def test_every_action_has_a_command() -> None:
    registry = build_registry()
    commands = build_commands()
    for name in registry:
        popup = registry[name]
        assert popup.man_page
        for action in popup.actions:
            assert action.command_id in commands, (name, action.command_id)


def test_builtin_popups_bind_no_reserved_keys() -> None:
    registry = build_registry()
    for name in registry:
        table = build_dispatch_table(registry[name])
        bound = {table.action_for(keys) for keys in table} - {None}
        assert {a.command_id for a in bound} == {
            a.command_id for a in registry[name].actions
        }


def test_git_command_prints_and_returns_argv(console: Console) -> None:
    registry = build_registry()
    surface = FakeSurface()
    session = PopupSession(
        registry["committing"],
        build_commands(),
        surface=surface,
        input_layer=FakeInput(lines=["fix typo"]),
    )
    session.open()
    session.press(("-", "a"))
    session.press(("=", "m"))

    argv = session.press(("c",))

    assert argv == ["git", "commit", "--all", "--message=fix typo"]
    assert console.export_text().strip() == "$ git commit --all '--message=fix typo'"


def test_command_docs_come_from_the_table() -> None:
    commands = build_commands()
    assert commands.describe("git-pull") == "git-pull: Pull from the upstream branch."


def test_read_path_cancel(monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(prompt_text: str, **kwargs: object) -> str:
        raise EOFError

    monkeypatch.setattr(popups_module, "prompt", interrupted)
    assert popups_module.read_path("--relative: ") is None


def test_relative_option_reads_a_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        popups_module, "prompt", lambda prompt_text, **kwargs: "src/keypop"
    )
    session = PopupSession(
        build_registry()["logging"],
        build_commands(),
        surface=FakeSurface(),
        input_layer=FakeInput(),
    )
    session.open()
    session.press(("=", "r"))
    assert session.arguments.get("--relative=") == "src/keypop"


def test_every_builtin_popup_has_an_entry_point() -> None:
    registry = build_registry()
    points = build_entry_points()

    assert set(points) == {f"open_{name}" for name in registry}
    for entry, func in points.items():
        assert func.__name__ == entry
        assert registry.entry_points()[entry] in registry
