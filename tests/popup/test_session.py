import pytest
from conftest import FakeInput, FakeSurface, RecordingCommand

from keypop.errors import NoHelpResource, UnboundHelpTarget
from keypop.popup.commands import CommandRegistry, current_arguments
from keypop.popup.definition import PopupRegistry
from keypop.popup.renderer import USAGE_HINT
from keypop.popup.session import PopupSession, SessionError, SessionState


def make_session(
    registry: PopupRegistry,
    commands: CommandRegistry,
    surface: FakeSurface,
    input_layer: FakeInput = None,
    **kwargs,
) -> PopupSession:
    return PopupSession(
        registry["commit"],
        commands,
        surface=surface,
        input_layer=input_layer or FakeInput(),
        **kwargs,
    )


def test_open_renders_and_activates(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    assert session.state == SessionState.idle

    session.open()

    assert session.state == SessionState.active
    assert surface.events[:3] == ["save_view", "open", "show"]
    assert surface.rendered is session.rendered
    assert surface.focused.identity == "doCommit"


def test_open_twice_is_an_error(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    with pytest.raises(SessionError):
        session.open()


def test_end_to_end_commit(registry, commands, surface, do_commit) -> None:
    seen_during_call = []
    record = do_commit.__call__

    def checking_command(invocation):
        seen_during_call.append(
            (surface.is_open, session.state, current_arguments())
        )
        return record(invocation)

    commands.register("doCommit", checking_command)
    input_layer = FakeInput(lines=["hello"])
    session = make_session(registry, commands, surface, input_layer)
    session.open()

    session.press(("-", "v"))
    assert session.arguments.items() == [("--verbose", True)]

    session.press(("=", "m"))
    assert input_layer.prompts == ["--message: "]
    assert session.arguments.items() == [("--verbose", True), ("--message=", "hello")]

    result = session.press(("c",))

    assert result == "committed"
    assert [(i.command_id, i.arguments) for i in do_commit.invocations] == [
        ("doCommit", ("--verbose", "--message=hello"))
    ]
    assert seen_during_call == [
        (False, SessionState.closed, ("--verbose", "--message=hello"))
    ]
    assert current_arguments() == ()
    assert session.state == SessionState.closed


def test_popup_is_torn_down_before_the_command_runs(
    registry, commands, surface
) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.press(("c",))

    tail = surface.events[-3:]
    assert tail == ["close", ("restore_view", "previous-view"), "command"]


def test_argument_state_is_discarded_after_dispatch(
    registry, commands, surface
) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.press(("-", "v"))
    session.press(("c",))
    assert len(session.arguments) == 0
    assert session.last_invocation.arguments == ("--verbose",)


def test_failing_command_leaves_no_popup(registry, surface) -> None:
    commands = CommandRegistry()

    def broken(invocation):
        raise RuntimeError("git exploded")

    commands.register("doCommit", broken)
    session = make_session(registry, commands, surface)
    session.open()
    with pytest.raises(RuntimeError):
        session.press(("c",))
    assert not surface.is_open
    assert session.state == SessionState.closed
    assert current_arguments() == ()


def test_toggle_rerenders(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    shows = surface.events.count("show")
    session.press(("-", "v"))
    session.press(("-", "v"))
    session.press(("-", "v"))
    assert surface.events.count("show") == shows + 3
    assert session.arguments.get("--verbose") is True


def test_cancelled_option_prompt_clears_value(registry, commands, surface) -> None:
    session = make_session(
        registry, commands, surface, FakeInput(lines=["hello", None, "  "])
    )
    session.open()
    session.press(("=", "m"))
    assert session.arguments.get("--message=") == "hello"
    session.press(("=", "m"))
    assert "--message=" not in session.arguments
    session.press(("=", "m"))
    assert session.arguments.get("--message=") == ""
    session.press(("c",))
    assert session.last_invocation.arguments == ()


def test_option_uses_its_own_reader(registry, commands, surface) -> None:
    prompts = []

    def reader(prompt):
        prompts.append(prompt)
        return "jane"

    registry.insert_option("commit", "A", "author", "--author=", reader)
    input_layer = FakeInput()
    session = make_session(registry, commands, surface, input_layer)
    session.open()
    session.press(("=", "A"))
    assert prompts == ["--author: "]
    assert input_layer.prompts == []
    assert session.arguments.get("--author=") == "jane"


def test_quit_closes_without_command(registry, commands, surface, do_commit) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.press(("-", "v"))
    session.press(("q",))
    assert session.state == SessionState.closed
    assert do_commit.invocations == []
    assert surface.events[-2:] == ["close", ("restore_view", "previous-view")]


def test_press_after_close_is_an_error(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.quit()
    with pytest.raises(SessionError):
        session.press(("-", "v"))


def test_unbound_keys_raise_key_error(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    with pytest.raises(KeyError):
        session.press(("z",))
    assert session.is_active


def test_help_returns_action_documentation(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.press(("-", "v"))

    doc = session.help(("c",))

    assert doc == "doCommit: Commit the staged changes."
    assert session.is_active
    assert session.arguments.items() == [("--verbose", True)]


def test_help_key_shows_documentation(registry, commands, surface) -> None:
    input_layer = FakeInput(keys=[("c",)])
    session = make_session(registry, commands, surface, input_layer)
    session.open()
    session.press(("?",))
    assert surface.messages == ["doCommit: Commit the staged changes."]
    assert input_layer.prompts == ["Enter command prefix: "]
    assert session.is_active


def test_help_for_unbound_target(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface, FakeInput(keys=[("-", "v")]))
    session.open()
    with pytest.raises(UnboundHelpTarget):
        session.help(("x",))
    session.press(("?",))
    assert surface.messages == ["No help associated with `-v'"]
    assert session.is_active


def test_help_resource_without_man_page(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface, FakeInput(keys=[("?",)]))
    session.open()
    with pytest.raises(NoHelpResource):
        session.help(("?",))
    session.press(("?",))
    assert surface.messages == ["No man page associated with `commit'"]
    assert session.is_active


def test_help_resource_opens_man_page(registry, commands, surface) -> None:
    registry["commit"].man_page = "git-commit"
    opened = []
    input_layer = FakeInput(keys=[("?",)])
    session = make_session(
        registry, commands, surface, input_layer, open_help_resource=opened.append
    )
    session.open()
    session.press(("?",))
    assert opened == ["git-commit"]
    assert input_layer.prompts == ["Enter command prefix, `?' for man `git-commit': "]
    assert surface.messages == []
    assert session.is_active


def test_cancelled_help_does_nothing(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface, FakeInput(keys=[None]))
    session.open()
    session.press(("?",))
    assert surface.messages == []
    assert session.is_active


def test_dispatch_table_follows_definition_changes(
    registry, commands, surface
) -> None:
    commands.register("doAmend", RecordingCommand())
    session = make_session(registry, commands, surface)
    session.open()
    assert ("a",) not in session.dispatch_table

    registry.insert_action("commit", "a", "amend", "doAmend")

    assert ("a",) in session.dispatch_table
    session.press(("a",))
    assert session.last_invocation.command_id == "doAmend"


def test_selection_survives_rerender(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    assert session.selected == ("actions", "doCommit")

    session.select_next()
    assert session.selected == ("switches", "--verbose")
    session.press(("-", "v"))
    assert session.selected == ("switches", "--verbose")
    assert surface.focused.identity == "--verbose"

    session.select_previous()
    assert session.selected == ("actions", "doCommit")


def test_selection_falls_back_to_first_action(registry, commands, surface) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.select_next()
    assert session.selected == ("switches", "--verbose")

    registry.remove("commit", "switches", "v")
    session.redraw()
    assert session.selected == ("actions", "doCommit")


def test_activate_selection_runs_the_item(registry, commands, surface, do_commit) -> None:
    session = make_session(registry, commands, surface)
    session.open()
    session.select_next()
    session.activate_selection()
    assert session.arguments.get("--verbose") is True

    session.select_previous()
    assert session.activate_selection() == "committed"
    assert do_commit.invocations[0].arguments == ("--verbose",)


def test_prefix_argument_is_passed_through(registry, commands, surface, do_commit) -> None:
    session = make_session(registry, commands, surface, prefix_arg=4)
    session.open()
    session.press(("c",))
    assert do_commit.invocations[0].prefix_arg == 4


def test_usage_hint_can_be_hidden(registry, commands, surface) -> None:
    shown = make_session(registry, commands, surface).open()
    hidden = make_session(registry, commands, FakeSurface(), show_hint=False).open()

    assert USAGE_HINT in shown.text()
    assert USAGE_HINT not in hidden.text()
    assert hidden.text() == shown.text().split(USAGE_HINT)[0].rstrip("\n")
