import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pytest

from keypop.popup.commands import CommandRegistry, Invocation
from keypop.popup.definition import PopupRegistry
from keypop.popup.renderer import RenderedItem, RenderedPopup

# Keep the log file of the CLI (configured at import time) out of the home dir.
os.environ.setdefault(
    "KEYPOP_LOG_FILE", str(Path(tempfile.mkdtemp(prefix="keypop-tests-")) / "keypop.log")
)


class FakeSurface:
    """Display surface that records what the session asks of it."""

    def __init__(self) -> None:
        self.events: List[Any] = []
        self.rendered: Optional[RenderedPopup] = None
        self.focused: Optional[RenderedItem] = None
        self.messages: List[str] = []
        self.is_open = False

    def save_view(self) -> Any:
        self.events.append("save_view")
        return "previous-view"

    def open(self) -> None:
        self.events.append("open")
        self.is_open = True

    def show(self, rendered: RenderedPopup) -> None:
        self.events.append("show")
        self.rendered = rendered

    def focus(self, item: Optional[RenderedItem]) -> None:
        self.focused = item

    def message(self, text: str) -> None:
        self.messages.append(text)

    def close(self) -> None:
        self.events.append("close")
        self.is_open = False

    def restore_view(self, view: Any) -> None:
        self.events.append(("restore_view", view))


class FakeInput:
    """Input layer returning canned lines and key sequences."""

    def __init__(
        self,
        lines: Sequence[Optional[str]] = (),
        keys: Sequence[Optional[Sequence[str]]] = (),
    ) -> None:
        self.lines = list(lines)
        self.keys = list(keys)
        self.prompts: List[str] = []

    def read_line(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self.lines.pop(0)

    def read_keys(self, prompt: str) -> Optional[tuple]:
        self.prompts.append(prompt)
        keys = self.keys.pop(0)
        return tuple(keys) if keys is not None else None


class RecordingCommand:
    """Commit the staged changes."""

    def __init__(self, surface: Optional[FakeSurface] = None) -> None:
        self.surface = surface
        self.invocations: List[Invocation] = []

    def __call__(self, invocation: Invocation) -> str:
        self.invocations.append(invocation)
        if self.surface is not None:
            self.surface.events.append("command")
        return "committed"


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def registry() -> PopupRegistry:
    registry = PopupRegistry()
    registry.define_popup(
        "commit",
        switches=[("v", "verbose", "--verbose")],
        options=[("m", "message", "--message=")],
        actions=[("c", "commit", "doCommit")],
    )
    return registry


@pytest.fixture
def do_commit(surface: FakeSurface) -> RecordingCommand:
    return RecordingCommand(surface)


@pytest.fixture
def commands(do_commit: RecordingCommand) -> CommandRegistry:
    commands = CommandRegistry()
    commands.register("doCommit", do_commit)
    return commands
