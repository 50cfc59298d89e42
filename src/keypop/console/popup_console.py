"""
Interactive popup console built on prompt_toolkit.

`PopupConsole` is both the display surface and the input layer of a
`PopupSession`: each round draws the popup in a small non-fullscreen
Application whose key bindings come from the session's dispatch table, and
exits with the key sequence that was pressed.
"""

import logging
import shutil
import subprocess
from typing import Any, Callable, Dict, List, Optional, Tuple

from prompt_toolkit import prompt
from prompt_toolkit.application import Application
from prompt_toolkit.data_structures import Point
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import ConditionalContainer, HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from keypop.popup.commands import CommandRegistry
from keypop.popup.definition import PopupRegistry, entry_point_name
from keypop.popup.dispatch import QUIT_KEYS, DispatchTable
from keypop.popup.dispatch import Keys as KeySeq
from keypop.popup.renderer import RenderedItem, RenderedPopup
from keypop.popup.session import PopupSession
from keypop.runtime_config import RuntimeConfig

logger = logging.getLogger(__name__)

# Result of one round of the popup application.
_SELECTION = ("<selection>",)


def build_key_bindings(
    table: DispatchTable,
    on_next: Optional[Callable[[], None]] = None,
    on_previous: Optional[Callable[[], None]] = None,
) -> KeyBindings:
    """
    Return KeyBindings that exit the running application with the key
    sequence of every binding in `table`.

    Tab / Shift+Tab move the selection, Enter exits with the selection marker
    and Ctrl+G quits like the quit key.
    """
    kb = KeyBindings()

    def _exit_with(keys: KeySeq) -> Callable[[KeyPressEvent], None]:
        def handler(event: KeyPressEvent) -> None:
            event.app.exit(result=keys)

        return handler

    for keys in table:
        kb.add(*keys)(_exit_with(keys))

    kb.add("c-g")(_exit_with(QUIT_KEYS))
    kb.add("enter")(_exit_with(_SELECTION))

    @kb.add("tab")
    def _(event: KeyPressEvent) -> None:
        """Select the next item."""
        if on_next:
            on_next()
        event.app.invalidate()

    @kb.add("s-tab")
    def _(event: KeyPressEvent) -> None:
        """Select the previous item."""
        if on_previous:
            on_previous()
        event.app.invalidate()

    return kb


def build_help_key_bindings(table: DispatchTable) -> KeyBindings:
    """KeyBindings for reading a help target: any bound sequence, or any key."""
    kb = KeyBindings()

    def _exit_with(keys: KeySeq) -> Callable[[KeyPressEvent], None]:
        def handler(event: KeyPressEvent) -> None:
            event.app.exit(result=keys)

        return handler

    for keys in table:
        kb.add(*keys)(_exit_with(keys))

    @kb.add(Keys.Any)
    def _(event: KeyPressEvent) -> None:
        event.app.exit(result=(event.data,))

    @kb.add("c-g")
    def _(event: KeyPressEvent) -> None:
        event.app.exit(result=None)

    return kb


def open_man_page(page: str) -> None:
    """Show a man page in the terminal."""
    subprocess.run(["man", page], check=False)


class PopupConsole:
    """Display surface and input layer for popup sessions in the terminal."""

    style: Style = Style.from_dict(
        {
            "popup.heading": "bold underline",
            "popup.key": "ansicyan bold",
            "popup.enabled": "ansigreen",
            "popup.disabled": "ansigray",
            "popup.value": "ansiyellow",
            "popup.hint": "ansigray italic",
            "popup.selected": "reverse",
            "popup.message": "ansiyellow",
        }
    )

    def __init__(
        self,
        registry: PopupRegistry,
        commands: CommandRegistry,
        config: Optional[RuntimeConfig] = None,
        help_opener: Callable[[str], None] = open_man_page,
    ) -> None:
        self.registry = registry
        self.commands = commands
        self.config = config or RuntimeConfig()
        self._help_opener = help_opener
        self._fragments: List[Tuple[str, str]] = []
        self._message = ""
        self._focus: Optional[RenderedItem] = None
        self._visible = False
        self._table: Optional[DispatchTable] = None

    # Display surface ---------------------------------------------------

    def save_view(self) -> Any:
        return (list(self._fragments), self._message, self._visible)

    def open(self) -> None:
        self._visible = True
        self._message = ""

    def show(self, rendered: RenderedPopup) -> None:
        self._fragments = rendered.fragments()

    def focus(self, item: Optional[RenderedItem]) -> None:
        self._focus = item

    def message(self, text: str) -> None:
        self._message = text

    def close(self) -> None:
        self._visible = False
        self._fragments = []
        self._focus = None

    def restore_view(self, view: Any) -> None:
        if view is None:
            return
        fragments, message, visible = view
        self._fragments = list(fragments)
        self._message = message
        self._visible = visible

    # Input layer -------------------------------------------------------

    def read_line(self, prompt_text: str) -> Optional[str]:
        """Prompt for a line of text; Ctrl+C / Ctrl+D cancel and return None."""
        try:
            return prompt(prompt_text)
        except (KeyboardInterrupt, EOFError):
            return None

    def read_keys(self, prompt_text: str) -> Optional[KeySeq]:
        if self._table is None:
            return None
        self._message = prompt_text
        try:
            return self._build_application(build_help_key_bindings(self._table)).run()
        except (KeyboardInterrupt, EOFError):
            return None
        finally:
            self._message = ""

    # Application -------------------------------------------------------

    @property
    def width(self) -> int:
        return self.config.width or shutil.get_terminal_size().columns

    def _get_fragments(self) -> FormattedText:
        return FormattedText(self._fragments)

    def _get_message(self) -> FormattedText:
        return FormattedText([("class:popup.message", self._message)])

    def _cursor_position(self) -> Point:
        if self._focus is None:
            return Point(x=0, y=0)
        return Point(x=self._focus.column, y=self._focus.line)

    def _build_application(self, kb: KeyBindings) -> "Application[Any]":
        body = HSplit(
            [
                Window(
                    FormattedTextControl(
                        self._get_fragments,
                        focusable=True,
                        show_cursor=False,
                        get_cursor_position=self._cursor_position,
                    ),
                    dont_extend_height=True,
                ),
                ConditionalContainer(
                    Window(FormattedTextControl(self._get_message), height=1),
                    filter=Condition(lambda: bool(self._message)),
                ),
            ]
        )
        return Application(
            layout=Layout(body),
            key_bindings=kb,
            style=self.style,
            full_screen=False,
            erase_when_done=True,
        )

    def _read_popup_keys(self, session: PopupSession) -> Optional[KeySeq]:
        kb = build_key_bindings(
            session.dispatch_table, session.select_next, session.select_previous
        )
        try:
            return self._build_application(kb).run()
        except (KeyboardInterrupt, EOFError):
            return None

    def run(self, name: str, prefix_arg: Optional[Any] = None) -> Any:
        """
        Open popup `name` and process keys until an action runs or the popup
        is quit. Returns the invoked command's result, if any.
        """
        session = PopupSession(
            self.registry[name],
            self.commands,
            surface=self,
            input_layer=self,
            width=self.width,
            prefix_arg=prefix_arg,
            open_help_resource=self._help_opener,
            show_hint=self.config.show_hint,
        )
        session.open()
        result = None
        while session.is_active:
            self._table = session.dispatch_table
            keys = self._read_popup_keys(session)
            self._message = ""
            if keys is None:
                session.quit()
                break
            if keys == _SELECTION:
                result = session.activate_selection()
                continue
            if tuple(keys) not in session.dispatch_table:
                logger.debug("Ignoring unbound keys %r", keys)
                continue
            result = session.press(keys)
        return result


def popup_entry_point(
    name: str,
    registry: PopupRegistry,
    commands: CommandRegistry,
    config: Optional[RuntimeConfig] = None,
) -> Callable[..., Any]:
    """Return an `open_<name>` function that runs popup `name` interactively."""

    def open_popup(prefix_arg: Optional[Any] = None) -> Any:
        return PopupConsole(registry, commands, config).run(name, prefix_arg)

    open_popup.__name__ = registry[name].entry_point or entry_point_name(name)
    open_popup.__qualname__ = open_popup.__name__
    open_popup.__doc__ = f"Open the {name} popup."
    return open_popup


def entry_points(
    registry: PopupRegistry,
    commands: CommandRegistry,
    config: Optional[RuntimeConfig] = None,
) -> Dict[str, Callable[..., Any]]:
    """Callables for every entry point recorded in `registry`, by entry point name."""
    return {
        entry: popup_entry_point(name, registry, commands, config)
        for entry, name in registry.entry_points().items()
    }
