"""
Popup sessions.

A session owns the argument state of one open popup, reacts to key presses
through the popup's dispatch table and, when an action fires, tears the
popup down before handing the flattened arguments to the command layer.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Sequence

from keypop.errors import NoHelpResource, UnboundHelpTarget
from keypop.popup.arguments import ArgumentState
from keypop.popup.commands import CommandRegistry, Invocation
from keypop.popup.definition import PopupDefinition
from keypop.popup.dispatch import (
    HELP_KEYS,
    DispatchTable,
    Keys,
    build_dispatch_table,
    format_keys,
)
from keypop.popup.effects import (
    Effect,
    InvokeAction,
    Quit,
    SetOption,
    ShowHelp,
    ToggleSwitch,
)
from keypop.popup.renderer import (
    RenderedItem,
    RenderedPopup,
    Selection,
    render_popup,
)

logger = logging.getLogger(__name__)


class DisplaySurface(Protocol):
    """Where a session draws itself."""

    def save_view(self) -> Any: ...

    def open(self) -> None: ...

    def show(self, rendered: RenderedPopup) -> None: ...

    def focus(self, item: Optional[RenderedItem]) -> None: ...

    def message(self, text: str) -> None: ...

    def close(self) -> None: ...

    def restore_view(self, view: Any) -> None: ...


class InputLayer(Protocol):
    """Blocking reads used while a session is open."""

    def read_line(self, prompt: str) -> Optional[str]: ...

    def read_keys(self, prompt: str) -> Optional[Keys]: ...


class SessionState(str, Enum):
    """Lifecycle of a popup session."""

    idle = "idle"
    active = "active"
    dispatching = "dispatching"
    closed = "closed"


class SessionError(RuntimeError):
    pass


def option_prompt(argument_id: str) -> str:
    return f"{argument_id.rstrip('=')}: "


class PopupSession:
    """One open popup: argument state, key handling and action dispatch."""

    def __init__(
        self,
        definition: PopupDefinition,
        commands: CommandRegistry,
        surface: DisplaySurface,
        input_layer: InputLayer,
        width: int = 80,
        prefix_arg: Optional[Any] = None,
        open_help_resource: Optional[Callable[[str], None]] = None,
        show_hint: bool = True,
    ) -> None:
        self.definition = definition
        self.commands = commands
        self.surface = surface
        self.input_layer = input_layer
        self.width = width
        self.prefix_arg = prefix_arg
        self.show_hint = show_hint
        self.arguments = ArgumentState()
        self.state = SessionState.idle
        self.selected: Optional[Selection] = None
        self.rendered: Optional[RenderedPopup] = None
        self.last_invocation: Optional[Invocation] = None
        self._open_help_resource = open_help_resource
        self._saved_view: Any = None
        self._table: Optional[DispatchTable] = None

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.active

    @property
    def dispatch_table(self) -> DispatchTable:
        """Current bindings; rebuilt whenever the definition has changed."""
        if self._table is None or self._table.revision != self.definition.revision:
            self._table = build_dispatch_table(self.definition)
        return self._table

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            raise SessionError(
                f"Popup {self.definition.name} is {self.state.value}, "
                f"expected {' or '.join(s.value for s in states)}"
            )

    def open(self) -> RenderedPopup:
        self._require(SessionState.idle)
        logger.info("Opening popup %s", self.definition.name)
        self._saved_view = self.surface.save_view()
        self.surface.open()
        self.state = SessionState.active
        return self.redraw()

    def redraw(self) -> RenderedPopup:
        self.rendered = render_popup(
            self.definition,
            self.arguments,
            width=self.width,
            selected=self.selected,
            show_hint=self.show_hint,
        )
        self.selected = self.rendered.selected
        self.surface.show(self.rendered)
        self.surface.focus(self.rendered.item(self.selected))
        return self.rendered

    def press(self, keys: Sequence[str]) -> Any:
        """
        Handle a key sequence.

        Returns the command's result when an action was invoked, otherwise
        None. Raises KeyError for keys the dispatch table does not bind.
        """
        self._require(SessionState.active)
        effect = self.dispatch_table[tuple(keys)]
        logger.debug("Key %s -> %r", format_keys(tuple(keys)), effect)
        return self.apply(effect)

    def apply(self, effect: Effect) -> Any:
        match effect:
            case ToggleSwitch(argument_id=argument_id):
                self.arguments.toggle(argument_id)
                self.redraw()
            case SetOption(argument_id=argument_id, value_reader=reader):
                read = reader or self.input_layer.read_line
                raw = read(option_prompt(argument_id))
                self.arguments.set_option(argument_id, raw)
                self.redraw()
            case InvokeAction(command_id=command_id):
                return self.invoke(command_id)
            case ShowHelp():
                self.show_help()
            case Quit():
                self.quit()
            case _:
                logger.warning("Unhandled effect in popup: %r", effect)
        return None

    def help_prompt(self) -> str:
        if self.definition.man_page:
            return f"Enter command prefix, `?' for man `{self.definition.man_page}': "
        return "Enter command prefix: "

    def show_help(self) -> None:
        """Read a target key sequence and show its help; misses are reported."""
        target = self.input_layer.read_keys(self.help_prompt())
        if target is None:
            return
        try:
            doc = self.help(target)
        except (UnboundHelpTarget, NoHelpResource) as e:
            logger.info("Help lookup failed: %s", e)
            self.surface.message(str(e))
            return
        if doc:
            self.surface.message(doc)

    def help(self, target: Sequence[str]) -> Optional[str]:
        """
        Resolve a help target.

        Returns the documentation of the action bound to `target`. The help
        key itself opens the popup's man page and returns None.

        Raises:
            NoHelpResource: The help key was given but the popup has no man page.
            UnboundHelpTarget: `target` is not bound to an action.
        """
        keys: Keys = tuple(target)
        if keys == HELP_KEYS:
            page = self.definition.man_page
            if not page:
                raise NoHelpResource(self.definition.name)
            if self._open_help_resource is not None:
                self._open_help_resource(page)
            else:
                self.surface.message(f"See `man {page}'")
            return None
        action = self.dispatch_table.action_for(keys)
        if action is None:
            raise UnboundHelpTarget(format_keys(keys))
        return self.commands.describe(action.command_id)

    def invoke(self, command_id: str) -> Any:
        """
        Run an action: flatten the arguments, close the popup, then call the
        command. The popup is already gone by the time the command runs.
        """
        self._require(SessionState.active)
        self.state = SessionState.dispatching
        invocation = Invocation(
            command_id=command_id,
            arguments=tuple(self.arguments.flatten()),
            prefix_arg=self.prefix_arg,
        )
        self.last_invocation = invocation
        self._teardown()
        return self.commands.call(command_id, invocation)

    def quit(self) -> None:
        self._require(SessionState.active)
        logger.info("Quit popup %s", self.definition.name)
        self._teardown()

    def _teardown(self) -> None:
        self.surface.close()
        self.surface.restore_view(self._saved_view)
        self._saved_view = None
        self.arguments = ArgumentState()
        self.rendered = None
        self.state = SessionState.closed

    def _items(self) -> List[RenderedItem]:
        return self.rendered.items if self.rendered else []

    def _move_selection(self, step: int) -> None:
        items = self._items()
        if not items:
            return
        current = self.rendered.item(self.selected) if self.rendered else None
        index = items.index(current) if current in items else -step
        self.selected = items[(index + step) % len(items)].selection
        self.redraw()

    def select_next(self) -> None:
        self._move_selection(1)

    def select_previous(self) -> None:
        self._move_selection(-1)

    def activate_selection(self) -> Any:
        """Run the effect of the highlighted item, as if its keys were pressed."""
        item = self.rendered.item(self.selected) if self.rendered else None
        if item is None:
            return None
        return self.press(item.keys)
