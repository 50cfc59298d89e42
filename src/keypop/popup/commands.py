"""
Command layer: resolves command ids to callables and runs them with the
argument tokens of a popup session.

While a command runs, its tokens are also readable through
`current_arguments()`. The value is scoped to the single call and reset once
the call returns or raises.
"""

import inspect
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple

from keypop.errors import UnknownCommand

logger = logging.getLogger(__name__)

_current_arguments: ContextVar[Tuple[str, ...]] = ContextVar(
    "keypop_current_arguments", default=()
)


@dataclass(frozen=True)
class Invocation:
    """
    What a command receives when an action fires.

    Attributes:
        command_id: The id the action was bound to.
        arguments: Flattened argument tokens, in the order they were set.
        prefix_arg: Prefix argument the popup was opened with, if any.
    """

    command_id: str
    arguments: Tuple[str, ...] = ()
    prefix_arg: Optional[Any] = None


CommandFunc = Callable[[Invocation], Any]


def current_arguments() -> Tuple[str, ...]:
    """Tokens of the command invocation in progress, or () outside one."""
    return _current_arguments.get()


@contextmanager
def invocation_scope(arguments: Sequence[str]) -> Iterator[Tuple[str, ...]]:
    token = _current_arguments.set(tuple(arguments))
    try:
        yield _current_arguments.get()
    finally:
        _current_arguments.reset(token)


class CommandRegistry:
    """Maps command ids to callables taking an `Invocation`."""

    def __init__(self) -> None:
        self._commands: Dict[str, CommandFunc] = {}

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._commands

    def register(self, command_id: str, func: CommandFunc) -> CommandFunc:
        self._commands[command_id] = func
        return func

    def command(self, command_id: str) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator form of `register`."""

        def decorator(func: CommandFunc) -> CommandFunc:
            return self.register(command_id, func)

        return decorator

    def resolve(self, command_id: str) -> CommandFunc:
        try:
            return self._commands[command_id]
        except KeyError:
            raise UnknownCommand(command_id) from None

    def describe(self, command_id: str) -> str:
        """Documentation of a command, taken from its docstring."""
        func = self.resolve(command_id)
        doc = inspect.getdoc(func)
        return f"{command_id}: {doc}" if doc else f"{command_id}: No description available"

    def call(self, command_id: str, invocation: Invocation) -> Any:
        func = self.resolve(command_id)
        logger.info("Invoking %s with %s", command_id, list(invocation.arguments))
        with invocation_scope(invocation.arguments):
            return func(invocation)
