"""
Entry types held by a popup definition.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

# Reads a value for an option; returns None when the prompt was cancelled.
ValueReader = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Switch:
    """A boolean argument toggled by its trigger."""

    trigger: str
    description: str
    argument_id: str

    @property
    def identity(self) -> str:
        return self.argument_id


@dataclass(frozen=True)
class Option:
    """A string argument whose value is read through a prompt."""

    trigger: str
    description: str
    argument_id: str
    value_reader: Optional[ValueReader] = None

    @property
    def identity(self) -> str:
        return self.argument_id


@dataclass(frozen=True)
class Action:
    """A command invoked with the accumulated argument tokens."""

    trigger: str
    description: str
    command_id: str

    @property
    def identity(self) -> str:
        return self.command_id


Entry = Union[Switch, Option, Action]
