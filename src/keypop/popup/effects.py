"""
Effects bound to keys in a popup's dispatch table.
"""

from dataclasses import dataclass
from typing import Optional, Union

from keypop.popup.entries import ValueReader


@dataclass(frozen=True)
class ToggleSwitch:
    argument_id: str


@dataclass(frozen=True)
class SetOption:
    argument_id: str
    value_reader: Optional[ValueReader] = None


@dataclass(frozen=True)
class InvokeAction:
    command_id: str
    description: str = ""


@dataclass(frozen=True)
class ShowHelp:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[ToggleSwitch, SetOption, InvokeAction, ShowHelp, Quit]
