"""
Category descriptors.

Switches, options and actions share one dispatch and render skeleton; each
category is described by a `CategoryDescriptor` holding its prefix glyph,
heading, column mode, item formatter and bound-effect constructor.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple, Type, Union

from keypop.errors import UnknownCategory
from keypop.popup.arguments import ArgumentState
from keypop.popup.effects import Effect, InvokeAction, SetOption, ToggleSwitch
from keypop.popup.entries import Action, Entry, Option, Switch

Fragment = Tuple[str, str]

STYLE_HEADING = "class:popup.heading"
STYLE_KEY = "class:popup.key"
STYLE_DESCRIPTION = "class:popup.description"
STYLE_ENABLED = "class:popup.enabled"
STYLE_DISABLED = "class:popup.disabled"
STYLE_VALUE = "class:popup.value"
STYLE_HINT = "class:popup.hint"


def _state_style(state: ArgumentState, argument_id: str) -> str:
    return STYLE_ENABLED if state.is_enabled(argument_id) else STYLE_DISABLED


def format_switch(
    descriptor: "CategoryDescriptor", entry: Switch, state: ArgumentState
) -> List[Fragment]:
    return [
        (STYLE_KEY, descriptor.glyph(entry.trigger)),
        ("", " "),
        (STYLE_DESCRIPTION, entry.description),
        ("", " ("),
        (_state_style(state, entry.argument_id), entry.argument_id),
        ("", ")"),
    ]


def format_option(
    descriptor: "CategoryDescriptor", entry: Option, state: ArgumentState
) -> List[Fragment]:
    fragments: List[Fragment] = [
        (STYLE_KEY, descriptor.glyph(entry.trigger)),
        ("", " "),
        (STYLE_DESCRIPTION, entry.description),
        ("", " ("),
        (_state_style(state, entry.argument_id), entry.argument_id),
    ]
    value = state.get(entry.argument_id)
    if isinstance(value, str) and value:
        fragments.append((STYLE_VALUE, f'"{value}"'))
    fragments.append(("", ")"))
    return fragments


def format_action(
    descriptor: "CategoryDescriptor", entry: Action, state: ArgumentState
) -> List[Fragment]:
    return [
        (STYLE_KEY, descriptor.glyph(entry.trigger)),
        ("", " "),
        (STYLE_DESCRIPTION, entry.description),
    ]


@dataclass(frozen=True)
class CategoryDescriptor:
    """Describes how one category of popup entries behaves."""

    name: str
    heading: str
    prefix: str
    entry_type: Type[Entry]
    single_column: bool
    formatter: Callable[..., List[Fragment]]
    effect: Callable[..., Effect]

    def glyph(self, trigger: str) -> str:
        return f"{self.prefix}{trigger}"

    def keys(self, trigger: str) -> Tuple[str, ...]:
        """Key sequence that activates `trigger` in this category."""
        if self.prefix:
            return (self.prefix, trigger)
        return (trigger,)

    def format(self, entry: Entry, state: ArgumentState) -> List[Fragment]:
        return self.formatter(self, entry, state)


SWITCHES = CategoryDescriptor(
    name="switches",
    heading="Switches",
    prefix="-",
    entry_type=Switch,
    single_column=True,
    formatter=format_switch,
    effect=lambda entry: ToggleSwitch(entry.argument_id),
)

OPTIONS = CategoryDescriptor(
    name="options",
    heading="Options",
    prefix="=",
    entry_type=Option,
    single_column=True,
    formatter=format_option,
    effect=lambda entry: SetOption(entry.argument_id, entry.value_reader),
)

ACTIONS = CategoryDescriptor(
    name="actions",
    heading="Actions",
    prefix="",
    entry_type=Action,
    single_column=False,
    formatter=format_action,
    effect=lambda entry: InvokeAction(entry.command_id, entry.description),
)

# Fixed render and dispatch order.
CATEGORIES: Tuple[CategoryDescriptor, ...] = (SWITCHES, OPTIONS, ACTIONS)

_BY_NAME: Dict[str, CategoryDescriptor] = {c.name: c for c in CATEGORIES}


def get_category(category: Union[str, CategoryDescriptor]) -> CategoryDescriptor:
    """Resolve a category name; raises UnknownCategory for anything else."""
    if isinstance(category, CategoryDescriptor):
        return category
    try:
        return _BY_NAME[category]
    except (KeyError, TypeError):
        raise UnknownCategory(str(category)) from None
