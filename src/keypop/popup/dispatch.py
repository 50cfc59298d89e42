"""
Derive the key -> effect table of a popup.
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from keypop.popup.categories import CATEGORIES, CategoryDescriptor
from keypop.popup.definition import PopupDefinition
from keypop.popup.effects import Effect, InvokeAction, Quit, ShowHelp
from keypop.popup.entries import Entry

logger = logging.getLogger(__name__)

Keys = Tuple[str, ...]

HELP_KEYS: Keys = ("?",)
QUIT_KEYS: Keys = ("q",)


def format_keys(keys: Keys) -> str:
    return "".join(keys)


class DispatchTable(Mapping[Keys, Effect]):
    """Read-only mapping from key sequences to effects, built for one revision."""

    def __init__(
        self,
        bindings: Dict[Keys, Effect],
        entries: Dict[Keys, Tuple[CategoryDescriptor, Entry]],
        revision: int,
    ) -> None:
        self._bindings = bindings
        self._entries = entries
        self.revision = revision

    def __getitem__(self, keys: Keys) -> Effect:
        return self._bindings[keys]

    def __iter__(self) -> Iterator[Keys]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def entry_for(self, keys: Keys) -> Optional[Tuple[CategoryDescriptor, Entry]]:
        """The definition entry bound to `keys`, if the binding came from one."""
        return self._entries.get(keys)

    def action_for(self, keys: Keys) -> Optional[InvokeAction]:
        effect = self._bindings.get(keys)
        return effect if isinstance(effect, InvokeAction) else None

    def prefixes(self) -> Set[str]:
        """First keys of multi-key sequences."""
        return {keys[0] for keys in self._bindings if len(keys) > 1}

    def key_sequences(self) -> List[Keys]:
        return list(self._bindings)


def build_dispatch_table(definition: PopupDefinition) -> DispatchTable:
    """
    Build the dispatch table for `definition`.

    Switch and option keys are the category prefix followed by the trigger;
    action keys are the bare trigger. The help and quit keys are always bound
    and take precedence over any action using the same trigger.
    """
    bindings: Dict[Keys, Effect] = {}
    entries: Dict[Keys, Tuple[CategoryDescriptor, Entry]] = {}
    reserved = (HELP_KEYS, QUIT_KEYS)

    for descriptor in CATEGORIES:
        for entry in definition.entries(descriptor):
            keys = descriptor.keys(entry.trigger)
            if keys in reserved:
                logger.warning(
                    "Popup %s: %s trigger %r shadowed by a fixed binding",
                    definition.name,
                    descriptor.name,
                    entry.trigger,
                )
                continue
            bindings[keys] = descriptor.effect(entry)
            entries[keys] = (descriptor, entry)

    bindings[HELP_KEYS] = ShowHelp()
    bindings[QUIT_KEYS] = Quit()

    logger.debug(
        "Built dispatch table for %s (revision %d, %d bindings)",
        definition.name,
        definition.revision,
        len(bindings),
    )
    return DispatchTable(bindings, entries, definition.revision)
