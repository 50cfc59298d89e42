"""
Popup definitions and the store that holds them.

A popup owns three ordered collections (switches, options, actions). Every
trigger is unique within its collection: defining an existing trigger
replaces the entry where it stands unless an explicit anchor moves it.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from keypop.errors import EntryTypeMismatch, UnknownPopup
from keypop.popup.categories import (
    ACTIONS,
    OPTIONS,
    SWITCHES,
    CategoryDescriptor,
    get_category,
)
from keypop.popup.entries import Action, Entry, Option, Switch, ValueReader

logger = logging.getLogger(__name__)

CategoryRef = Union[str, CategoryDescriptor]


def entry_point_name(popup: str) -> str:
    return f"open_{popup}"


@dataclass
class PopupDefinition:
    """
    A named popup and its entries.

    Attributes:
        name: Popup name, also used for its entry point.
        switches: Ordered switch entries.
        options: Ordered option entries.
        actions: Ordered action entries.
        man_page: External help resource shown by the help lookup, if any.
        entry_point: Name of the `open_<name>` entry point, set by bulk definition.
        revision: Bumped on every mutation so derived tables can be rebuilt.
    """

    name: str
    switches: List[Switch] = field(default_factory=list)
    options: List[Option] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    man_page: Optional[str] = None
    entry_point: Optional[str] = None
    revision: int = 0

    def entries(self, category: CategoryRef) -> List[Entry]:
        return getattr(self, get_category(category).name)

    def find(self, category: CategoryRef, trigger: str) -> Optional[Entry]:
        for entry in self.entries(category):
            if entry.trigger == trigger:
                return entry
        return None

    def _index(self, entries: Sequence[Entry], trigger: Optional[str]) -> int:
        if trigger is None:
            return -1
        for i, entry in enumerate(entries):
            if entry.trigger == trigger:
                return i
        return -1

    def _touch(self) -> None:
        self.revision += 1

    def define(
        self,
        category: CategoryRef,
        trigger: str,
        payload: Union[Entry, Sequence[object]],
        anchor: Optional[str] = None,
        prepend: bool = False,
    ) -> Entry:
        """
        Insert or replace the entry for `trigger`.

        Args:
            category: "switches", "options" or "actions".
            trigger: Single trigger character.
            payload: An entry instance, or the entry fields after the trigger
                (description, argument id / command id, [value reader]).
            anchor: Trigger of an existing entry to place the new one next to.
            prepend: Place before the anchor (or at the front when there is
                no anchor) instead of after it.

        Raises:
            UnknownCategory: `category` is not a known collection.
            EntryTypeMismatch: `payload` is an entry of another category.
        """
        descriptor = get_category(category)
        if isinstance(payload, descriptor.entry_type):
            entry = dataclasses.replace(payload, trigger=trigger)
        elif isinstance(payload, (Switch, Option, Action)):
            raise EntryTypeMismatch(
                descriptor.name,
                descriptor.entry_type.__name__,
                type(payload).__name__,
            )
        else:
            entry = descriptor.entry_type(trigger, *payload)  # type: ignore[arg-type]

        entries = self.entries(descriptor)
        existing = self._index(entries, trigger)
        anchor_at = self._index(entries, anchor) if anchor != trigger else -1

        if existing >= 0 and anchor_at < 0:
            entries[existing] = entry
        else:
            if existing >= 0:
                del entries[existing]
                anchor_at = self._index(entries, anchor)
            if anchor_at >= 0:
                entries.insert(anchor_at if prepend else anchor_at + 1, entry)
            elif prepend:
                entries.insert(0, entry)
            else:
                entries.append(entry)

        self._touch()
        logger.debug(
            "Defined %s %r in popup %s", descriptor.name, trigger, self.name
        )
        return entry

    def rename(self, category: CategoryRef, old: str, new: str) -> None:
        """
        Change the trigger of an existing entry.

        Does nothing when `old` is not defined; callers check existence first.
        An entry already using `new` is dropped.
        """
        entries = self.entries(category)
        at = self._index(entries, old)
        if at < 0 or old == new:
            return
        entries[at] = dataclasses.replace(entries[at], trigger=new)
        clash = [i for i, e in enumerate(entries) if e.trigger == new and i != at]
        for i in reversed(clash):
            logger.warning(
                "Rename to %r in popup %s drops existing entry", new, self.name
            )
            del entries[i]
        self._touch()

    def remove(self, category: CategoryRef, trigger: str) -> None:
        """Delete the entry for `trigger`; missing entries are ignored."""
        entries = self.entries(category)
        at = self._index(entries, trigger)
        if at >= 0:
            del entries[at]
            self._touch()


class PopupRegistry:
    """Holds every popup definition by name."""

    def __init__(self) -> None:
        self._popups: Dict[str, PopupDefinition] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._popups

    def __iter__(self) -> Iterator[str]:
        return iter(self._popups)

    def __len__(self) -> int:
        return len(self._popups)

    def __getitem__(self, name: str) -> PopupDefinition:
        try:
            return self._popups[name]
        except KeyError:
            raise UnknownPopup(name) from None

    def add_popup(self, name: str, man_page: Optional[str] = None) -> PopupDefinition:
        """Create an empty popup, replacing any popup of the same name."""
        popup = PopupDefinition(name=name, man_page=man_page)
        self._popups[name] = popup
        logger.info("Added popup %s", name)
        return popup

    def define_popup(
        self,
        name: str,
        switches: Iterable[Sequence[str]] = (),
        options: Iterable[Sequence[object]] = (),
        actions: Iterable[Sequence[str]] = (),
        man_page: Optional[str] = None,
    ) -> PopupDefinition:
        """
        Declare a whole popup at once.

        Each row is `(trigger, description, argument_id_or_command_id)`;
        option rows may carry a value reader as a fourth element. The popup
        also gets an `open_<name>` entry point, see `entry_points`.
        """
        popup = self.add_popup(name, man_page=man_page)
        popup.entry_point = entry_point_name(name)
        tables = ((SWITCHES, switches), (OPTIONS, options), (ACTIONS, actions))
        for descriptor, rows in tables:
            for trigger, *payload in rows:
                popup.define(descriptor, str(trigger), payload)
        return popup

    def remove_popup(self, name: str) -> None:
        self._popups.pop(name, None)

    def entry_points(self) -> Dict[str, str]:
        """Map each `open_<name>` entry point to the popup it opens."""
        return {
            popup.entry_point: name
            for name, popup in self._popups.items()
            if popup.entry_point
        }

    def define(
        self,
        popup: str,
        category: CategoryRef,
        trigger: str,
        payload: Union[Entry, Sequence[object]],
        anchor: Optional[str] = None,
        prepend: bool = False,
    ) -> Entry:
        return self[popup].define(category, trigger, payload, anchor, prepend)

    def rename(self, popup: str, category: CategoryRef, old: str, new: str) -> None:
        self[popup].rename(category, old, new)

    def remove(self, popup: str, category: CategoryRef, trigger: str) -> None:
        self[popup].remove(category, trigger)

    def insert_switch(
        self,
        popup: str,
        trigger: str,
        description: str,
        argument_id: str,
        anchor: Optional[str] = None,
        prepend: bool = False,
    ) -> Entry:
        return self.define(
            popup, SWITCHES, trigger, (description, argument_id), anchor, prepend
        )

    def insert_option(
        self,
        popup: str,
        trigger: str,
        description: str,
        argument_id: str,
        value_reader: Optional[ValueReader] = None,
        anchor: Optional[str] = None,
        prepend: bool = False,
    ) -> Entry:
        return self.define(
            popup,
            OPTIONS,
            trigger,
            (description, argument_id, value_reader),
            anchor,
            prepend,
        )

    def insert_action(
        self,
        popup: str,
        trigger: str,
        description: str,
        command_id: str,
        anchor: Optional[str] = None,
        prepend: bool = False,
    ) -> Entry:
        return self.define(
            popup, ACTIONS, trigger, (description, command_id), anchor, prepend
        )

