"""
Lay out a popup into styled display lines.

Lines are lists of prompt_toolkit `(style, text)` fragments so they can be
handed to a `FormattedTextControl` as-is, or converted for rich output.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from prompt_toolkit.formatted_text.utils import (
    fragment_list_to_text,
    fragment_list_width,
)

from keypop.popup.arguments import ArgumentState
from keypop.popup.categories import (
    ACTIONS,
    CATEGORIES,
    STYLE_HEADING,
    STYLE_HINT,
    Fragment,
)
from keypop.popup.definition import PopupDefinition
from keypop.popup.dispatch import Keys

logger = logging.getLogger(__name__)

INDENT = " "
COLUMN_GAP = 3
STYLE_SELECTED = "class:popup.selected"
USAGE_HINT = (
    "Type a prefix key to toggle it. "
    "Run 'actions' with their prefixes. '?' for more help."
)

# (category name, identity) of a rendered item.
Selection = Tuple[str, str]
Line = List[Fragment]


@dataclass(frozen=True)
class RenderedItem:
    """Where an entry ended up on the surface and how to activate it."""

    category: str
    identity: str
    keys: Keys
    line: int
    column: int
    width: int

    @property
    def selection(self) -> Selection:
        return (self.category, self.identity)


@dataclass
class RenderedPopup:
    lines: List[Line] = field(default_factory=list)
    items: List[RenderedItem] = field(default_factory=list)
    selected: Optional[Selection] = None

    def text(self) -> str:
        return "\n".join(fragment_list_to_text(line) for line in self.lines)

    def fragments(self) -> List[Fragment]:
        """All lines joined into one fragment list, newline separated."""
        result: List[Fragment] = []
        for i, line in enumerate(self.lines):
            if i:
                result.append(("", "\n"))
            result.extend(line)
        return result

    def item(self, selection: Optional[Selection]) -> Optional[RenderedItem]:
        for item in self.items:
            if item.selection == selection:
                return item
        return None


def restore_selection(
    previous: Optional[Selection], candidates: Sequence[Selection]
) -> Optional[Selection]:
    """
    Pick the item to highlight after a redraw.

    Keeps `previous` when it is still rendered, otherwise falls back to the
    first action, then to the first item of any kind.
    """
    if previous is not None and previous in candidates:
        return previous
    for candidate in candidates:
        if candidate[0] == ACTIONS.name:
            return candidate
    return candidates[0] if candidates else None


def _highlight(fragments: Line) -> Line:
    return [(f"{style} {STYLE_SELECTED}".strip(), text) for style, text in fragments]


def render_popup(
    definition: PopupDefinition,
    state: ArgumentState,
    width: int = 80,
    selected: Optional[Selection] = None,
    show_hint: bool = True,
) -> RenderedPopup:
    """
    Render `definition` with the current argument `state`.

    Categories without entries are skipped. Items of a category are packed
    into columns as wide as the longest item plus a gap; an item that would
    cross `width` starts a new line, and single-column categories put every
    item on its own line. Items are never truncated.
    """
    rendered = RenderedPopup()
    blocks = []
    for descriptor in CATEGORIES:
        entries = definition.entries(descriptor)
        if not entries:
            continue
        formatted = [(entry, descriptor.format(entry, state)) for entry in entries]
        blocks.append((descriptor, formatted))

    candidates = [
        (descriptor.name, entry.identity)
        for descriptor, formatted in blocks
        for entry, _ in formatted
    ]
    rendered.selected = restore_selection(selected, candidates)

    lines = rendered.lines
    for descriptor, formatted in blocks:
        if lines:
            lines.append([])
        lines.append([(STYLE_HEADING, descriptor.heading)])

        longest = max(fragment_list_width(fragments) for _, fragments in formatted)
        column_width = longest + COLUMN_GAP
        line: Line = []
        last_start = 0
        cursor = 0

        for entry, fragments in formatted:
            item_width = fragment_list_width(fragments)
            if line:
                next_start = last_start + column_width
                if (
                    descriptor.single_column
                    or len(INDENT) + next_start + item_width > width
                ):
                    lines.append(line)
                    line = []
                else:
                    line.append(("", " " * (next_start - cursor)))
                    cursor = next_start
            if not line:
                line.append(("", INDENT))
                cursor = 0

            selection = (descriptor.name, entry.identity)
            if selection == rendered.selected:
                fragments = _highlight(fragments)
            line.extend(fragments)
            rendered.items.append(
                RenderedItem(
                    category=descriptor.name,
                    identity=entry.identity,
                    keys=descriptor.keys(entry.trigger),
                    line=len(lines),
                    column=len(INDENT) + cursor,
                    width=item_width,
                )
            )
            last_start = cursor
            cursor += item_width

        if line:
            lines.append(line)

    if show_hint:
        if lines:
            lines.append([])
        lines.append([(STYLE_HINT, USAGE_HINT)])

    logger.debug(
        "Rendered popup %s: %d lines, %d items",
        definition.name,
        len(lines),
        len(rendered.items),
    )
    return rendered
