"""
Error kinds raised by the popup engine.
"""


class PopupError(Exception):
    """Base class for popup engine errors."""


class UnknownCategory(PopupError, ValueError):
    """A mutation named a collection other than switches, options or actions."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown category {category!r}")
        self.category = category


class EntryTypeMismatch(PopupError, ValueError):
    """An entry was defined into a collection of another entry type."""

    def __init__(self, category: str, expected: str, got: str) -> None:
        super().__init__(f"{category} expects {expected} entries, got {got}")
        self.category = category


class UnknownPopup(PopupError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown popup {self.name!r}"


class UnboundHelpTarget(PopupError):
    """The key sequence given to help is not bound to an action."""

    def __init__(self, keys: str) -> None:
        super().__init__(f"No help associated with `{keys}'")
        self.keys = keys


class NoHelpResource(PopupError):
    def __init__(self, popup: str) -> None:
        super().__init__(f"No man page associated with `{popup}'")
        self.popup = popup


class UnknownCommand(PopupError, KeyError):
    """Raised by the command layer when a command id does not resolve."""

    def __init__(self, command_id: str) -> None:
        super().__init__(command_id)
        self.command_id = command_id

    def __str__(self) -> str:
        return f"Unknown command {self.command_id!r}"
