"""
Per-session argument state.

Switches map to booleans, options to strings. An option may be present with
an empty value, which is distinct from the option being absent.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ArgumentValue = Union[bool, str]

# Value stored for an option whose input was empty or whitespace only.
EMPTY: str = ""


def classify_option_value(raw: Optional[str]) -> Optional[str]:
    """Classify raw prompt input as absent (None), EMPTY, or a literal value."""
    if raw is None:
        return None
    if not raw.strip():
        return EMPTY
    return raw


class ArgumentState:
    """Insertion-ordered mapping from argument id to its current value."""

    def __init__(self) -> None:
        self._values: Dict[str, ArgumentValue] = {}

    def __contains__(self, argument_id: object) -> bool:
        return argument_id in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ArgumentState({self._values!r})"

    def get(self, argument_id: str) -> Optional[ArgumentValue]:
        return self._values.get(argument_id)

    def items(self) -> List[Tuple[str, ArgumentValue]]:
        return list(self._values.items())

    def toggle(self, argument_id: str) -> bool:
        """Flip a switch; an absent switch counts as False. Returns the new value."""
        value = not bool(self._values.get(argument_id, False))
        self._values[argument_id] = value
        logger.debug("Toggled %s -> %s", argument_id, value)
        return value

    def set_option(self, argument_id: str, raw: Optional[str]) -> Optional[str]:
        """Store an option value read from a prompt and return what was stored."""
        value = classify_option_value(raw)
        if value is None:
            self._values.pop(argument_id, None)
            logger.debug("Cleared option %s", argument_id)
        else:
            self._values[argument_id] = value
            logger.debug("Set option %s -> %r", argument_id, value)
        return value

    def is_enabled(self, argument_id: str) -> bool:
        value = self._values.get(argument_id)
        if isinstance(value, bool):
            return value
        return value is not None

    def flatten(self) -> List[str]:
        """
        Serialize the state into argument tokens, in insertion order.

        A true switch contributes its id, an option with a non-empty value
        contributes its id immediately followed by the value. False switches
        and empty options contribute nothing.
        """
        tokens: List[str] = []
        for argument_id, value in self._values.items():
            if value is True:
                tokens.append(argument_id)
            elif isinstance(value, str) and value:
                tokens.append(f"{argument_id}{value}")
        return tokens
