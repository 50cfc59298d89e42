"""
Console subpackage: prompt_toolkit popup surface, key bindings and rich output.
"""

from keypop.console.popup_console import (
    PopupConsole,
    entry_points,
    popup_entry_point,
)

__all__ = ["PopupConsole", "entry_points", "popup_entry_point"]
