"""
keypop: declarative key-driven popup menus for the terminal.
"""

from keypop.popup import (
    ArgumentState,
    CommandRegistry,
    Invocation,
    PopupDefinition,
    PopupRegistry,
    PopupSession,
    current_arguments,
    render_popup,
)

__all__ = [
    "ArgumentState",
    "CommandRegistry",
    "Invocation",
    "PopupDefinition",
    "PopupRegistry",
    "PopupSession",
    "current_arguments",
    "render_popup",
]
