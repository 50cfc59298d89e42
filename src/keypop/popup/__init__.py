"""
Popup engine: definitions, argument state, dispatch tables, rendering and
sessions.
"""

from keypop.popup.arguments import EMPTY, ArgumentState, classify_option_value
from keypop.popup.categories import ACTIONS, CATEGORIES, OPTIONS, SWITCHES
from keypop.popup.commands import (
    CommandRegistry,
    Invocation,
    current_arguments,
    invocation_scope,
)
from keypop.popup.definition import PopupDefinition, PopupRegistry
from keypop.popup.dispatch import DispatchTable, build_dispatch_table
from keypop.popup.entries import Action, Option, Switch
from keypop.popup.renderer import RenderedPopup, render_popup
from keypop.popup.session import PopupSession, SessionState

__all__ = [
    "ACTIONS",
    "CATEGORIES",
    "EMPTY",
    "OPTIONS",
    "SWITCHES",
    "Action",
    "ArgumentState",
    "CommandRegistry",
    "DispatchTable",
    "Invocation",
    "Option",
    "PopupDefinition",
    "PopupRegistry",
    "PopupSession",
    "RenderedPopup",
    "SessionState",
    "Switch",
    "build_dispatch_table",
    "classify_option_value",
    "current_arguments",
    "invocation_scope",
    "render_popup",
]
