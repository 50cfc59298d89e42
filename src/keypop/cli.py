import logging
from typing import Any, Callable, Optional, Protocol

import typer
from typing_extensions import Annotated

from keypop.console.popup_console import PopupConsole
from keypop.console.rendering import print_popup, render_message, render_table
from keypop.errors import PopupError
from keypop.logger import setup_logging
from keypop.popup.arguments import ArgumentState
from keypop.popup.commands import CommandRegistry
from keypop.popup.definition import PopupRegistry
from keypop.popup.renderer import render_popup
from keypop.popups import build_commands, build_registry
from keypop.runtime_config import RuntimeConfig, load_envs

logger = logging.getLogger(__name__)


class Console(Protocol):
    def run(self, name: str, prefix_arg: Optional[Any] = None) -> Any: ...


ConsoleFactory = Callable[[PopupRegistry, CommandRegistry, RuntimeConfig], Console]

# Global factory functions - set by create_app()
_console_factory: Optional[ConsoleFactory] = None
_registry_factory: Optional[Callable[[], PopupRegistry]] = None


def default_console_factory(
    registry: PopupRegistry, commands: CommandRegistry, config: RuntimeConfig
) -> Console:
    """Default factory for creating PopupConsole instances."""
    return PopupConsole(registry, commands, config)


def _registry() -> PopupRegistry:
    return (_registry_factory or build_registry)()


def list_popups() -> None:
    """List the available popups."""
    registry = _registry()
    rows = []
    for name in registry:
        popup = registry[name]
        rows.append(
            (
                name,
                (f"{popup.entry_point}: " if popup.entry_point else "")
                + f"{len(popup.switches)} switches, {len(popup.options)} options, "
                f"{len(popup.actions)} actions"
                + (f" (man {popup.man_page})" if popup.man_page else ""),
            )
        )
    render_table(rows)


def show_popup(
    name: Annotated[str, typer.Argument(help="Popup to render")],
    width: Annotated[
        Optional[int], typer.Option("--width", "-w", help="Surface width")
    ] = None,
) -> None:
    """Print a popup without opening it."""
    config = RuntimeConfig.from_env()
    try:
        popup = _registry()[name]
    except PopupError as e:
        render_message(str(e), role="error")
        raise typer.Exit(code=1)
    rendered = render_popup(
        popup,
        ArgumentState(),
        width=width or config.width or 80,
        show_hint=config.show_hint,
    )
    print_popup(rendered)


def open_popup(
    name: Annotated[str, typer.Argument(help="Popup to open")],
    width: Annotated[
        Optional[int], typer.Option("--width", "-w", help="Surface width")
    ] = None,
) -> None:
    """Open a popup interactively."""
    env_config = RuntimeConfig.from_env()
    config = RuntimeConfig(
        width=width or env_config.width,
        log_level=env_config.log_level,
        log_file=env_config.log_file,
    )
    registry = _registry()
    if name not in registry:
        render_message(f"Unknown popup {name!r}", role="error")
        raise typer.Exit(code=1)

    logger.info(f"Opening popup {name}")
    factory = _console_factory or default_console_factory
    console = factory(registry, build_commands(), config)
    try:
        console.run(name)
    except PopupError as e:
        render_message(str(e), role="error")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        print("\nExiting...")


def create_app(
    console_factory: Optional[ConsoleFactory] = None,
    registry_factory: Optional[Callable[[], PopupRegistry]] = None,
) -> typer.Typer:
    """
    Create and configure the Typer application.

    Args:
        console_factory: Factory function to create Console instances
        registry_factory: Factory function returning the popup registry

    Returns:
        Typer application
    """
    # Load settings from .env if not already set in the environment
    load_envs()
    config = RuntimeConfig.from_env()
    setup_logging(config.log_level, config.log_file)

    # Set global factory functions
    global _console_factory, _registry_factory
    _console_factory = console_factory
    _registry_factory = registry_factory

    app = typer.Typer(rich_markup_mode=None, help="keypop - key-driven popup menus")
    app.command("list")(list_popups)
    app.command("show")(show_popup)
    app.command("open")(open_popup)

    return app


# Create default app instance for backward compatibility
app = create_app()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
