"""
rich output for popups and messages printed outside an interactive session.
"""

from typing import List, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from keypop.popup.renderer import RenderedPopup

# prompt_toolkit style classes used by the renderer, mapped to rich styles.
RICH_STYLES = {
    "class:popup.heading": "bold",
    "class:popup.key": "bold cyan",
    "class:popup.description": "",
    "class:popup.enabled": "green",
    "class:popup.disabled": "dim",
    "class:popup.value": "yellow",
    "class:popup.hint": "dim italic",
    "class:popup.selected": "reverse",
}

console = Console()


def fragments_to_text(fragments: Sequence[Tuple[str, str]]) -> Text:
    """Convert prompt_toolkit fragments into a rich Text."""
    text = Text()
    for style, content in fragments:
        rich_style = " ".join(
            RICH_STYLES[part] for part in style.split() if RICH_STYLES.get(part)
        )
        text.append(content, style=rich_style or None)
    return text


def print_popup(rendered: RenderedPopup) -> None:
    """Print a rendered popup via Rich."""
    for line in rendered.lines:
        console.print(fragments_to_text(line))


def render_message(content: str, role: str = "info") -> None:
    if role == "error":
        console.print(f"[bold red]error: {escape(content)}[/bold red]")
    elif role == "command":
        console.print("[dim]$[/dim]", end=" ")
        console.print(f"[bold cyan]{escape(content)}[/bold cyan]", highlight=False)
    else:
        console.print(Text(content))


def render_table(rows: List[Tuple[str, str]]) -> None:
    for name, detail in rows:
        console.print(f"[bold cyan]{escape(name):<12}[/bold cyan] [dim]{escape(detail)}[/dim]")
