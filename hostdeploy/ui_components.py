"""
hostdeploy - UI Components
Standardized command header
"""

from typing import Optional

from rich.console import Console

BRAND = "hostdeploy"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized hostdeploy command header.

    Args:
        title: Main title (e.g., "Deploy", "Cleanup")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            details={"Remote": "ubuntu@203.0.113.10", "Branch": "main"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{BRAND}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]", highlight=False)

    console.print()
