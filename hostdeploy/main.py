#!/usr/bin/env python3
"""hostdeploy CLI - Main entry point"""

import functools
import os
import sys
from pathlib import Path

from rich.console import Console

import rich_click as click

from hostdeploy import __version__
from hostdeploy.commands import CleanupCommand, DeployCommand
from hostdeploy.constants import EXIT_FAILURE, EXIT_INTERRUPTED

# Configure rich-click help output
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_HELPTEXT = ""
click.rich_click.STYLE_OPTION_HELP = ""

click.rich_click.STYLE_METAVAR = "bold yellow"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.ALIGN_OPTIONS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

console = Console()


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import ClickException

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(EXIT_INTERRUPTED)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")
            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(EXIT_FAILURE)

    return wrapper


@click.command(name="hostdeploy")
@click.version_option(version=__version__)
@click.option("--repo-url", help="Git repository URL (HTTPS or SSH)")
@click.option("--branch", "-b", help="Branch to deploy [default: main]")
@click.option("--remote-user", "-u", help="Remote SSH username")
@click.option("--remote-host", "-H", help="Remote server IP or hostname")
@click.option("--ssh-key", "ssh_key_path", help="Path to SSH private key")
@click.option("--app-port", "-p", help="Port the application listens on inside the container")
@click.option("--public-port", help="Public port served by nginx [default: 80]")
@click.option("--local-dir", help="Local directory to clone into [default: .]")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML file with deployment parameters",
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for run logs [default: ./logs]",
)
@click.option("--cleanup", is_flag=True, help="Remove everything a deploy created, then exit")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Non-interactive: no prompts, no confirmation")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
def cli(config_file, log_dir, cleanup, assume_yes, verbose, **options):
    """
    Deploy a containerized app from git to a remote host behind nginx.

    \b
    Deploy:
      hostdeploy                                  # Interactive
      hostdeploy -c deploy.yml -y                 # From a parameter file
      hostdeploy --repo-url https://github.com/acme/app.git \\
          -u ubuntu -H 203.0.113.10 --ssh-key ~/.ssh/id_ed25519 -p 5000

    \b
    Tear down:
      hostdeploy --cleanup -u ubuntu -H 203.0.113.10 --ssh-key ~/.ssh/id_ed25519

    \b
    HTTPS tokens are read from REPO_TOKEN (environment or .env).
    """
    command_class = CleanupCommand if cleanup else DeployCommand
    cmd = command_class(
        options,
        config_file=config_file,
        log_dir=log_dir,
        verbose=verbose,
        assume_yes=assume_yes,
        console=console,
    )
    cmd.run()


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli()


if __name__ == "__main__":
    main()
