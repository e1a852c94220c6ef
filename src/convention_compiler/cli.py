"""
Command line entry point for the Convention Compiler.

The program is fully interactive: it prints a banner, lets the user pick a publish
command, then hands over to the compile workflow. No command-line flags are parsed.
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .exceptions import ConventionCompilerError
from .models.convention import Aborted
from .prompts import InteractivePrompter
from .workflow import ConventionCompiler


logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "CONVENTION_COMPILER_LOG_LEVEL"

COMMANDS = [
    "symlink - Create symlinks for convention markdown files",
    "write - Write AGENTS.md directly into a project directory",
]


def setup_logging(console: Console) -> None:
    """Route package logs through rich at the level named in the environment."""
    level_name = os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING

    package_logger = logging.getLogger("convention_compiler")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        package_logger.addHandler(RichHandler(console=console, show_path=False))


def print_banner(console: Console) -> None:
    console.print("[bold blue]Convention Markdown Compiler[/]")
    console.print("[blue]" + "=" * 34 + "[/]")
    console.print()


def select_command(prompter: InteractivePrompter) -> Optional[str]:
    """
    Let the user pick a command from the menu.

    Returns:
        The command name, or None if the menu was cancelled
    """
    prompter.console.print("[bold green]Available Commands:[/]")
    prompter.console.print()

    selection = prompter.select_command(COMMANDS)
    if isinstance(selection, Aborted):
        return None

    # Keep just the command name, before the " - " description
    command = COMMANDS[selection.value].split(" - ")[0]
    prompter.console.print()
    return command


def main(console: Optional[Console] = None, prompter: Optional[InteractivePrompter] = None) -> int:
    """
    Run the interactive session.

    Returns:
        Exit code: 0 on completion or cancellation, 1 on error
    """
    console = console or Console()
    prompter = prompter or InteractivePrompter(console)
    setup_logging(console)

    print_banner(console)

    try:
        command = select_command(prompter)
        if command is None:
            console.print("[yellow]Operation cancelled.[/]")
            return 0

        return ConventionCompiler(console, prompter).run(command)

    except ConventionCompilerError as e:
        message = f"Error: {e}"
        if e.__cause__ is not None and str(e.__cause__) not in str(e):
            message += f"\n  Caused by: {e.__cause__}"
        console.print(message, style="red", markup=False)
        logger.debug("Run failed", exc_info=True)
        return 1
    except KeyboardInterrupt:
        console.print()
        console.print("[yellow]Operation cancelled.[/]")
        return 0
