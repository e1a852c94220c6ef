"""
The compile workflow: discover, select, confirm and publish.

ConventionCompiler runs one strictly sequential session. Discovery happens before
the configuration file is read or created, so a missing conventions directory
leaves no trace on disk. Declining the confirmation exits before anything is
written.
"""

from pathlib import Path
from typing import Callable, List, Union
import logging

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule

from .config.parser import DEFAULT_CONFIG_PATH, load_or_create_config
from .models.convention import Aborted, ConventionFile, PublishResult, Selected
from .tools.combiner import combine_convention_files, combined_filename
from .tools.discovery import (
    DEFAULT_CONVENTIONS_DIR,
    CURRENT_DIR,
    CandidateFormatter,
    DirectoryScanner,
    find_convention_files,
)
from .tools.publisher import Publisher, SymlinkPublisher, get_publisher


logger = logging.getLogger(__name__)

CUSTOM_PATH_ITEM = "Type custom path..."


class ConventionCompiler:
    """
    Interactive session that combines convention files and publishes them.

    Attributes:
        console: Console used for all output
        prompter: Collaborator answering the interactive questions
        conventions_dir: Directory holding the convention files
        config_path: Location of config.yaml
        publisher_factory: Maps a command name to its Publisher
    """

    def __init__(self,
                 console: Console,
                 prompter,
                 conventions_dir: Union[str, Path] = DEFAULT_CONVENTIONS_DIR,
                 config_path: Union[str, Path] = DEFAULT_CONFIG_PATH,
                 publisher_factory: Callable[[str], Publisher] = get_publisher):
        self.console = console
        self.prompter = prompter
        self.conventions_dir = Path(conventions_dir)
        self.config_path = Path(config_path)
        self.publisher_factory = publisher_factory

    def run(self, command: str) -> int:
        """
        Run the full session for a publish command.

        Args:
            command: Publish command name, ``symlink`` or ``write``

        Returns:
            Process exit code, 0 on success or clean cancellation

        Raises:
            ConventionCompilerError: If discovery, configuration or publishing fails
        """
        publisher = self.publisher_factory(command)

        convention_files = find_convention_files(self.conventions_dir)
        if not convention_files:
            self.console.print(f"[red]No .md files found in {escape(self.conventions_dir.name)}/ directory[/]")
            return 0

        selected_files = self.select_convention_files(convention_files, publisher)
        if not selected_files:
            self.console.print("[yellow]No files selected. Exiting.[/]")
            return 0

        target_dir = self.get_target_directory()

        self.show_summary(selected_files, target_dir, publisher)

        if not self.prompter.confirm(f"Proceed with {self._action(publisher)}?", default=True):
            self.console.print("[yellow]Operation cancelled.[/]")
            return 0

        self.console.print("[yellow]Combining convention files...[/]")
        document = combine_convention_files(selected_files)
        result = publisher.publish(document, target_dir)
        self.show_result(result, publisher)
        return 0

    def select_convention_files(self, files: List[ConventionFile], publisher: Publisher) -> List[ConventionFile]:
        """Ask the user which files to combine; an aborted prompt selects nothing."""
        verb = "symlink" if isinstance(publisher, SymlinkPublisher) else "combine"
        selection = self.prompter.select_files([f.name for f in files], f"Select convention files to {verb}")

        if isinstance(selection, Aborted):
            logger.debug("File selection aborted")
            return []
        return [files[i] for i in selection.value]

    def get_target_directory(self) -> Path:
        """
        Ask the user for the target directory.

        Offers the scanned candidates in the fuzzy picker. Cancelling the picker
        or choosing the custom path entry falls back to typing a path, and an
        empty answer means the current directory.
        """
        parse_result = load_or_create_config(self.config_path)
        if parse_result.created:
            self.console.print(f"[yellow]Created {escape(str(parse_result.config_path))} with default settings[/]")
        config = parse_result.config

        scan = DirectoryScanner(config).find_candidate_directories()
        for warning in dict.fromkeys(parse_result.warnings + scan.warnings):
            self.console.print(f"[yellow]Warning: {escape(warning)}[/]")

        formatter = CandidateFormatter(config.search_root)
        items = [formatter.to_display(directory) for directory in scan.directories]
        items.append(CUSTOM_PATH_ITEM)

        self.console.print()
        self.console.print(Rule("[bold blue]Select Output Directory"))
        selection = self.prompter.select_directory(items, config.fuzzy_search.prompt, CUSTOM_PATH_ITEM)

        if isinstance(selection, Aborted):
            self.console.print("[yellow]Fuzzy search cancelled.[/] [cyan]Enter path manually below:[/]")
            raw_path = self.prompter.ask_path("Directory path", default=CURRENT_DIR)
        elif isinstance(selection, Selected) and selection.value == CUSTOM_PATH_ITEM:
            raw_path = self.prompter.ask_path("Enter directory path", default=CURRENT_DIR)
        else:
            raw_path = formatter.to_path(selection.value)

        target_path = Path(raw_path.strip() or CURRENT_DIR).expanduser()

        if target_path.exists():
            self.console.print(f"[bold blue]Selected: {escape(str(target_path))}[/]")
        else:
            self.console.print(f"[yellow]Will be created: {escape(str(target_path))}[/]")
        return target_path

    def show_summary(self, selected_files: List[ConventionFile], target_dir: Path, publisher: Publisher) -> None:
        """Print what is about to be combined and where it will go."""
        lines = ["[bold green]Selected Convention Files:[/]"]
        for i, convention in enumerate(selected_files, start=1):
            lines.append(f"   [dim]{i}.[/] [bold cyan]{escape(convention.name)}[/]")

        if isinstance(publisher, SymlinkPublisher):
            lines.append("")
            lines.append("[bold blue]Combined File:[/]")
            combined_path = publisher.combined_dir / combined_filename(selected_files)
            lines.append(f"   [blue]{escape(str(combined_path))}[/]")
            heading = "Symlink Destinations:"
        else:
            heading = "Output File:"

        lines.append("")
        lines.append(f"[bold blue]{heading}[/]")
        for destination in publisher.describe(target_dir):
            lines.append(f"   [blue underline]{escape(destination)}[/]")

        if not target_dir.exists():
            lines.append("")
            lines.append(f"[yellow]{escape(str(target_dir))} does not exist and will be created[/]")

        self.console.print()
        self.console.print(Panel("\n".join(lines), title="Publish Summary",
                                 border_style="cyan"))

    def show_result(self, result: PublishResult, publisher: Publisher) -> None:
        """Print what the publish step produced."""
        for path in result.written:
            self.console.print(f"  [green]Wrote[/] [cyan]{escape(str(path))}[/]")
        for link, points_to in result.links:
            self.console.print(f"  [green]Linked[/] [cyan]{escape(link.name)}[/] -> [dim]{escape(str(points_to))}[/]")
        for note in result.skipped:
            self.console.print(f"  [yellow]{escape(note)}[/]")

        self.console.print()
        if isinstance(publisher, SymlinkPublisher):
            self.console.print("[bold green]Successfully created symlinks for convention files![/]")
        else:
            self.console.print(f"[bold green]Successfully wrote {escape(str(result.written[0]))}![/]")

    @staticmethod
    def _action(publisher: Publisher) -> str:
        if isinstance(publisher, SymlinkPublisher):
            return "symlink creation"
        return f"writing {publisher.describe(Path(CURRENT_DIR))[0]}"
