"""
Utilities for prompting the user for input.

Widgets render with ``rich`` and read keys with ``readchar``. Each returns either
``Selected(value)`` or ``Aborted()``; cancelling a prompt is ordinary control flow
and never raises. Every widget accepts a ``read_key`` callable so it can be driven
by a scripted key sequence.
"""

from typing import Callable, List, Optional, Sequence, Tuple
import logging

import readchar
from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from .models.convention import Aborted, Selected, Selection


logger = logging.getLogger(__name__)

KeyReader = Callable[[], str]

VISIBLE_ROWS = 10

ABORT_KEYS = (readchar.key.CTRL_C, readchar.key.ESC)
ENTER_KEYS = (readchar.key.ENTER, readchar.key.CR, readchar.key.LF)
BACKSPACE_KEYS = (readchar.key.BACKSPACE, "\x08")


def fuzzy_score(query: str, candidate: str) -> Optional[int]:
    """
    Score how well ``query`` matches ``candidate`` as a case-insensitive subsequence.

    Consecutive matches and matches right after a path separator score higher;
    an early first match is preferred.

    Returns:
        The score, or None if the query characters do not all appear in order
    """
    if not query:
        return 0

    query = query.lower()
    text = candidate.lower()
    score = 0
    position = 0
    previous = -2
    first = None

    for char in query:
        index = text.find(char, position)
        if index == -1:
            return None
        if first is None:
            first = index
        score += 1
        if index == previous + 1:
            score += 5
        if index == 0 or text[index - 1] in "/ _-.":
            score += 3
        previous = index
        position = index + 1

    return score * 10 - first


def fuzzy_filter(query: str, items: Sequence[str]) -> List[str]:
    """
    Filter and rank items against a fuzzy query.

    An empty query keeps every item in its original order; otherwise matches are
    sorted by descending score, ties keeping their original order.
    """
    scored: List[Tuple[int, int, str]] = []
    for index, item in enumerate(items):
        score = fuzzy_score(query, item)
        if score is not None:
            scored.append((-score, index, item))
    scored.sort()
    return [item for _, _, item in scored]


def _window(current_idx: int, scroll_offset: int, visible_rows: int) -> int:
    """Return the scroll offset that keeps ``current_idx`` visible."""
    if current_idx < scroll_offset:
        return current_idx
    if current_idx >= scroll_offset + visible_rows:
        return current_idx - visible_rows + 1
    return scroll_offset


def _next_key(read_key: KeyReader) -> str:
    """
    Read one key, normalising the ways a user can cancel.

    ``readchar.readkey`` raises KeyboardInterrupt on Ctrl+C, and on POSIX a lone
    Esc comes back joined to the following key. Both are reported as ESC.
    Arrow and other CSI/SS3 sequences pass through unchanged.
    """
    try:
        key = read_key()
    except KeyboardInterrupt:
        return readchar.key.ESC
    if key.startswith(readchar.key.ESC) and key[1:2] not in ("[", "O"):
        return readchar.key.ESC
    return key


def _is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def select_from_list(
    console: Console,
    prompt: str,
    items: Sequence[str],
    default: int = 0,
    read_key: Optional[KeyReader] = None,
) -> Selection:
    """
    Display options in a table and prompt the user to select one.

    Args:
        console: Console to render on
        prompt: Message displayed above the options
        items: Option labels
        default: Index highlighted initially
        read_key: Key reader, defaults to ``readchar.readkey``

    Returns:
        Selected(index) or Aborted()
    """
    if not items:
        return Aborted()

    read_key = read_key or readchar.readkey
    current_idx = default
    scroll_offset = 0

    def build_table() -> Table:
        nonlocal scroll_offset
        scroll_offset = _window(current_idx, scroll_offset, VISIBLE_ROWS)
        table = Table(show_header=False, box=None)
        table.add_column()
        table.add_column()
        for i, item in enumerate(items[scroll_offset:scroll_offset + VISIBLE_ROWS]):
            if i + scroll_offset == current_idx:
                table.add_row("[bold][blue]>", f"[bold][blue]{escape(item)}[/]")
            else:
                table.add_row("  ", escape(item))
        return table

    console.print(f"[bold][green]?[/] {prompt} [bright_blue][Use arrows to move; enter to select]")
    with Live(build_table(), auto_refresh=False, console=console) as live:
        while True:
            key = _next_key(read_key)

            if key == readchar.key.UP:
                current_idx = (current_idx - 1) % len(items)
            elif key == readchar.key.DOWN:
                current_idx = (current_idx + 1) % len(items)
            elif key in ABORT_KEYS:
                return Aborted()
            elif key in ENTER_KEYS:
                return Selected(current_idx)

            live.update(build_table(), refresh=True)


def multi_select(
    console: Console,
    prompt: str,
    items: Sequence[str],
    read_key: Optional[KeyReader] = None,
) -> Selection:
    """
    Prompt the user to tick any number of options.

    Space toggles the highlighted option and ``a`` toggles all of them. The
    selected indices are returned in the order the user ticked them.

    Returns:
        Selected(list of indices) or Aborted()
    """
    if not items:
        return Selected([])

    read_key = read_key or readchar.readkey
    current_idx = 0
    scroll_offset = 0
    picked: List[int] = []

    def build_table() -> Table:
        nonlocal scroll_offset
        scroll_offset = _window(current_idx, scroll_offset, VISIBLE_ROWS)
        table = Table(show_header=False, box=None)
        table.add_column()
        table.add_column()
        table.add_column()
        for i, item in enumerate(items[scroll_offset:scroll_offset + VISIBLE_ROWS]):
            index = i + scroll_offset
            mark = "[green]\\[x][/]" if index in picked else "[ ]"
            if index == current_idx:
                table.add_row("[bold][blue]>", mark, f"[bold][blue]{escape(item)}[/]")
            else:
                table.add_row("  ", mark, escape(item))
        return table

    console.print(
        f"[bold][green]?[/] {prompt} "
        "[bright_blue][Use arrows to move; space to toggle; a to toggle all; enter to confirm]"
    )
    with Live(build_table(), auto_refresh=False, console=console) as live:
        while True:
            key = _next_key(read_key)

            if key == readchar.key.UP:
                current_idx = (current_idx - 1) % len(items)
            elif key == readchar.key.DOWN:
                current_idx = (current_idx + 1) % len(items)
            elif key == readchar.key.SPACE:
                if current_idx in picked:
                    picked.remove(current_idx)
                else:
                    picked.append(current_idx)
            elif key == "a":
                if len(picked) == len(items):
                    picked = []
                else:
                    picked.extend([i for i in range(len(items)) if i not in picked])
            elif key in ABORT_KEYS:
                return Aborted()
            elif key in ENTER_KEYS:
                return Selected(list(picked))

            live.update(build_table(), refresh=True)


def fuzzy_select(
    console: Console,
    prompt: str,
    items: Sequence[str],
    header: Optional[str] = None,
    tab_item: Optional[str] = None,
    read_key: Optional[KeyReader] = None,
) -> Selection:
    """
    Prompt the user to pick one item, filtering the list as they type.

    Args:
        console: Console to render on
        prompt: Text shown before the query
        items: Item labels
        header: Optional hint line shown above the list
        tab_item: Item returned immediately when Tab is pressed
        read_key: Key reader, defaults to ``readchar.readkey``

    Returns:
        Selected(item text) or Aborted(). Enter does nothing while no item matches.
    """
    read_key = read_key or readchar.readkey
    query = ""
    current_idx = 0
    scroll_offset = 0
    matches = list(items)

    def build_view() -> Group:
        nonlocal scroll_offset
        scroll_offset = _window(current_idx, scroll_offset, VISIBLE_ROWS)
        table = Table(show_header=False, box=None)
        table.add_column()
        table.add_column()
        for i, item in enumerate(matches[scroll_offset:scroll_offset + VISIBLE_ROWS]):
            if i + scroll_offset == current_idx:
                table.add_row("[bold][blue]>", Text(item, style="bold blue"))
            else:
                table.add_row("  ", Text(item))
        parts = []
        if header:
            parts.append(Text(header, style="dim"))
        parts.append(Text.assemble((prompt, "bold green"), query))
        parts.append(Text(f"  {len(matches)}/{len(items)}", style="dim"))
        parts.append(table)
        return Group(*parts)

    with Live(build_view(), auto_refresh=False, console=console) as live:
        while True:
            key = _next_key(read_key)

            if key in ABORT_KEYS:
                return Aborted()
            elif key in ENTER_KEYS:
                if matches:
                    return Selected(matches[current_idx])
            elif key == readchar.key.TAB:
                if tab_item is not None:
                    return Selected(tab_item)
            elif key == readchar.key.UP:
                if matches:
                    current_idx = (current_idx - 1) % len(matches)
            elif key == readchar.key.DOWN:
                if matches:
                    current_idx = (current_idx + 1) % len(matches)
            elif key in BACKSPACE_KEYS:
                query = query[:-1]
                matches = fuzzy_filter(query, items)
                current_idx = 0
            elif _is_printable(key):
                query += key
                matches = fuzzy_filter(query, items)
                current_idx = 0

            live.update(build_view(), refresh=True)


def prompt_text(console: Console, message: str, default: str = "") -> str:
    """Utility to prompt the user for text with consistent styling.

    Ctrl+C or end of input returns the default.
    """
    try:
        return Prompt.ask(f"[bold][green]?[/] {message}[/]", console=console, default=default)
    except (KeyboardInterrupt, EOFError):
        console.print()
        logger.debug(f"Text prompt cancelled, using default {default!r}")
        return default


def confirm(console: Console, message: str, default: bool = True) -> bool:
    """Utility to prompt the user for confirmation with consistent styling.

    Ctrl+C or end of input counts as declining.
    """
    try:
        return Confirm.ask(f"[bold][green]?[/] {message}[/]", console=console, default=default)
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False


class InteractivePrompter:
    """
    Prompting collaborator used by the compile workflow.

    Wraps the widgets in this module behind the handful of questions the
    workflow asks, so tests can substitute a scripted prompter.
    """

    def __init__(self, console: Console, read_key: Optional[KeyReader] = None):
        self.console = console
        self.read_key = read_key

    def select_command(self, commands: Sequence[str]) -> Selection:
        return select_from_list(self.console, "Select a command", commands, read_key=self.read_key)

    def select_files(self, names: Sequence[str], prompt: str) -> Selection:
        return multi_select(self.console, prompt, names, read_key=self.read_key)

    def select_directory(self, items: Sequence[str], prompt: str, custom_item: str) -> Selection:
        return fuzzy_select(
            self.console,
            prompt,
            items,
            header="Start typing to search, Enter to select, Tab for custom path, Esc to cancel",
            tab_item=custom_item,
            read_key=self.read_key,
        )

    def ask_path(self, message: str, default: str = ".") -> str:
        return prompt_text(self.console, message, default=default)

    def confirm(self, message: str, default: bool = True) -> bool:
        return confirm(self.console, message, default=default)
