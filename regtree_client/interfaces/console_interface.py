"""
Console implementation of OperatorInterface and SessionLogger protocols.

This module provides Rich-based console implementations that can be used
for command-line interfaces.
"""

from enum import Enum
from typing import Any, List, Optional
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from prompt_toolkit import prompt
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style
from prompt_toolkit.formatted_text import FormattedText

from ..core.protocols import OperatorInterface, SessionLogger


class ConsoleOperatorInterface(OperatorInterface):
    """Rich console implementation of OperatorInterface."""

    def __init__(self, console: Console = None):
        """
        Initialize console interface.

        Args:
            console: Rich Console instance (creates new one if None)
        """
        self.console = console or Console()
        self.history = InMemoryHistory()
        self.prompt_style = Style.from_dict({
            'prompt': '#00aaff bold',
        })

    def _prompt(self, prompt_text: str) -> Optional[str]:
        """Read one line with editing and history; None on Ctrl-C or Ctrl-D."""
        try:
            return prompt(
                FormattedText([('class:prompt', prompt_text)]),
                history=self.history,
                style=self.prompt_style
            )
        except (KeyboardInterrupt, EOFError):
            return None

    def read_int(self, prompt_text: str = "> ") -> Optional[int]:
        """Read a whole number, re-asking until the text parses."""
        while True:
            text = self._prompt(prompt_text)
            if text is None:
                return None
            try:
                return int(text.strip())
            except ValueError:
                self.display_warning(f"'{text.strip()}' is not a whole number.")

    def read_string(self, prompt_text: str = "> ") -> Optional[str]:
        """Read a line of text."""
        text = self._prompt(prompt_text)
        return text.strip() if text is not None else None

    def confirm(self, question: str) -> Optional[bool]:
        """Ask a y/n question until answered."""
        while True:
            self.console.print(f"\n[bold]{escape(question)} (y/n)[/bold]")
            text = self._prompt("> ")
            if text is None:
                return None
            answer = text.strip().upper()[:1]
            if answer == "Y":
                return True
            if answer == "N":
                return False

    def display_message(self, content: str):
        """Display a message."""
        self.console.print(content)

    def display_menu(self, title: str, options: List[str]):
        """Display a numbered menu."""
        self.console.print(f"\n[bold]{escape(title)}[/bold]")
        for number, option in enumerate(options, start=1):
            self.console.print(f"[cyan]\\[{number}][/cyan] {escape(option)}")

    def display_names(self, title: str, names: List[str]):
        """Display the names of a listing."""
        self.console.print(Panel(
            "\n".join(escape(name) for name in names),
            title=title,
            border_style="blue"
        ))

    def display_tree(self, source: str, rendering: str):
        """Display a tree dump."""
        self.console.print(Panel(
            escape(rendering),
            title=f"Regression tree of '{escape(source)}'",
            border_style="green"
        ))

    def display_query(self, prompt_text: str, branch_count: int):
        """Display the decision asked at the current node."""
        self.console.print(f"[bold cyan]❓ {escape(prompt_text)}[/bold cyan]")
        self.console.print(f"[dim]{branch_count} branches: answer 0 to {branch_count - 1}[/dim]")

    def display_prediction(self, value: str):
        """Display the predicted value."""
        self.console.print(Panel(
            f"Prediction: {escape(value)}",
            title="Prediction Result",
            border_style="green"
        ))

    def display_error(self, error_message: str):
        """Display error message."""
        self.console.print(f"[bold red]❌ Error: {escape(error_message)}[/bold red]")

    def display_info(self, info: str):
        """Display informational message."""
        self.console.print(f"[blue]ℹ️  {escape(info)}[/blue]")

    def display_warning(self, warning: str):
        """Display warning message."""
        self.console.print(f"[yellow]⚠️  WARNING: {escape(warning)}[/yellow]")

    def initialize_session(self):
        """Initialize the operator interface session."""
        pass  # Console interface doesn't need special initialization

    def cleanup_session(self):
        """Clean up the operator interface session."""
        self.console.print("[dim]Session closed.[/dim]")


class ConsoleLogger(SessionLogger):
    """Console implementation of SessionLogger."""

    def __init__(self, console: Console = None, verbose: bool = True):
        """
        Initialize console logger.

        Args:
            console: Rich Console instance (creates new one if None)
            verbose: Whether to display debug messages
        """
        self.console = console or Console()
        self.verbose = verbose

    def log_debug(self, message: str):
        """Log debug message."""
        if self.verbose:
            self.console.print(f"[dim]🔍 DEBUG: {escape(message)}[/dim]")

    def log_info(self, message: str):
        """Log info message."""
        if self.verbose:
            self.console.print(f"[blue]ℹ️  INFO: {escape(message)}[/blue]")

    def log_error(self, message: str, exc_info: bool = False):
        """Log error message."""
        self.console.print(f"[bold red]❌ ERROR: {escape(message)}[/bold red]")
        if exc_info and self.verbose:
            self.console.print_exception()

    def log_warning(self, message: str):
        """Log warning message."""
        if self.verbose:
            self.console.print(f"[yellow]⚠️  WARNING: {escape(message)}[/yellow]")

    def log_task_request(self, task: str, argument: Optional[str] = None):
        """Log task request."""
        if self.verbose:
            suffix = f"('{escape(argument)}')" if argument is not None else "()"
            self.console.print(f"[cyan]📞 TASK: {task}{suffix}[/cyan]")

    def log_task_result(self, task: str, outcome: Any, duration: float):
        """Log task result."""
        if self.verbose:
            preview = str(outcome.value) if isinstance(outcome, Enum) else str(outcome)
            if len(preview) > 50:
                preview = preview[:50] + "..."
            self.console.print(f"[cyan]📋 RESULT: {task} - {escape(preview)} ({duration:.2f}s)[/cyan]")

    def log_prediction_turn(self, index: int, turn: Any):
        """Log prediction turn."""
        if self.verbose:
            self.console.print(f"[magenta]🌳 TURN {index}: {escape(repr(turn))}[/magenta]")
