"""
Protocol interfaces for the session client.

These protocols define the contracts that frontend implementations must follow
to provide operator input, display and logging functionality.
"""

from typing import Protocol, Optional, Any, List


class OperatorInterface(Protocol):
    """Protocol defining the interface for operator interactions."""

    def read_int(self, prompt: str = "> ") -> Optional[int]:
        """
        Read an integer from the operator.

        Implementations keep asking until the text parses as an integer.

        Args:
            prompt: The prompt to display to the operator

        Returns:
            The integer, or None if the operator wants to quit
        """
        ...

    def read_string(self, prompt: str = "> ") -> Optional[str]:
        """
        Read a line of text from the operator.

        Args:
            prompt: The prompt to display to the operator

        Returns:
            The stripped text, or None if the operator wants to quit
        """
        ...

    def confirm(self, question: str) -> Optional[bool]:
        """
        Ask a yes/no question until the operator answers y or n.

        Returns:
            True for yes, False for no, None if the operator wants to quit
        """
        ...

    def display_message(self, content: str) -> None:
        """
        Display a message.

        Args:
            content: The message content to display
        """
        ...

    def display_menu(self, title: str, options: List[str]) -> None:
        """
        Display a numbered menu. Option i is shown with the number i + 1.

        Args:
            title: Heading for the menu
            options: Option labels, in order
        """
        ...

    def display_names(self, title: str, names: List[str]) -> None:
        """
        Display the candidate table or file names of a listing.

        Args:
            title: Heading for the listing
            names: Names the operator may choose from
        """
        ...

    def display_tree(self, source: str, rendering: str) -> None:
        """
        Display the text rendering of a tree.

        Args:
            source: Table or file the tree was obtained from
            rendering: Server-provided structural dump
        """
        ...

    def display_query(self, prompt: str, branch_count: int) -> None:
        """
        Display the decision asked at the current node of a prediction.

        Args:
            prompt: Server-provided description of the node's split
            branch_count: Number of branches the operator chooses from
        """
        ...

    def display_prediction(self, value: str) -> None:
        """
        Display the predicted value reached at a leaf.

        Args:
            value: Predicted value as text
        """
        ...

    def display_error(self, error: str) -> None:
        """
        Display an error message.

        Args:
            error: Error message to display
        """
        ...

    def display_info(self, info: str) -> None:
        """
        Display informational message.

        Args:
            info: Information message to display
        """
        ...

    def display_warning(self, warning: str) -> None:
        """
        Display warning message.

        Args:
            warning: Warning message to display
        """
        ...

    def initialize_session(self) -> None:
        """Initialize the operator interface session."""
        ...

    def cleanup_session(self) -> None:
        """Clean up the operator interface session."""
        ...


class SessionLogger(Protocol):
    """Protocol defining the interface for logging."""

    def log_debug(self, message: str) -> None:
        """
        Log debug message.

        Args:
            message: Debug message to log
        """
        ...

    def log_info(self, message: str) -> None:
        """
        Log info message.

        Args:
            message: Info message to log
        """
        ...

    def log_warning(self, message: str) -> None:
        """
        Log warning message.

        Args:
            message: Warning message to log
        """
        ...

    def log_error(self, message: str, exc_info: bool = False) -> None:
        """
        Log error message.

        Args:
            message: Error message to log
            exc_info: Whether to include exception information
        """
        ...

    def log_task_request(self, task: str, argument: Optional[str] = None) -> None:
        """
        Log a task request sent to the server.

        Args:
            task: Name of the task code sent
            argument: Table or file name sent with it (optional)
        """
        ...

    def log_task_result(self, task: str, outcome: Any, duration: float) -> None:
        """
        Log the reply to a task request.

        Args:
            task: Name of the task code that was sent
            outcome: Decoded reply
            duration: Round-trip duration in seconds
        """
        ...

    def log_prediction_turn(self, index: int, turn: Any) -> None:
        """
        Log one turn of an interactive prediction.

        Args:
            index: Zero-based turn number within the traversal
            turn: Decoded turn received from the server
        """
        ...
