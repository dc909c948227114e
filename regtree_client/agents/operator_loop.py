"""
Operator loop for driving a session from menu choices.

This module contains the interactive flow: pick a tree source, learn or load a
tree, then print it or predict with it, as many times as the operator wants on
the same connection.
"""

from typing import Callable, List, Optional

from ..core.messages import NameListing, ResultSentinel
from ..core.protocols import OperatorInterface, SessionLogger
from ..tasks.session import Session

SOURCE_MENU = [
    "Learn the regression tree from the database.",
    "Load the regression tree from the archive.",
]

ACTION_MENU = [
    "Print the regression tree.",
    "Predict with the regression tree.",
]


class OperatorLoop:
    """Menu-driven driver of a Session."""

    def __init__(
        self,
        session: Session,
        ui: OperatorInterface,
        logger: SessionLogger
    ):
        """
        Initialize the loop.

        Args:
            session: Connected session to drive
            ui: Operator interface for menus, names and prompts
            logger: Logger implementation
        """
        self.session = session
        self.ui = ui
        self.logger = logger
        self.is_running = False

    def run(self):
        """Run menu iterations until the operator quits or the session ends."""
        self.is_running = True
        self.logger.log_info("Starting operator loop")

        while self.is_running:
            source = self.acquire_tree()
            if source is None:
                continue

            if not self.use_tree(source):
                break

            answer = self.ui.confirm("Do you want to continue?")
            if not answer:
                self.stop()

    def stop(self):
        """Stop the loop."""
        if self.is_running:
            self.is_running = False
            self.logger.log_info("Stopping operator loop")

    def choose_option(self, title: str, options: List[str]) -> Optional[int]:
        """Show a menu until the operator picks a listed number; None means quit."""
        while True:
            self.ui.display_menu(title, options)
            choice = self.ui.read_int()
            if choice is None:
                return None
            if 1 <= choice <= len(options):
                return choice
            self.ui.display_warning(f"Answer a number between 1 and {len(options)}.")

    def choose_name(self, title: str, listing: NameListing) -> Optional[str]:
        """Show a listing until the operator types one of its names; None means quit."""
        self.ui.display_names(title, listing.names)
        while True:
            name = self.ui.read_string("Name: ")
            if name is None:
                return None
            if name in listing:
                return name
            self.ui.display_warning(f"'{name}' is not in the list.")

    def acquire_tree(self) -> Optional[str]:
        """
        Make a tree active on the server.

        Returns:
            The table or file the tree came from, or None to go back to the
            source menu (or end the loop, when is_running was cleared)
        """
        choice = self.choose_option("Where should the regression tree come from?", SOURCE_MENU)
        if choice is None:
            self.stop()
            return None
        if choice == 1:
            return self._acquire(
                list_names=self.session.list_tables,
                load=self.session.learn_from_table,
                empty_message="There are no tables in the database.",
                title="Choose one of the tables below",
                success_message="Training set learned successfully.",
                not_found=ResultSentinel.TABLE_NOT_FOUND,
                not_found_message="The selected table was not found; choose another one."
            )
        return self._acquire(
            list_names=self.session.list_files,
            load=self.session.load_from_file,
            empty_message="There are no files in the archive.",
            title="Choose one of the files below",
            success_message="Regression tree loaded successfully.",
            not_found=ResultSentinel.FILE_NOT_FOUND,
            not_found_message="The selected file was not found; choose another one."
        )

    def _acquire(
        self,
        list_names: Callable[[], NameListing],
        load: Callable[[str], ResultSentinel],
        empty_message: str,
        title: str,
        success_message: str,
        not_found: ResultSentinel,
        not_found_message: str
    ) -> Optional[str]:
        listing = list_names()
        if listing.is_empty:
            self.ui.display_warning(empty_message)
            return None

        while True:
            name = self.choose_name(title, listing)
            if name is None:
                self.stop()
                return None

            self.ui.display_info("Starting acquisition...")
            result = load(name)
            if result is ResultSentinel.OK:
                self.ui.display_info(success_message)
                return name
            if result is ResultSentinel.DATA_ERROR:
                self.ui.display_error("The server could not process the training set.")
                self.stop()
                return None
            if result is not_found:
                self.ui.display_warning(not_found_message)

    def use_tree(self, source: str) -> bool:
        """
        Print or predict with the active tree.

        Returns:
            False if the operator quit instead of choosing
        """
        choice = self.choose_option("What do you want to do with the tree?", ACTION_MENU)
        if choice is None:
            self.stop()
            return False

        if choice == 1:
            self.ui.display_tree(source, self.session.render_tree())
        else:
            self.ui.display_info(f"Prediction with the regression tree of '{source}'.")
            outcome = self.session.predict(self.ui)
            self.logger.log_info(f"Prediction {outcome.value} reached after {outcome.depth} choice(s)")
        return True
