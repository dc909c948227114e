"""
Session - process-scoped state of one connection to the tree server.

Holds the open channel and remembers which table or file the active tree came
from. The channel is released exactly once, on every exit path, when the
session is used as a context manager.
"""

import logging
import threading
from typing import Optional

from ..config import ClientConfig
from ..core.errors import NoActiveTreeError, SessionUnusableError
from ..core.messages import NameListing, PredictionOutcome, ResultSentinel
from ..core.protocols import OperatorInterface, SessionLogger
from ..transport.channel import Channel
from .dispatcher import TaskDispatcher

logger = logging.getLogger(__name__)


class Session:
    """A connection plus the identity of the tree currently held by the server."""

    def __init__(
        self,
        channel: Channel,
        logger: SessionLogger,
        max_prediction_turns: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ):
        """
        Initialize the session around an open channel it takes ownership of.

        Args:
            channel: Open channel to the tree server
            logger: Logger for protocol-level events
            max_prediction_turns: Upper bound on queries per prediction
            cancel: Event that aborts any blocking receive when set
        """
        self.channel = channel
        self.logger = logger
        self.max_prediction_turns = max_prediction_turns
        self.dispatcher = TaskDispatcher(channel, logger, cancel=cancel)
        self.active_source: Optional[str] = None
        self.usable = True

    @classmethod
    def connect(
        cls,
        config: ClientConfig,
        logger: SessionLogger,
        cancel: Optional[threading.Event] = None
    ) -> "Session":
        """Open a channel as described by ``config`` and wrap it in a session."""
        channel = Channel.open(
            config.host,
            config.port,
            connect_timeout=config.connect_timeout,
            receive_timeout=config.receive_timeout
        )
        return cls(channel, logger, max_prediction_turns=config.max_prediction_turns, cancel=cancel)

    @property
    def has_active_tree(self) -> bool:
        return self.active_source is not None

    def _ensure_usable(self) -> None:
        if not self.usable:
            raise SessionUnusableError("The server reported a data error; reconnect to continue")

    def _ensure_tree(self) -> None:
        self._ensure_usable()
        if self.active_source is None:
            raise NoActiveTreeError("Learn or load a tree before printing or predicting")

    def list_tables(self) -> NameListing:
        self._ensure_usable()
        return self.dispatcher.list_tables()

    def list_files(self) -> NameListing:
        self._ensure_usable()
        return self.dispatcher.list_files()

    def learn_from_table(self, table: str) -> ResultSentinel:
        """Learn a tree from ``table``; on OK it becomes the active tree."""
        self._ensure_usable()
        result = self.dispatcher.learn_from_table(table)
        if result is ResultSentinel.OK:
            self.active_source = table
        elif result is ResultSentinel.DATA_ERROR:
            # server-side tree state is undefined from here on
            self.active_source = None
            self.usable = False
            self.logger.log_error(f"Data error while learning from table '{table}'")
        return result

    def load_from_file(self, file_name: str) -> ResultSentinel:
        """Load a serialized tree; on OK it becomes the active tree."""
        self._ensure_usable()
        result = self.dispatcher.load_from_file(file_name)
        if result is ResultSentinel.OK:
            self.active_source = file_name
        return result

    def render_tree(self) -> str:
        self._ensure_tree()
        return self.dispatcher.render_tree()

    def predict(self, operator: OperatorInterface) -> PredictionOutcome:
        self._ensure_tree()
        return self.dispatcher.predict(operator, max_turns=self.max_prediction_turns)

    def close(self) -> None:
        self.channel.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            logger.debug(f"Closing session after {exc_type.__name__}: {exc}")
        self.close()
