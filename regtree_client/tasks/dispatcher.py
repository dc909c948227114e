#!/usr/bin/env python3
"""
TaskDispatcher - the six top-level operations as synchronous request/response
exchanges over a Channel.

Every call sends the task code, optionally one string argument, then receives
exactly one reply interpreted according to the call that was made.
"""

import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from ..core.errors import ProtocolStateError
from ..core.messages import (
    NameListing,
    PredictionOutcome,
    ResultSentinel,
    TaskCode,
    decode_listing,
    decode_result,
)
from ..core.protocols import OperatorInterface, SessionLogger
from ..transport.channel import Channel
from .prediction import PredictionSession


class TaskDispatcher:
    """
    Issues tasks over a channel it does not own.

    Only one exchange may be outstanding at a time. A failure in the middle of
    an exchange leaves the channel desynchronised, so the dispatcher refuses
    all further tasks after one.
    """

    def __init__(
        self,
        channel: Channel,
        logger: SessionLogger,
        cancel: Optional[threading.Event] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            channel: Open channel to the tree server
            logger: Logger for recording task exchanges
            cancel: Event that aborts any blocking receive when set
        """
        self.channel = channel
        self.logger = logger
        self.cancel = cancel
        self._in_flight: Optional[TaskCode] = None
        self._failure: Optional[BaseException] = None

    @property
    def in_flight(self) -> Optional[TaskCode]:
        """Task whose exchange is currently outstanding, if any."""
        return self._in_flight

    @contextmanager
    def _exchange(self, task: TaskCode, argument: Optional[str] = None) -> Iterator[None]:
        if self._failure is not None:
            raise ProtocolStateError(f"Channel desynchronised by an earlier failure: {self._failure}")
        if self._in_flight is not None:
            raise ProtocolStateError(
                f"Cannot issue {task.name} while {self._in_flight.name} is outstanding"
            )

        self._in_flight = task
        self.logger.log_task_request(task.name, argument)
        try:
            self.channel.send(task)
            if argument is not None:
                self.channel.send(argument)
            yield
        except BaseException as e:
            self._failure = e
            raise
        finally:
            self._in_flight = None

    def _call(
        self,
        task: TaskCode,
        decode: Callable[[Any], Any],
        argument: Optional[str] = None,
        expected: Optional[type] = None
    ) -> Any:
        start_time = time.time()
        with self._exchange(task, argument):
            outcome = decode(self.channel.receive(expected, cancel=self.cancel))
        self.logger.log_task_result(task.name, outcome, time.time() - start_time)
        return outcome

    def list_tables(self) -> NameListing:
        """Ask the server for the tables of its database."""
        return self._call(
            TaskCode.GET_TABLES_FROM_DB,
            lambda reply: decode_listing(reply, ResultSentinel.NO_TABLES_FOUND)
        )

    def list_files(self) -> NameListing:
        """Ask the server for the serialized trees in its archive."""
        return self._call(
            TaskCode.GET_FILES_FROM_ARCHIVE,
            lambda reply: decode_listing(reply, ResultSentinel.NO_FILES_FOUND)
        )

    def learn_from_table(self, table: str) -> ResultSentinel:
        """
        Ask the server to learn a tree from the training set in ``table``.

        Returns:
            OK, DATA_ERROR or TABLE_NOT_FOUND
        """
        return self._call(
            TaskCode.LEARN_TREE_FROM_DB,
            lambda reply: decode_result(
                reply,
                (ResultSentinel.OK, ResultSentinel.DATA_ERROR, ResultSentinel.TABLE_NOT_FOUND)
            ),
            argument=table,
            expected=str
        )

    def load_from_file(self, file_name: str) -> ResultSentinel:
        """
        Ask the server to make a previously serialized tree the active one.

        Returns:
            OK or FILE_NOT_FOUND
        """
        return self._call(
            TaskCode.GET_TREE_FROM_FILE,
            lambda reply: decode_result(reply, (ResultSentinel.OK, ResultSentinel.FILE_NOT_FOUND)),
            argument=file_name,
            expected=str
        )

    def render_tree(self) -> str:
        """Fetch the human-readable dump of the active tree."""
        return self._call(TaskCode.PRINT_TREE, lambda reply: reply, expected=str)

    def predict(self, operator: OperatorInterface, max_turns: Optional[int] = None) -> PredictionOutcome:
        """
        Walk the active tree interactively, the operator choosing each branch.

        The exchange stays outstanding for the whole traversal, so no other
        task can be issued until it completes.
        """
        start_time = time.time()
        with self._exchange(TaskCode.PREDICT_TREE):
            session = PredictionSession(
                self.channel,
                operator,
                self.logger,
                max_turns=max_turns,
                cancel=self.cancel
            )
            outcome = session.run()
        self.logger.log_task_result(TaskCode.PREDICT_TREE.name, outcome, time.time() - start_time)
        return outcome
