"""
PredictionSession - interactive traversal of a tree known only to the server.

After the PREDICT_TREE request the server drives a variable-length exchange:

    QUERY, <prompt>, <branch count>  ->  client answers with a branch index
    ...
    OK, <predicted value>            ->  traversal over

The client supplies the navigation choice at each internal node; the server
supplies the structure. Each turn is decoded into a QueryTurn or TerminalTurn
at the wire boundary; any other tag is a MalformedTurnError.
"""

import threading
from enum import Enum
from typing import List, Optional

from ..core.errors import MalformedTurnError, PredictionCancelled, TurnLimitExceeded
from ..core.messages import (
    QUERY_TAG,
    TERMINAL_TAG,
    PredictionOutcome,
    PredictionTurn,
    QueryTurn,
    TerminalTurn,
    decode_branch_count,
    render_value,
)
from ..core.protocols import OperatorInterface, SessionLogger
from ..transport.channel import Channel


class PredictionState(Enum):
    STARTED = "started"
    AWAITING_TURN = "awaiting_turn"
    QUERY = "query"
    TERMINAL = "terminal"
    FAILED = "failed"


class PredictionSession:
    """State machine for one traversal. Not reusable once finished."""

    def __init__(
        self,
        channel: Channel,
        operator: OperatorInterface,
        logger: SessionLogger,
        max_turns: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ):
        """
        Initialize the session. The PREDICT_TREE code must already have been sent.

        Args:
            channel: Channel the request was sent on
            operator: Source of branch choices and sink for prompts
            logger: Logger for recording each turn
            max_turns: Maximum number of queries accepted before giving up
            cancel: Event that aborts a blocking receive when set
        """
        self.channel = channel
        self.operator = operator
        self.logger = logger
        self.max_turns = max_turns
        self.cancel = cancel
        self.state = PredictionState.STARTED
        self.choices: List[int] = []

    def _receive(self, expected: Optional[type] = None):
        return self.channel.receive(expected, cancel=self.cancel)

    def next_turn(self) -> PredictionTurn:
        """Receive and decode one complete turn from the server."""
        tag = self._receive()
        if tag == QUERY_TAG:
            prompt = self._receive(str)
            branch_count = decode_branch_count(self._receive())
            return QueryTurn(prompt=prompt, branch_count=branch_count)
        if tag == TERMINAL_TAG:
            return TerminalTurn(value=render_value(self._receive()))
        raise MalformedTurnError(f"Unknown prediction tag {tag!r}")

    def ask_choice(self, branch_count: int) -> int:
        """
        Ask the operator for a branch until it lies in [0, branch_count).

        Out-of-range answers are rejected locally; they never reach the wire.
        """
        last = branch_count - 1
        while True:
            choice = self.operator.read_int(f"Branch [0-{last}]: ")
            if choice is None:
                raise PredictionCancelled("Prediction abandoned by the operator")
            if 0 <= choice < branch_count:
                return choice
            self.operator.display_warning(f"Choose a branch between 0 and {last}.")

    def run(self) -> PredictionOutcome:
        """Drive the traversal to a leaf and return the prediction."""
        if self.state is not PredictionState.STARTED:
            raise RuntimeError("A PredictionSession can only be run once")

        self.state = PredictionState.AWAITING_TURN
        try:
            while True:
                turn = self.next_turn()
                self.logger.log_prediction_turn(len(self.choices), turn)

                if isinstance(turn, TerminalTurn):
                    self.state = PredictionState.TERMINAL
                    self.operator.display_prediction(turn.value)
                    return PredictionOutcome(value=turn.value, choices=self.choices)

                self.state = PredictionState.QUERY
                if self.max_turns is not None and len(self.choices) >= self.max_turns:
                    raise TurnLimitExceeded(f"Tree deeper than {self.max_turns} levels")

                self.operator.display_query(turn.prompt, turn.branch_count)
                choice = self.ask_choice(turn.branch_count)
                self.channel.send(choice)
                self.choices.append(choice)
                self.state = PredictionState.AWAITING_TURN
        except Exception:
            self.state = PredictionState.FAILED
            raise
