"""
Wire vocabulary and typed messages exchanged with the tree-learning server.

The server multiplexes semantic outcomes (sentinels) onto the same channel as
ordinary data. Everything that arrives is decoded here, at the boundary, into
closed types so the rest of the client never compares raw strings.
"""

from enum import Enum, IntEnum
from typing import Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter, ValidationError

from .errors import DecodeError


class TaskCode(IntEnum):
    """The six operations the server supports, sent as the first unit of a request."""

    GET_TABLES_FROM_DB = 1
    GET_FILES_FROM_ARCHIVE = 2
    LEARN_TREE_FROM_DB = 3
    GET_TREE_FROM_FILE = 4
    PRINT_TREE = 5
    PREDICT_TREE = 6


class ResultSentinel(str, Enum):
    """Successful-but-negative (or plain successful) outcomes sent in place of data."""

    OK = "ok"
    DATA_ERROR = "dataError"
    TABLE_NOT_FOUND = "tableNotFound"
    FILE_NOT_FOUND = "fileNotFound"
    NO_TABLES_FOUND = "NoTablesFound"
    NO_FILES_FOUND = "NoFilesFound"

    @classmethod
    def parse(cls, value: Any) -> Optional["ResultSentinel"]:
        """Return the sentinel whose wire string equals ``value``, or None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Tags opening each turn of the prediction sub-protocol
QUERY_TAG = "QUERY"
TERMINAL_TAG = "OK"


class EmptyListing(BaseModel):
    """The database or archive has nothing to offer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["empty"] = "empty"

    @property
    def is_empty(self) -> bool:
        return True

    @property
    def names(self) -> List[str]:
        return []

    def __contains__(self, name: object) -> bool:
        return False


class ItemListing(BaseModel):
    """Candidate table or file names, in server order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["items"] = "items"
    names: List[str] = Field(min_length=1)

    @property
    def is_empty(self) -> bool:
        return False

    def __contains__(self, name: object) -> bool:
        return name in self.names


NameListing = Union[EmptyListing, ItemListing]


class QueryTurn(BaseModel):
    """An internal node: the operator must pick one of ``branch_count`` branches."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["query"] = "query"
    prompt: str
    branch_count: PositiveInt


class TerminalTurn(BaseModel):
    """A leaf: the traversal is over and ``value`` is the prediction."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terminal"] = "terminal"
    value: str


PredictionTurn = Union[QueryTurn, TerminalTurn]


class PredictionOutcome(BaseModel):
    """Result of a completed traversal."""

    model_config = ConfigDict(frozen=True)

    value: str
    choices: List[int] = Field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.choices)


_BRANCH_COUNT = TypeAdapter(PositiveInt)


def decode_listing(reply: Any, sentinel: ResultSentinel) -> NameListing:
    """
    Decode a listing reply into an explicit empty/items variant.

    The server signals emptiness either with the bare sentinel string or with a
    list holding the sentinel. The sentinel is stripped from any list so it can
    never be offered as a selectable name.

    Args:
        reply: Raw unit received after a listing request
        sentinel: The listing's "nothing found" sentinel

    Returns:
        EmptyListing or ItemListing
    """
    if isinstance(reply, str):
        if reply == sentinel.value:
            return EmptyListing()
        raise DecodeError(f"Unexpected listing reply {reply!r}")
    if isinstance(reply, list):
        names = [name for name in reply if name != sentinel.value]
        if not names:
            return EmptyListing()
        return ItemListing(names=names)
    raise DecodeError(f"Listing reply must be a name list, got {type(reply).__name__}")


def decode_result(reply: Any, allowed: Iterable[ResultSentinel]) -> ResultSentinel:
    """Decode a task outcome, rejecting sentinels the task cannot produce."""
    allowed = tuple(allowed)
    sentinel = ResultSentinel.parse(reply)
    if sentinel is None or sentinel not in allowed:
        expected = ", ".join(s.value for s in allowed)
        raise DecodeError(f"Expected one of [{expected}], got {reply!r}")
    return sentinel


def decode_branch_count(value: Any) -> int:
    """Decode a node's child count; numeric strings are accepted."""
    try:
        return _BRANCH_COUNT.validate_python(value)
    except ValidationError as e:
        raise DecodeError(f"Invalid branch count {value!r}") from e


def render_value(value: Any) -> str:
    """Render a predicted value received from the server as text."""
    if isinstance(value, list):
        raise DecodeError("Predicted value must be a scalar")
    return str(value)
