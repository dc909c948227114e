"""
Core abstractions for the session client.

This module provides the protocol interfaces, the wire vocabulary and the
error hierarchy that the transport, task and frontend layers share.
"""

from .protocols import OperatorInterface, SessionLogger
from .messages import (
    TaskCode,
    ResultSentinel,
    NameListing,
    EmptyListing,
    ItemListing,
    PredictionTurn,
    QueryTurn,
    TerminalTurn,
    PredictionOutcome,
)

__all__ = [
    'OperatorInterface',
    'SessionLogger',
    'TaskCode',
    'ResultSentinel',
    'NameListing',
    'EmptyListing',
    'ItemListing',
    'PredictionTurn',
    'QueryTurn',
    'TerminalTurn',
    'PredictionOutcome',
]
