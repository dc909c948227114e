"""
Tasks package - the session protocol layered on top of the channel.

- TaskDispatcher: the six fixed request/response operations
- PredictionSession: the interactive traversal sub-protocol
- Session: connection ownership and active-tree bookkeeping
"""

from .dispatcher import TaskDispatcher
from .prediction import PredictionSession, PredictionState
from .session import Session

__all__ = [
    'TaskDispatcher',
    'PredictionSession',
    'PredictionState',
    'Session',
]
