#!/usr/bin/env python3
"""
Agents package - components that drive a session on behalf of the operator.
"""

from .operator_loop import OperatorLoop

__all__ = [
    'OperatorLoop',
]
