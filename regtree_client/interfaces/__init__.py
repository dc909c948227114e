"""
Interface implementations for different user interfaces and loggers.

This module contains concrete implementations of the OperatorInterface
and SessionLogger protocols for different frontends.
"""
