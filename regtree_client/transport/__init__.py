"""
Transport package - the typed, line-oriented connection to the tree server.
"""

from .channel import Channel, encode_unit, decode_unit

__all__ = [
    'Channel',
    'encode_unit',
    'decode_unit',
]
