#!/usr/bin/env python3
"""
Channel - ordered, bidirectional delivery of typed units over one TCP connection.

Each unit travels as one line of UTF-8 JSON holding an envelope
``{"type": <tag>, "value": <payload>}``. The tag lets the receiver detect a
type mismatch instead of silently misreading a reply.
"""

import json
import logging
import socket
import threading
import time
from typing import Any, List, Optional, Union

from ..core.errors import (
    ConnectionFailedError,
    DecodeError,
    EncodeError,
    ReceiveCancelled,
    ReceiveTimeout,
    TransportError,
)

logger = logging.getLogger(__name__)

Message = Union[int, float, str, List[str]]

MAX_LINE_BYTES = 1 << 20
POLL_INTERVAL = 0.1
RECV_CHUNK = 4096

_TAGS = {int: "int", float: "float", str: "str", list: "list"}

# Sentinel meaning "use the channel's configured receive timeout"
_DEFAULT = object()


def encode_unit(message: Message) -> bytes:
    """Wrap a message in its type envelope and serialize it as one line."""
    if isinstance(message, bool):
        raise EncodeError("Booleans are not part of the wire vocabulary")
    if isinstance(message, int):
        tag, value = "int", int(message)
    elif isinstance(message, float):
        tag, value = "float", message
    elif isinstance(message, str):
        tag, value = "str", message
    elif isinstance(message, list) and all(isinstance(item, str) for item in message):
        tag, value = "list", list(message)
    else:
        raise EncodeError(f"Cannot send value of type {type(message).__name__}")

    try:
        line = json.dumps({"type": tag, "value": value}, allow_nan=False)
    except ValueError as e:
        raise EncodeError(f"Cannot encode {message!r}: {e}") from e
    return line.encode("utf-8") + b"\n"


def _payload_matches(tag: Any, value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if tag == "int":
        return isinstance(value, int)
    if tag == "float":
        return isinstance(value, (int, float))
    if tag == "str":
        return isinstance(value, str)
    if tag == "list":
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return False


def decode_unit(line: bytes, expected: Optional[type] = None) -> Message:
    """
    Parse one line into its payload.

    Args:
        line: Raw line without the trailing newline
        expected: Python type required at this point of the protocol
            (int, float, str or list), or None to accept any tag

    Returns:
        The payload, typed according to its envelope tag
    """
    try:
        envelope = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Undecodable unit: {e}") from e

    if not isinstance(envelope, dict) or set(envelope) != {"type", "value"}:
        raise DecodeError(f"Malformed envelope: {line[:80]!r}")

    tag, value = envelope["type"], envelope["value"]
    if not _payload_matches(tag, value):
        raise DecodeError(f"Unit tagged {tag!r} carries a {type(value).__name__}")

    if expected is not None:
        expected_tag = _TAGS.get(expected)
        if expected_tag is None:
            raise ValueError(f"Unsupported expected type: {expected}")
        if tag != expected_tag:
            raise DecodeError(f"Expected a {expected_tag} unit, got {tag}")

    if tag == "float":
        return float(value)
    return value


class Channel:
    """
    A persistent connection carrying typed units in both directions.

    The channel is the only owner of its socket. It is closed exactly once;
    any operation after that raises TransportError.
    """

    def __init__(self, sock: socket.socket, receive_timeout: Optional[float] = None, peer: str = ""):
        """
        Wrap an already connected socket.

        Args:
            sock: Connected stream socket
            receive_timeout: Default seconds to wait in receive() (None blocks forever)
            peer: Human-readable peer address used in log messages
        """
        self._sock = sock
        self._buffer = bytearray()
        self._closed = False
        self.receive_timeout = receive_timeout
        self.peer = peer

    @classmethod
    def open(
        cls,
        host: str,
        port: int,
        *,
        connect_timeout: Optional[float] = None,
        receive_timeout: Optional[float] = None
    ) -> "Channel":
        """
        Resolve ``host`` and connect to it.

        Raises:
            ConnectionFailedError: resolution failure, refused connection or
                I/O error during the handshake
        """
        peer = f"{host}:{port}"
        logger.info(f"Connecting to {peer}")
        try:
            sock = socket.create_connection((host, port), timeout=connect_timeout)
        except OSError as e:
            raise ConnectionFailedError(f"Cannot connect to {peer}: {e}") from e
        sock.settimeout(None)
        logger.info(f"Connected to {peer}")
        return cls(sock, receive_timeout=receive_timeout, peer=peer)

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Message) -> None:
        """Transmit one unit."""
        self._ensure_open()
        data = encode_unit(message)
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise TransportError(f"Send to {self.peer} failed: {e}") from e
        logger.debug(f"-> {data.rstrip().decode('utf-8')}")

    def receive(
        self,
        expected: Optional[type] = None,
        *,
        timeout: Any = _DEFAULT,
        cancel: Optional[threading.Event] = None
    ) -> Message:
        """
        Block until one unit is available and return its payload.

        Args:
            expected: Type the protocol state requires next, or None
            timeout: Seconds to wait; defaults to the channel's receive_timeout
            cancel: Event that aborts the wait when set

        Raises:
            TransportError: the peer closed the connection or I/O failed
            DecodeError: the unit is malformed or not of the expected type
            ReceiveTimeout: nothing arrived in time
            ReceiveCancelled: ``cancel`` was set while waiting
        """
        self._ensure_open()
        if timeout is _DEFAULT:
            timeout = self.receive_timeout
        line = self._read_line(timeout, cancel)
        logger.debug(f"<- {line.decode('utf-8', errors='replace')}")
        return decode_unit(line, expected)

    def _read_line(self, timeout: Optional[float], cancel: Optional[threading.Event]) -> bytes:
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            newline = self._buffer.find(b"\n")
            if newline >= 0:
                line = bytes(self._buffer[:newline])
                del self._buffer[:newline + 1]
                return line
            if len(self._buffer) > MAX_LINE_BYTES:
                raise DecodeError(f"Unit exceeds {MAX_LINE_BYTES} bytes")

            if cancel is not None and cancel.is_set():
                raise ReceiveCancelled(f"Receive from {self.peer} cancelled")

            wait = POLL_INTERVAL if cancel is not None else None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ReceiveTimeout(f"No reply from {self.peer} within {timeout}s")
                wait = remaining if wait is None else min(wait, remaining)

            self._sock.settimeout(wait)
            try:
                chunk = self._sock.recv(RECV_CHUNK)
            except socket.timeout:
                continue
            except OSError as e:
                raise TransportError(f"Receive from {self.peer} failed: {e}") from e
            finally:
                self._sock.settimeout(None)

            if not chunk:
                raise TransportError(f"Connection closed by {self.peer}")
            self._buffer.extend(chunk)

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransportError("Channel is closed")

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # peer already gone
        self._sock.close()
        logger.info(f"Disconnected from {self.peer}")

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
