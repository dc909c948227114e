"""
Exception hierarchy for the regression-tree session client.

Channel errors and protocol errors are fatal to the session: the caller
must close the connection and reconnect. Sentinel replies from the server
are never raised, they are returned as values.
"""


class SessionError(Exception):
    """Base class for every error raised by the client."""


class ConfigError(SessionError):
    pass


# Transport-fatal

class ChannelError(SessionError):
    """The connection can no longer be trusted."""


class ConnectionFailedError(ChannelError):
    """Host resolution, connection refusal or handshake I/O failure."""


class TransportError(ChannelError):
    pass


class DecodeError(ChannelError):
    """A received unit could not be read as the type expected at this point."""


class EncodeError(ChannelError):
    pass


class ReceiveTimeout(ChannelError):
    pass


class ReceiveCancelled(ChannelError):
    pass


# Protocol-gap

class ProtocolError(SessionError):
    """The conversation left the states both sides agree on."""


class MalformedTurnError(ProtocolError):
    pass


class TurnLimitExceeded(ProtocolError):
    pass


class ProtocolStateError(ProtocolError):
    """A task was issued while another exchange was still outstanding."""


class PredictionCancelled(ProtocolError):
    """The operator abandoned a traversal halfway through."""


# Client-side guards

class NoActiveTreeError(SessionError):
    pass


class SessionUnusableError(SessionError):
    pass
