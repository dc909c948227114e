import socket
import threading
from collections import deque

import pytest

from regtree_client.core.errors import TransportError
from regtree_client.transport.channel import Channel, decode_unit, encode_unit


class ScriptedChannel:
    """In-memory channel replaying canned server replies.

    Replies go through the real envelope codec so type expectations are
    enforced exactly as on a socket.
    """

    def __init__(self, replies=()):
        self.replies = deque(replies)
        self.sent = []
        self.closed = False
        self.peer = "scripted"

    def send(self, message):
        encode_unit(message)
        self.sent.append(message)

    def receive(self, expected=None, *, timeout=None, cancel=None):
        if not self.replies:
            raise TransportError("script exhausted")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return decode_unit(encode_unit(reply).rstrip(b"\n"), expected)

    def close(self):
        self.closed = True


class ScriptedOperator:
    """Operator answering from a queue and recording everything shown to it."""

    def __init__(self, answers=()):
        self.answers = deque(answers)
        self.events = []

    def _next(self, kind, prompt):
        self.events.append((kind, prompt))
        if not self.answers:
            return None
        return self.answers.popleft()

    def read_int(self, prompt="> "):
        return self._next("read_int", prompt)

    def read_string(self, prompt="> "):
        return self._next("read_string", prompt)

    def confirm(self, question):
        return self._next("confirm", question)

    def display_message(self, content):
        self.events.append(("message", content))

    def display_menu(self, title, options):
        self.events.append(("menu", title))

    def display_names(self, title, names):
        self.events.append(("names", list(names)))

    def display_tree(self, source, rendering):
        self.events.append(("tree", source, rendering))

    def display_query(self, prompt, branch_count):
        self.events.append(("query", prompt, branch_count))

    def display_prediction(self, value):
        self.events.append(("prediction", value))

    def display_error(self, error):
        self.events.append(("error", error))

    def display_info(self, info):
        self.events.append(("info", info))

    def display_warning(self, warning):
        self.events.append(("warning", warning))

    def initialize_session(self):
        self.events.append(("initialize",))

    def cleanup_session(self):
        self.events.append(("cleanup",))

    def shown(self, kind):
        return [event for event in self.events if event[0] == kind]


class RecordingLogger:
    def __init__(self):
        self.records = []

    def log_debug(self, message):
        self.records.append(("debug", message))

    def log_info(self, message):
        self.records.append(("info", message))

    def log_warning(self, message):
        self.records.append(("warning", message))

    def log_error(self, message, exc_info=False):
        self.records.append(("error", message))

    def log_task_request(self, task, argument=None):
        self.records.append(("request", task, argument))

    def log_task_result(self, task, outcome, duration):
        self.records.append(("result", task, outcome))

    def log_prediction_turn(self, index, turn):
        self.records.append(("turn", index, turn))


class ScriptedServer:
    """Server end of a socket pair following a fixed script in a thread.

    A script is a list of ("recv", None) and ("send", value) steps. Units read
    by the server are collected in ``received`` for the test to inspect.
    """

    def __init__(self, sock, script):
        self.sock = sock
        self.script = list(script)
        self.received = []
        self.error = None
        self._buffer = b""
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def join(self, timeout=5.0):
        self._thread.join(timeout)
        assert not self._thread.is_alive(), "scripted server did not finish"
        if self.error is not None:
            raise self.error

    def _recv_line(self):
        while b"\n" not in self._buffer:
            chunk = self.sock.recv(4096)
            if not chunk:
                raise EOFError("client closed the connection")
            self._buffer += chunk
        line, self._buffer = self._buffer.split(b"\n", 1)
        return line

    def _run(self):
        try:
            for action, value in self.script:
                if action == "send":
                    self.sock.sendall(encode_unit(value))
                elif action == "raw":
                    self.sock.sendall(value)
                else:
                    self.received.append(decode_unit(self._recv_line()))
        except Exception as e:  # surfaced by join()
            self.error = e
        finally:
            self.sock.close()


@pytest.fixture
def socket_pair():
    client_sock, server_sock = socket.socketpair()
    yield client_sock, server_sock
    for sock in (client_sock, server_sock):
        try:
            sock.close()
        except OSError:
            pass


@pytest.fixture
def serve(socket_pair):
    """Return a factory: serve(script) -> (client Channel, started ScriptedServer)."""
    client_sock, server_sock = socket_pair

    def factory(script, receive_timeout=5.0):
        server = ScriptedServer(server_sock, script).start()
        channel = Channel(client_sock, receive_timeout=receive_timeout, peer="socketpair")
        return channel, server

    return factory


@pytest.fixture
def logger():
    return RecordingLogger()
