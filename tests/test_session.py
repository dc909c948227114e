import socket

import pytest

from conftest import ScriptedChannel, ScriptedOperator
from regtree_client.agents.operator_loop import OperatorLoop
from regtree_client.config import ClientConfig
from regtree_client.core.errors import (
    ConnectionFailedError,
    NoActiveTreeError,
    SessionUnusableError,
    TransportError,
    TurnLimitExceeded,
)
from regtree_client.core.messages import ResultSentinel
from regtree_client.tasks.session import Session


def test_learn_records_active_source(logger):
    session = Session(ScriptedChannel(["ok"]), logger)
    assert not session.has_active_tree
    assert session.learn_from_table("sales") is ResultSentinel.OK
    assert session.active_source == "sales"


def test_load_records_active_source(logger):
    session = Session(ScriptedChannel(["fileNotFound", "ok"]), logger)
    assert session.load_from_file("missing.tree") is ResultSentinel.FILE_NOT_FOUND
    assert session.active_source is None
    assert session.load_from_file("sales.tree") is ResultSentinel.OK
    assert session.active_source == "sales.tree"


def test_retry_after_table_not_found_on_same_connection(logger):
    channel = ScriptedChannel(["tableNotFound", "ok"])
    session = Session(channel, logger)
    assert session.learn_from_table("nope") is ResultSentinel.TABLE_NOT_FOUND
    assert session.usable
    assert session.learn_from_table("sales") is ResultSentinel.OK
    assert not channel.closed


def test_data_error_makes_session_unusable(logger):
    session = Session(ScriptedChannel(["ok", "dataError"]), logger)
    session.learn_from_table("sales")
    assert session.learn_from_table("broken") is ResultSentinel.DATA_ERROR
    assert not session.usable
    assert session.active_source is None
    with pytest.raises(SessionUnusableError):
        session.list_tables()
    with pytest.raises(SessionUnusableError):
        session.render_tree()
    assert any(record[0] == "error" for record in logger.records)


def test_print_and_predict_need_an_active_tree(logger):
    channel = ScriptedChannel([])
    session = Session(channel, logger)
    with pytest.raises(NoActiveTreeError):
        session.render_tree()
    with pytest.raises(NoActiveTreeError):
        session.predict(ScriptedOperator())
    assert channel.sent == []


def test_predict_uses_configured_turn_limit(logger):
    replies = ["ok", "QUERY", "a?", 2, "QUERY", "b?", 2]
    session = Session(ScriptedChannel(replies), logger, max_prediction_turns=1)
    session.learn_from_table("sales")
    with pytest.raises(TurnLimitExceeded):
        session.predict(ScriptedOperator([0, 0]))


def test_channel_closed_on_error_exit(logger):
    channel = ScriptedChannel([TransportError("reset")])
    with pytest.raises(TransportError):
        with Session(channel, logger) as session:
            session.list_tables()
    assert channel.closed


def test_channel_closed_on_normal_exit(logger):
    channel = ScriptedChannel([])
    with Session(channel, logger):
        pass
    assert channel.closed


def test_connect_from_config(logger):
    listener = socket.socket()
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    port = listener.getsockname()[1]
    try:
        config = ClientConfig(host="127.0.0.1", port=port, receive_timeout=1.5, max_prediction_turns=7)
        with Session.connect(config, logger) as session:
            assert session.channel.receive_timeout == 1.5
            assert session.max_prediction_turns == 7
        assert session.channel.closed
    finally:
        listener.close()


def test_connect_refused(logger):
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(ConnectionFailedError):
        Session.connect(ClientConfig(host="127.0.0.1", port=port, connect_timeout=2.0), logger)


# End-to-end scenarios over a real socket

def test_learn_then_print(serve, logger):
    channel, server = serve([
        ("recv", None), ("recv", None), ("send", "ok"),
        ("recv", None), ("send", "[age <= 30] 12.0\n[age > 30] 42.5"),
    ])
    with Session(channel, logger) as session:
        assert session.learn_from_table("sales") is ResultSentinel.OK
        rendering = session.render_tree()
    server.join()
    assert rendering
    assert server.received == [3, "sales", 5]


def test_interactive_prediction(serve, logger):
    channel, server = serve([
        ("recv", None), ("recv", None), ("send", "ok"),
        ("recv", None),
        ("send", "QUERY"), ("send", "age <= 30?"), ("send", 2),
        ("recv", None),
        ("send", "QUERY"), ("send", "income > 1000?"), ("send", 3),
        ("recv", None),
        ("send", "OK"), ("send", "42.5"),
    ])
    operator = ScriptedOperator([0, 5, 2])
    with Session(channel, logger) as session:
        session.learn_from_table("sales")
        outcome = session.predict(operator)
    server.join()
    assert outcome.value == "42.5"
    assert outcome.choices == [0, 2]
    assert server.received == [3, "sales", 6, 0, 2]
    assert operator.shown("prediction") == [("prediction", "42.5")]


def test_missing_file_reprompts_on_same_connection(serve, logger):
    channel, server = serve([
        ("recv", None), ("send", ["sales.tree", "missing.tree"]),
        ("recv", None), ("recv", None), ("send", "fileNotFound"),
        ("recv", None), ("recv", None), ("send", "ok"),
        ("recv", None), ("send", "[age <= 30] 12.0"),
    ])
    operator = ScriptedOperator([2, "missing.tree", "sales.tree", 1, False])
    with Session(channel, logger) as session:
        OperatorLoop(session, operator, logger).run()
    server.join()
    assert server.received == [2, 4, "missing.tree", 4, "sales.tree", 5]
    assert operator.shown("tree") == [("tree", "sales.tree", "[age <= 30] 12.0")]
    assert len(operator.shown("warning")) == 1
    assert channel.closed
