"""
Client for interactive sessions with a regression-tree learning server.

The operator selects a data source, has the server learn a tree from a
database table or load one from its archive, then either prints the tree or
walks it interactively to obtain a prediction. The tree itself never leaves
the server: prediction is a multi-turn exchange in which the server asks one
question per node and the client answers with the chosen branch.

Key Components:
- Channel: Typed, line-oriented TCP connection
- TaskDispatcher: The six fixed request/response operations
- PredictionSession: The interactive traversal sub-protocol
- Session: Connection ownership and active-tree bookkeeping
- OperatorLoop: Menu-driven driver used by the console frontend

Example Usage:
    ```python
    from regtree_client.config import ClientConfig
    from regtree_client.core import ResultSentinel
    from regtree_client.tasks import Session
    from regtree_client.interfaces.console_interface import ConsoleOperatorInterface, ConsoleLogger

    config = ClientConfig(host="localhost", port=8080)
    ui = ConsoleOperatorInterface()

    with Session.connect(config, ConsoleLogger(verbose=False)) as session:
        if session.learn_from_table("sales") is ResultSentinel.OK:
            print(session.render_tree())
            outcome = session.predict(ui)
    ```
"""

__all__ = [
    # Main interfaces live in the sub-packages
]

__version__ = '0.1.0'
