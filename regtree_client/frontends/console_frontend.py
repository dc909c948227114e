"""
Console frontend for the regression-tree session client.

Connects to a tree server, then lets the operator learn or load trees, print
them and predict with them until they choose to stop.
"""

import argparse
import logging
from rich.console import Console
from rich.logging import RichHandler

from ..agents.operator_loop import OperatorLoop
from ..config import ClientConfig
from ..core.errors import ConfigError, ConnectionFailedError, SessionError
from ..interfaces.console_interface import ConsoleOperatorInterface, ConsoleLogger
from ..tasks.session import Session

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Interactive client for a regression-tree learning server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m regtree_client.frontends.console_frontend localhost 8080
  python -m regtree_client.frontends.console_frontend 10.0.0.5 8080 --receive-timeout 30
        """
    )

    parser.add_argument(
        "host",
        help="Host name or address of the tree server"
    )

    parser.add_argument(
        "port",
        type=int,
        help="TCP port of the tree server"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="YAML file with default settings (command line values win)"
    )

    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        help="Seconds allowed for connecting (default: no limit)"
    )

    parser.add_argument(
        "--receive-timeout",
        type=float,
        default=None,
        help="Seconds to wait for each server reply (default: no limit)"
    )

    parser.add_argument(
        "--max-turns",
        type=int,
        default=None,
        help="Maximum number of questions in one prediction (default: no limit)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose logging"
    )

    return parser


def parse_arguments(argv=None):
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def config_from_arguments(args) -> ClientConfig:
    """Merge parsed arguments with the optional config file."""
    return ClientConfig.from_sources(
        {
            "host": args.host,
            "port": args.port,
            "connect_timeout": args.connect_timeout,
            "receive_timeout": args.receive_timeout,
            "max_prediction_turns": args.max_turns,
            "verbose": args.verbose,
        },
        config_path=args.config
    )


def open_session(config: ClientConfig, console: Console, session_logger: ConsoleLogger) -> Session:
    """Connect to the server with a status spinner."""
    with console.status(f"[bold green]Connecting to {config.host}:{config.port}..."):
        session = Session.connect(config, session_logger)

    console.print(f"[bold green]✅ Connected to server {config.host}:{config.port}[/bold green]")
    console.print()
    return session


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    console = Console()
    ui = ConsoleOperatorInterface(console)

    try:
        config = config_from_arguments(args)
    except ConfigError as e:
        ui.display_error(str(e))
        return

    if config.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)]
        )
    session_logger = ConsoleLogger(console, verbose=config.verbose)

    try:
        session = open_session(config, console, session_logger)
    except ConnectionFailedError as e:
        ui.display_error(f"Connection failed. {e}")
        return

    ui.initialize_session()
    try:
        with session:
            OperatorLoop(session, ui, session_logger).run()
    except SessionError as e:
        session_logger.log_error(f"Session aborted: {e}", exc_info=True)
        ui.display_error(f"An error occurred while talking to the server: {e}")
    finally:
        ui.cleanup_session()
    logger.debug("Client finished")


if __name__ == "__main__":
    main()
