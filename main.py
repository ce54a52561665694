"""One-shot HTTP/1.1 server with echo, user-agent and file routes."""

import signal
import sys

from oneshot_http.bootstrap.config import build_config, parse_cli_args
from oneshot_http.bootstrap.logging_setup import configure_logging
from oneshot_http.lifecycle.state import ServerLifecycle
from oneshot_http.transport.accept_loop import run_server


def main(argv: list[str] | None = None) -> None:
    """Start the HTTP server and serve until SIGINT or SIGTERM."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )
    config = build_config(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        logger.info(
            "Received shutdown signal",
            extra={"event": "signal_received", "signal": signum},
        )
        lifecycle.request_stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    logger.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "socket_timeout": config.socket_timeout,
            "body_timeout": config.body_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(config, lifecycle)


if __name__ == "__main__":
    main()
