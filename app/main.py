# =============================================================================
# app/main.py - Plugin Process Entry Point
# =============================================================================
# Starts the gRPC server the host talks to.
#
# Process contract with the host:
#   1. Bind a local port (PLUGIN_PORT=0 picks a free one)
#   2. Write the port number and a line break to stdout before anything else
#   3. Serve insecure (unauthenticated, unencrypted) connections
#   4. On SIGINT/SIGTERM stop open Publish streams, stop the server, exit 0
#
# Logs go to stderr so stdout carries nothing but the port handshake.
#
# Usage:
#   poetry run csv-plugin
#   poetry run python -m app.main
# =============================================================================

import logging
import signal
import sys
import threading
from concurrent import futures
from typing import TextIO

import grpc

from app.config import settings
from app.servicer import PluginServicer, add_plugin_servicer

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_STARTUP_FAILED = 1

# How often the main thread wakes up while waiting for a shutdown signal
_WAIT_INTERVAL_SECONDS = 0.5


def configure_logging() -> None:
    """Configure root logging on stderr."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def create_server(
    shutdown_event: threading.Event,
    address: str | None = None,
) -> tuple[grpc.Server, int]:
    """
    Build the gRPC server and bind it.

    Args:
        shutdown_event: Shared with the servicer to stop open streams
        address: host:port to bind (default: settings.bind_address)

    Returns:
        (server, bound port); the server is not started yet

    Raises:
        RuntimeError: If the address cannot be bound
    """
    address = address or settings.bind_address
    server = grpc.server(
        futures.ThreadPoolExecutor(
            max_workers=settings.MAX_WORKERS,
            thread_name_prefix="rpc",
        )
    )
    add_plugin_servicer(server, PluginServicer(shutdown_event))

    port = server.add_insecure_port(address)
    # Older grpc releases report a failed bind as port 0 instead of raising
    if port == 0:
        raise RuntimeError(f"Could not bind {address}")

    return server, port


def announce_port(port: int, stream: TextIO | None = None) -> None:
    """Write the port handshake the host waits for."""
    stream = stream or sys.stdout
    stream.write(f"{port}\r\n")
    stream.flush()


def install_signal_handlers(shutdown_event: threading.Event) -> None:
    """Set `shutdown_event` on SIGINT or SIGTERM."""

    def _handle(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        shutdown_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def serve() -> int:
    """
    Run the plugin until a shutdown signal arrives.

    Returns:
        Process exit code
    """
    shutdown_event = threading.Event()
    install_signal_handlers(shutdown_event)

    try:
        server, port = create_server(shutdown_event)
    except RuntimeError as e:
        logger.error(f"Failed to start plugin: {e}")
        return EXIT_STARTUP_FAILED

    server.start()
    announce_port(port)
    logger.info(f"Plugin listening on {settings.PLUGIN_HOST}:{port} in {settings.ENVIRONMENT} mode")

    while not shutdown_event.wait(_WAIT_INTERVAL_SECONDS):
        pass

    # Open Publish streams see shutdown_event and stop at the next row
    logger.info(f"Stopping server (grace {settings.SHUTDOWN_GRACE_SECONDS}s)")
    server.stop(settings.SHUTDOWN_GRACE_SECONDS).wait()
    logger.info("Plugin stopped")
    return EXIT_SUCCESS


def main() -> None:
    configure_logging()
    sys.exit(serve())


if __name__ == "__main__":
    main()
