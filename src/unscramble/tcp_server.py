"""
Line-oriented TCP transport for the game server.

Every accepted connection gets its own thread (``ThreadingTCPServer``).  The
handler admits the connection through the GameServer, feeds it every inbound
line as a guess and tears the session down when the peer goes away.
"""

import socket
import socketserver
import threading
from typing import Tuple

from loguru import logger

from .game_server import GameServer
from .session import MessageSink


class SocketSink(MessageSink):
    """Writes newline-terminated UTF-8 lines to a client socket.

    Several threads broadcast to the same client, so writes are serialized.
    """

    def __init__(self, connection: socket.socket, wfile):
        self._connection = connection
        self._wfile = wfile
        self._lock = threading.Lock()

    def send_line(self, line: str) -> None:
        data = (line + "\n").encode("utf-8")
        with self._lock:
            self._wfile.write(data)
            self._wfile.flush()

    def close(self) -> None:
        # Shutting the socket down wakes up the handler blocked in readline and
        # any writer blocked on a peer that stopped reading, so it must not wait
        # for the write lock.  socketserver closes the socket itself when the
        # handler returns.
        try:
            self._connection.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            logger.debug(f"Socket already disconnected: {e}")


class LineHandler(socketserver.StreamRequestHandler):
    """Handles one client connection for its whole lifetime."""

    def handle(self):
        game_server = self.server.game_server
        sink = SocketSink(self.connection, self.wfile)
        session = game_server.connect(self.client_address, sink)
        if session is None:
            return

        try:
            for raw in self.rfile:
                line = raw.decode("utf-8", errors="replace")
                logger.debug(f"Message received from {session.label}: {line.rstrip()}")
                game_server.handle_line(session, line)
        except OSError as e:
            if not session.closed:
                logger.warning(f"Failed to read from {session.label}: {e}")
        finally:
            game_server.disconnect(session)


class GameTCPServer(socketserver.ThreadingTCPServer):
    """Threaded TCP server bound to a GameServer."""

    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: Tuple[str, int], game_server: GameServer):
        self.game_server = game_server
        super().__init__(address, LineHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def handle_error(self, request, client_address):
        logger.exception(f"Unhandled error on connection {client_address}")


def serve_until_shutdown(tcp_server: GameTCPServer) -> None:
    """Accept connections until the game server requests shutdown.

    Blocks the calling thread.  The accept loop runs in its own thread and is
    stopped once ``shutdown_requested`` is set.
    """
    accept_thread = threading.Thread(target=tcp_server.serve_forever, name="accept-loop", daemon=True)
    accept_thread.start()
    logger.info(f"Accepting connections on port {tcp_server.port}")

    tcp_server.game_server.shutdown_requested.wait()

    tcp_server.shutdown()
    tcp_server.server_close()
    accept_thread.join()
    logger.info("Server successfully shut down!")
