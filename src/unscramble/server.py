"""
Server entry point.

Parses the command line, builds the GameServer, binds the TCP transport and
optionally the HTTP status API, then serves until end of input on the
control stream (stdin by default).
"""

import argparse
import sys
import threading

from loguru import logger

from .app import configure_logging, create_app
from .config import Config
from .game_server import GameServer
from .tcp_server import GameTCPServer, serve_until_shutdown
from .words import WordScrambler


def parse_args(argv=None):
    """Parse command line arguments, with defaults taken from Config."""
    parser = argparse.ArgumentParser(description="Multiplayer word unscrambling game server")
    parser.add_argument('port', nargs='?', type=int, default=Config.PORT,
                        help=f"TCP port to listen on (default {Config.PORT})")
    parser.add_argument('--host', default=Config.HOST, help="Address to bind")
    parser.add_argument('--http-port', type=int, default=Config.HTTP_PORT,
                        help="Port for the JSON status API (0 disables it)")
    parser.add_argument('--capacity', type=int, default=Config.CAPACITY,
                        help="Players per room")
    parser.add_argument('--max-rooms', type=int, default=Config.MAX_ROOMS,
                        help="Maximum number of simultaneous rooms")
    parser.add_argument('--guesses', type=int, default=Config.MAX_GUESSES,
                        help="Wrong guesses allowed per player")
    parser.add_argument('--words', default=Config.WORDS_FILE,
                        help="Word list file, one word per line")
    parser.add_argument('--seed', type=int, default=None,
                        help="Random seed for word selection and scrambling")
    parser.add_argument('--log-level', default=Config.LOG_LEVEL,
                        help="Log level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def build_game_server(args) -> GameServer:
    """Create the GameServer described by the parsed arguments."""
    if args.words:
        word_provider = WordScrambler.from_file(args.words, seed=args.seed)
    else:
        word_provider = WordScrambler(seed=args.seed)
    return GameServer(word_provider, capacity=args.capacity,
                      max_rooms=args.max_rooms, guesses=args.guesses)


def watch_control_stream(stream, game_server: GameServer):
    """Drain the control stream and shut the game server down at its end."""
    for _ in stream:
        pass
    logger.info("End of control input, shutting down...")
    game_server.shutdown()


def start_status_api(game_server: GameServer, host: str, port: int) -> threading.Thread:
    """Serve the status API from a background thread."""
    app = create_app(game_server)
    thread = threading.Thread(
        target=app.run,
        kwargs={'host': host, 'port': port, 'threaded': True, 'use_reloader': False},
        name="status-api",
        daemon=True,
    )
    thread.start()
    logger.info(f"Status API listening on port {port}")
    return thread


def main(argv=None, control_stream=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        game_server = build_game_server(args)
    except (OSError, ValueError) as e:
        logger.critical(f"Failed to load the word list: {e}")
        return 1

    logger.info("Trying to start the server...")
    try:
        tcp_server = GameTCPServer((args.host, args.port), game_server)
    except OSError as e:
        logger.critical(f"Failed to initialize the server on port {args.port}: {e}")
        return 1
    logger.info(f"Server started! Port: {tcp_server.port}")
    logger.info("Press Ctrl-D to shutdown the server!")

    if args.http_port:
        start_status_api(game_server, args.host, args.http_port)

    if control_stream is None:
        control_stream = sys.stdin
    threading.Thread(target=watch_control_stream, args=(control_stream, game_server),
                     name="control-stream", daemon=True).start()

    serve_until_shutdown(tcp_server)
    return 0


if __name__ == '__main__':
    sys.exit(main())
