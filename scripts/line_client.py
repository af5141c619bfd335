#!/usr/bin/env python3
"""
Console client for the unscramble game server.

Prints every line the server sends and forwards each line typed on stdin as
a guess.  Exits when stdin ends (Ctrl-D) or the server closes the connection.

Usage:
    python line_client.py [host] [port]
"""

import argparse
import socket
import sys
import threading


def read_server(sock_file, done: threading.Event):
    """Print server messages until the connection closes."""
    try:
        for line in sock_file:
            print(line.rstrip("\n"))
    except OSError as e:
        if not done.is_set():
            print(f"Connection error: {e}", file=sys.stderr)
    finally:
        done.set()


def write_server(sock: socket.socket, done: threading.Event):
    """Forward keyboard lines to the server until end of input."""
    try:
        for line in sys.stdin:
            if done.is_set():
                break
            sock.sendall(line.encode("utf-8"))
    except OSError as e:
        if not done.is_set():
            print(f"Failed to send: {e}", file=sys.stderr)
    finally:
        done.set()


def main():
    parser = argparse.ArgumentParser(description="Console client for the unscramble game server")
    parser.add_argument('host', nargs='?', default='localhost')
    parser.add_argument('port', nargs='?', type=int, default=5000)
    args = parser.parse_args()

    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError as e:
        print(f"Failed to connect with the server: {e}", file=sys.stderr)
        return 1
    print(f"Connection successful! {args.host}:{args.port}")

    done = threading.Event()
    sock_file = sock.makefile('r', encoding='utf-8', errors='replace')
    threading.Thread(target=read_server, args=(sock_file, done), daemon=True).start()
    threading.Thread(target=write_server, args=(sock, done), daemon=True).start()

    done.wait()
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass  # server already closed the connection
    sock.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
