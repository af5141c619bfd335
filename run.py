"""
Server entry point.

Run this script to start the unscramble game server: python run.py [port]
"""

import sys

from src.unscramble.server import main

if __name__ == '__main__':
    sys.exit(main())
