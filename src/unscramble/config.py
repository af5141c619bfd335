import os

class Config:
    HOST = os.environ.get('UNSCRAMBLE_HOST', '0.0.0.0')
    PORT = int(os.environ.get('UNSCRAMBLE_PORT', '5000'))
    # Status API port. 0 disables the HTTP server.
    HTTP_PORT = int(os.environ.get('UNSCRAMBLE_HTTP_PORT', '0'))
    # Players needed to start a round
    CAPACITY = int(os.environ.get('UNSCRAMBLE_CAPACITY', '2'))
    MAX_ROOMS = int(os.environ.get('UNSCRAMBLE_MAX_ROOMS', '100'))
    MAX_GUESSES = int(os.environ.get('UNSCRAMBLE_MAX_GUESSES', '5'))
    # Optional newline-delimited word file; the built-in list is used otherwise.
    WORDS_FILE = os.environ.get('UNSCRAMBLE_WORDS_FILE') or None
    LOG_LEVEL = os.environ.get('UNSCRAMBLE_LOG_LEVEL', 'INFO')
