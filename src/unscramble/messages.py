"""Server-to-client message catalogue.

Every outbound message is a single line of text.  Templates use ``%``
formatting.

"""

CONNECTED = "You're now connected to the server"
NEW_USER = "New user connected! %s"
WORD_TO_UNSCRAMBLE = 'Word to unscramble: "%s"'
PLAYER_WINS = "Player %s wins: %s"
MISSED_GUESS = "Client %s missed the guess: %s"
WRONG_GUESS = "Wrong! Try again..."
REMAINING_GUESSES = "Remaining guesses: %d"
ATTEMPTS_ENDED = "Your attempts have ended!"
DISCONNECTED = "You're now disconnected to the server! Press Ctrl-D to exit..."
CLIENT_DISCONNECTED = "Client disconnected! %s"
SERVER_FULL = "The server is full!"
WAITING_FOR_PLAYERS = "Waiting for other players to join..."
