"""
Flask application factory for the status API, and logging setup.

The game itself is played over the TCP transport; this application only
exposes a read-only JSON view of the running GameServer.
"""

import sys

from flask import Flask
from flask_cors import CORS
from loguru import logger


def configure_logging(level="INFO"):
    """Route all log output through a single loguru sink."""
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format="{time} | {level} | {message}",
        level=level,
        colorize=True
    )


def create_app(game_server=None, config=None):
    """
    Create and configure the Flask application.

    Args:
        game_server: GameServer instance whose state is exposed
        config: Configuration dictionary

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Default configuration
    app.config.update({
        'DEBUG': False,
    })

    if config:
        app.config.update(config)

    # Dashboards may poll the API from another origin
    CORS(app, origins="*")

    from . import api
    app.register_blueprint(api.api_bp)

    # Set the global game server reference for API use
    api.game_server = game_server

    return app
