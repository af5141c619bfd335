"""
HTTP status routes for the unscramble game server.

All endpoints are read-only and answer with the envelope
``{"success": bool, "data": ...}`` (or ``"error"`` on failure).
"""

from functools import wraps
from flask import Blueprint, jsonify

api_bp = Blueprint('api', __name__, url_prefix='/api')

# Global game server instance - will be set by app initialization
game_server = None


def require_game_server(f):
    """Decorator answering 503 while no game server is attached."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if game_server is None:
            return jsonify({'success': False, 'error': 'Game server not running'}), 503
        return f(*args, **kwargs)
    return decorated_function


@api_bp.route('/health', methods=['GET'])
@require_game_server
def health():
    """Liveness check with session and room counts."""
    return jsonify({
        'success': True,
        'data': {
            'status': 'shutting_down' if game_server.shutdown_requested.is_set() else 'ok',
            'sessions': len(game_server.registry),
            'rooms': len(game_server.allocator),
        }
    }), 200


@api_bp.route('/rooms', methods=['GET'])
@require_game_server
def get_rooms():
    """Get information about all live rooms."""
    rooms = game_server.list_rooms()
    return jsonify({
        'success': True,
        'data': {
            'rooms': rooms,
            'total_rooms': len(rooms),
            'max_rooms': game_server.allocator.max_rooms,
        }
    }), 200


@api_bp.route('/sessions', methods=['GET'])
@require_game_server
def get_sessions():
    """Get information about all connected sessions."""
    sessions = game_server.list_sessions()
    return jsonify({
        'success': True,
        'data': {
            'sessions': sessions,
            'total_sessions': len(sessions),
        }
    }), 200
