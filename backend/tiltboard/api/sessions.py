from flask import Blueprint, current_app, jsonify

from tiltboard.services.session import get_engine

sessions = Blueprint('sessions', __name__)


@sessions.route('', methods=['POST'])
def create_session():
    """
    Creates a new room with its physics tick running. Building the join
    URL / QR code from ``sessionId`` is left to the UI.
    """
    room = get_engine().create_room()
    return jsonify({
        'sessionId': room.id,
        'maxUsers': room.max_participants,
    })


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    engine = get_engine()
    with engine.lock:
        room = engine.registry.find_room(session_id)
        if room is None:
            return jsonify({'error': 'Session not found'}), 404
        return jsonify(room.summary())


@sessions.route('/<string:session_id>', methods=['DELETE'])
def delete_session(session_id):
    """
    Administrative removal. Idempotent: removing an unknown id reports
    ``removed: false``.
    """
    removed = get_engine().end_room(session_id)
    current_app.logger.info(f"[admin-remove] room={session_id} removed={removed}")
    return jsonify({'sessionId': session_id, 'removed': removed})
