import os

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _registry():
    return current_app.extensions['room_registry']


@main.route('/')
def index():
    static_folder = current_app.static_folder
    if static_folder and os.path.isfile(os.path.join(static_folder, 'index.html')):
        return current_app.send_static_file('index.html')
    return jsonify({'message': 'Welcome to the number party game server!'})


@main.route('/api/health')
def health():
    return jsonify({'status': 'ok', 'rooms': len(_registry())})


@main.route('/api/rooms')
def list_rooms():
    registry = _registry()
    with registry.lock:
        return jsonify([room.summary() for room in registry.rooms()])


@main.route('/api/rooms/<string:room_name>/state')
def room_state(room_name):
    """Same snapshot the room's clients receive; lookup never creates a room."""
    registry = _registry()
    with registry.lock:
        room = registry.get(room_name)
        if room is None:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict())
