from flask import Blueprint, jsonify
from arena import get_coordinator

rooms = Blueprint('rooms', __name__)


@rooms.route('/world', methods=['GET'])
def get_world():
    """
    Returns world bounds and the border wall layout every client rebuilds locally.
    """
    return jsonify(get_coordinator().world()), 200


@rooms.route('/rooms', methods=['GET'])
def list_rooms():
    """
    Lists active rooms with their occupancy.
    """
    return jsonify(get_coordinator().list_rooms()), 200


@rooms.route('/rooms/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """
    Returns the authoritative room state, with expired powerups already purged.
    """
    snapshot = get_coordinator().room_snapshot(room_id)
    if snapshot is None:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(snapshot), 200
