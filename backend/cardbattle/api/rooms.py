from flask import Blueprint, jsonify
from flask_login import login_required
from cardbattle.services.battle.store import get_store

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
@login_required
def list_rooms():
    """
    Lists the waiting rooms, same shape as the `roomsList` socket event.
    """
    return jsonify(get_store().rooms.get_rooms_list()), 200
