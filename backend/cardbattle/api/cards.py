from flask import Blueprint, jsonify
from flask_login import login_required
from cardbattle.models import Card

cards = Blueprint('cards', __name__)


@cards.route('', methods=['GET'])
@login_required
def list_cards():
    """
    Lists the whole card catalog, ordered by catalog index.
    """
    catalog = Card.query.order_by(Card.catalog_index, Card.id).all()
    return jsonify([card.to_dict() for card in catalog]), 200
