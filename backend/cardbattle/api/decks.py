from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from cardbattle import db
from cardbattle.models import Card, Deck, DeckCard
from cardbattle.services.battle.engine import DECK_SIZE
from cardbattle.services.battle.payloads import parse_positive_int

decks = Blueprint('decks', __name__)


def _load_cards(card_ids):
    """Catalog rows for ``card_ids`` in the given order, or an error message.

    A deck holds exactly DECK_SIZE distinct catalog cards.
    """
    if not isinstance(card_ids, list) or len(card_ids) != DECK_SIZE:
        return None, f'A deck must contain exactly {DECK_SIZE} card ids'
    ids = [parse_positive_int(card_id) for card_id in card_ids]
    if None in ids:
        return None, 'Some cards are invalid or do not exist'
    found = {card.id: card for card in Card.query.filter(Card.id.in_(ids)).all()}
    if len(found) != DECK_SIZE:
        return None, 'Some cards are invalid or do not exist'
    return [found[card_id] for card_id in ids], None


def _owned_deck(raw_id):
    """The current user's deck, or an error response."""
    deck_id = parse_positive_int(raw_id)
    if deck_id is None:
        return None, (jsonify({'error': 'Invalid deck'}), 400)
    deck = db.session.get(Deck, deck_id)
    if deck is None:
        return None, (jsonify({'error': 'Deck not found'}), 404)
    if deck.user_id != current_user.id:
        return None, (jsonify({'error': 'You do not have access to this deck'}), 403)
    return deck, None


@decks.route('', methods=['POST'])
@login_required
def create_deck():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        return jsonify({'error': 'Name is required'}), 400

    cards, error = _load_cards(data.get('cards'))
    if error:
        return jsonify({'error': error}), 400

    deck = Deck(name=name.strip(), user_id=current_user.id)
    for card in cards:
        deck.deck_cards.append(DeckCard(card=card))
    db.session.add(deck)
    db.session.commit()
    current_app.logger.info(f"[deck-created] deck={deck.id} user={current_user.id}")
    return jsonify(deck.to_dict()), 201


@decks.route('/mine', methods=['GET'])
@login_required
def list_my_decks():
    mine = Deck.query.filter_by(user_id=current_user.id).order_by(Deck.id).all()
    return jsonify([deck.to_dict() for deck in mine]), 200


@decks.route('/<deck_id>', methods=['GET'])
@login_required
def get_deck(deck_id):
    deck, error = _owned_deck(deck_id)
    if error:
        return error
    return jsonify(deck.to_dict()), 200


@decks.route('/<deck_id>', methods=['PATCH'])
@login_required
def update_deck(deck_id):
    deck, error = _owned_deck(deck_id)
    if error:
        return error

    data = request.get_json(silent=True) or {}
    if 'name' in data:
        name = data['name']
        if not isinstance(name, str) or not name.strip():
            return jsonify({'error': 'Name is required'}), 400
        deck.name = name.strip()

    if 'cards' in data:
        cards, message = _load_cards(data['cards'])
        if message:
            db.session.rollback()
            return jsonify({'error': message}), 400
        # Old links are dropped by the delete-orphan cascade
        deck.deck_cards = [DeckCard(card=card) for card in cards]

    db.session.commit()
    current_app.logger.info(f"[deck-updated] deck={deck.id} user={current_user.id}")
    return jsonify(deck.to_dict()), 200


@decks.route('/<deck_id>', methods=['DELETE'])
@login_required
def delete_deck(deck_id):
    deck, error = _owned_deck(deck_id)
    if error:
        return error
    db.session.delete(deck)
    db.session.commit()
    current_app.logger.info(f"[deck-deleted] deck={deck_id} user={current_user.id}")
    return jsonify({'message': 'Deck deleted successfully'}), 200
