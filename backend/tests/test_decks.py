import pytest
from sqlalchemy.exc import OperationalError

from cardbattle import db
from cardbattle.models import Card, Deck, DeckCard, User
from cardbattle.services.battle import decks as deck_service
from cardbattle.services.battle.damage import Element
from cardbattle.services.battle.decks import DeckError, validate_deck
from cardbattle.services.battle.results import ErrorKind


def _user(username):
    return User.query.filter_by(username=username).first()


def _starter_deck(username):
    return Deck.query.filter_by(user_id=_user(username).id).first()


@pytest.mark.parametrize('deck_id', ['abc', None, 0, -3, True, 2.5, {}])
def test_invalid_deck_ids(app_ctx, deck_id):
    result = validate_deck(_user('red').id, deck_id)
    assert not result.ok
    assert result.error == DeckError.INVALID_ID
    assert result.kind == ErrorKind.INVALID_INPUT
    assert result.message == 'Invalid deck'


def test_missing_deck(app_ctx):
    result = validate_deck(_user('red').id, 4242)
    assert result.error == DeckError.NOT_OWNED_OR_MISSING
    assert result.kind == ErrorKind.NOT_FOUND


def test_deck_owned_by_someone_else(app_ctx):
    blue_deck = _starter_deck('blue')
    result = validate_deck(_user('red').id, blue_deck.id)
    assert result.error == DeckError.NOT_OWNED_OR_MISSING


@pytest.mark.parametrize('count', [5, 11])
def test_wrong_card_count(app_ctx, count):
    red = _user('red')
    cards = Card.query.limit(count).all()
    deck = Deck(name='Odd', owner=red)
    for card in cards:
        deck.deck_cards.append(DeckCard(card=card))
    db.session.add(deck)
    db.session.commit()

    result = validate_deck(red.id, deck.id)
    assert result.error == DeckError.WRONG_CARD_COUNT
    assert result.message == 'The deck must contain exactly 10 cards'


def test_deck_edited_after_creation_is_rejected(app_ctx):
    deck = _starter_deck('red')
    db.session.delete(deck.deck_cards[0])
    db.session.commit()
    assert validate_deck(_user('red').id, deck.id).error == DeckError.WRONG_CARD_COUNT


def test_valid_deck_is_converted_to_catalog_cards(app_ctx):
    red = _user('red')
    deck = _starter_deck('red')
    result = validate_deck(red.id, deck.id)
    assert result.ok
    assert result.error is None and result.message is None
    assert result.deck.id == deck.id
    assert result.deck.owner_user_id == red.id
    assert len(result.deck.cards) == 10
    first = result.deck.cards[0]
    source = deck.deck_cards[0].card
    assert (first.id, first.name, first.max_hp, first.attack_power) == (source.id, source.name, source.hp, source.attack)
    assert isinstance(first.element, Element)


def test_numeric_string_deck_id(app_ctx):
    deck = _starter_deck('red')
    assert validate_deck(_user('red').id, str(deck.id)).ok


def test_persistence_failure_surfaces_as_not_found(app_ctx, monkeypatch):
    def broken(deck_id, owner_user_id):
        raise OperationalError('SELECT', {}, Exception('database is gone'))

    monkeypatch.setattr(deck_service, 'find_deck', broken)
    result = validate_deck(_user('red').id, 1)
    assert result.error == DeckError.NOT_OWNED_OR_MISSING
    assert result.kind == ErrorKind.NOT_FOUND
