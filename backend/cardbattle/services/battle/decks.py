"""Deck validation at the boundary between persistence and the engine.

Decks may be edited between creation and game start, so the card count is
checked again here. Loaded ORM rows are converted into ``CatalogCard``
records; nothing from the ORM is handed to the engine.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from cardbattle import db
from cardbattle.models import find_deck
from .engine import DECK_SIZE
from .payloads import parse_positive_int
from .results import ErrorKind
from .state import CatalogCard

logger = logging.getLogger(__name__)


class DeckError(str, Enum):
    INVALID_ID = 'invalid_id'
    NOT_OWNED_OR_MISSING = 'not_owned_or_missing'
    WRONG_CARD_COUNT = 'wrong_card_count'


_MESSAGES = {
    DeckError.INVALID_ID: 'Invalid deck',
    DeckError.NOT_OWNED_OR_MISSING: 'The deck does not belong to the user or does not exist',
    DeckError.WRONG_CARD_COUNT: f'The deck must contain exactly {DECK_SIZE} cards',
}

_KINDS = {
    DeckError.INVALID_ID: ErrorKind.INVALID_INPUT,
    DeckError.NOT_OWNED_OR_MISSING: ErrorKind.NOT_FOUND,
    DeckError.WRONG_CARD_COUNT: ErrorKind.INVALID_INPUT,
}


@dataclass(frozen=True)
class ValidatedDeck:
    id: int
    owner_user_id: int
    cards: Tuple[CatalogCard, ...]


@dataclass(frozen=True)
class DeckValidation:
    deck: Optional[ValidatedDeck] = None
    error: Optional[DeckError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return _MESSAGES[self.error] if self.error else None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return _KINDS[self.error] if self.error else None


def validate_deck(user_id: int, deck_id) -> DeckValidation:
    deck_id_num = parse_positive_int(deck_id)
    if deck_id_num is None:
        return DeckValidation(error=DeckError.INVALID_ID)

    try:
        deck = find_deck(deck_id_num, user_id)
        if deck is None:
            return DeckValidation(error=DeckError.NOT_OWNED_OR_MISSING)
        if len(deck.deck_cards) != DECK_SIZE:
            logger.info(f"[deck-invalid] deck={deck.id} user={user_id} cards={len(deck.deck_cards)}")
            return DeckValidation(error=DeckError.WRONG_CARD_COUNT)
        cards = tuple(
            CatalogCard(
                id=dc.card.id,
                name=dc.card.name,
                max_hp=dc.card.hp,
                attack_power=dc.card.attack,
                element=dc.card.element,
                catalog_index=dc.card.catalog_index,
                image_url=dc.card.image_url,
            )
            for dc in deck.deck_cards
        )
    except SQLAlchemyError:
        db.session.rollback()
        logger.warning(f"[deck-lookup-failed] deck={deck_id_num} user={user_id}", exc_info=True)
        return DeckValidation(error=DeckError.NOT_OWNED_OR_MISSING)

    return DeckValidation(deck=ValidatedDeck(id=deck.id, owner_user_id=user_id, cards=cards))
