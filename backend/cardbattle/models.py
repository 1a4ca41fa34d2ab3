from typing import Optional

from flask_login import UserMixin

from cardbattle import db, bcrypt
from cardbattle.services.battle.damage import Element


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    decks = db.relationship('Deck', back_populates='owner', cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Card(db.Model):
    """A catalog card. Battle copies are made from it; it is never mutated by play."""
    __tablename__ = 'card'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    hp = db.Column(db.Integer, nullable=False)
    attack = db.Column(db.Integer, nullable=False)
    element = db.Column(db.Enum(Element, name='element'), nullable=False)
    catalog_index = db.Column(db.Integer, nullable=False, index=True)
    image_url = db.Column(db.String(256), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'hp': self.hp,
            'attack': self.attack,
            'element': self.element.value,
            'catalogIndex': self.catalog_index,
            'imageUrl': self.image_url,
        }


class Deck(db.Model):
    __tablename__ = 'deck'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    owner = db.relationship('User', back_populates='decks')
    deck_cards = db.relationship('DeckCard', back_populates='deck', order_by='DeckCard.id',
                                 cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'userId': self.user_id,
            'cards': [dc.card.to_dict() for dc in self.deck_cards],
        }


class DeckCard(db.Model):
    __tablename__ = 'deck_card'
    id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('deck.id'), nullable=False, index=True)
    card_id = db.Column(db.Integer, db.ForeignKey('card.id'), nullable=False)
    deck = db.relationship('Deck', back_populates='deck_cards')
    card = db.relationship('Card')


def find_deck(deck_id: int, owner_user_id: int) -> Optional[Deck]:
    """Deck with its cards, only if it belongs to ``owner_user_id``."""
    return Deck.query.filter_by(id=deck_id, user_id=owner_user_id).first()


def find_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)
