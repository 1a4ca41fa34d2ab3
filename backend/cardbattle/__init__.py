from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_socketio import SocketIO
import random
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One store of rooms and games per application instance
    from cardbattle.services.battle.store import BattleStore
    BattleStore(rng=flask_app.config.get('BATTLE_RNG')).init_app(flask_app)

    from cardbattle.routes import main
    flask_app.register_blueprint(main)

    from cardbattle.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from cardbattle.api.cards import cards
    flask_app.register_blueprint(cards, url_prefix='/api/cards')

    from cardbattle.api.decks import decks
    flask_app.register_blueprint(decks, url_prefix='/api/decks')

    from cardbattle.socketio_events import register_socketio_handlers
    register_socketio_handlers(
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
        testing=flask_app.config.get('TESTING', False),
    )

    from cardbattle.models import find_user

    @login_manager.user_loader
    def load_user(user_id):
        return find_user(int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_database()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


# name, hp, attack, element, catalog index
CATALOG = [
    ('Bulbasaur', 45, 49, 'Grass', 1),
    ('Charmander', 39, 52, 'Fire', 4),
    ('Squirtle', 44, 48, 'Water', 7),
    ('Pidgey', 40, 45, 'Flying', 16),
    ('Rattata', 30, 56, 'Normal', 19),
    ('Pikachu', 35, 55, 'Electric', 25),
    ('Sandshrew', 50, 75, 'Ground', 27),
    ('Clefairy', 70, 45, 'Fairy', 35),
    ('Zubat', 40, 45, 'Poison', 41),
    ('Paras', 35, 70, 'Bug', 46),
    ('Machop', 70, 80, 'Fighting', 66),
    ('Geodude', 40, 80, 'Rock', 74),
    ('Magnemite', 25, 35, 'Steel', 81),
    ('Gastly', 30, 35, 'Ghost', 92),
    ('Onix', 35, 45, 'Rock', 95),
    ('Abra', 25, 20, 'Psychic', 63),
    ('Jynx', 65, 50, 'Ice', 124),
    ('Dratini', 41, 64, 'Dragon', 147),
    ('Umbreon', 95, 65, 'Dark', 197),
    ('Growlithe', 55, 70, 'Fire', 58),
]

IMAGE_URL = 'https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/official-artwork/{}.png'


def seed_database(users=('red', 'blue'), password='password123'):
    """Seed the card catalog and one 10-card starter deck per user."""
    from cardbattle.models import User, Card, Deck, DeckCard
    from cardbattle.services.battle.damage import Element
    from cardbattle.services.battle.engine import DECK_SIZE

    cards = [
        Card(name=name, hp=hp, attack=attack, element=Element(element),
             catalog_index=index, image_url=IMAGE_URL.format(index))
        for name, hp, attack, element, index in CATALOG
    ]
    db.session.add_all(cards)
    db.session.flush()

    for username in users:
        user = User(username=username)
        user.set_password(password)
        deck = Deck(name='Starter Deck', owner=user)
        for card in random.sample(cards, DECK_SIZE):
            deck.deck_cards.append(DeckCard(card=card))
        db.session.add(user)
    db.session.commit()
