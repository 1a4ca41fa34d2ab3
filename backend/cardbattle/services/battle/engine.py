"""Authoritative state machine for two-player card battles.

One ``GameState`` per room. Every action runs under that game's lock so a
turn check and the mutation that follows it are a single step as far as
any other connection can tell. Rule violations come back as failed
``ActionResult`` values.
"""

import logging
import random
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .damage import calculate_damage
from .results import ActionResult, ErrorKind
from .state import BattleCard, GameState, PlayerEntry, PlayerState
from .views import project_view

logger = logging.getLogger(__name__)

DECK_SIZE = 10
HAND_SIZE = 5
WINNING_SCORE = 3

_Guarded = Union[ActionResult, Tuple[GameState, PlayerState, PlayerState]]


class GameEngine:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.SystemRandom()
        self._games: Dict[int, GameState] = {}
        self._game_locks: Dict[int, threading.Lock] = {}
        # Guards the two maps above; never held while waiting on a game lock
        self._lock = threading.Lock()

    # ---- lifecycle ----

    def start_game(self, room_id: int, room_channel_name: str,
                   host: PlayerEntry, guest: PlayerEntry) -> GameState:
        """Deal both decks and register the game. The host moves first.

        Raises ValueError for a deck that is not exactly DECK_SIZE cards or
        a room that already has a game; callers validate decks beforehand.
        """
        for entry in (host, guest):
            if len(entry.cards) != DECK_SIZE:
                raise ValueError(
                    f"deck for {entry.username!r} has {len(entry.cards)} cards, expected {DECK_SIZE}"
                )
        if host.connection_id == guest.connection_id:
            raise ValueError('host and guest must be different connections')

        players = {entry.connection_id: self._deal(entry) for entry in (host, guest)}
        game = GameState(
            room_id=room_id,
            room_channel_name=room_channel_name,
            players=players,
            current_player_connection_id=host.connection_id,
        )
        with self._lock:
            if room_id in self._games:
                raise ValueError(f"room {room_id} already has a game")
            self._games[room_id] = game
            self._game_locks[room_id] = threading.Lock()
        logger.info(f"[game-start] room={room_id} host={host.username} guest={guest.username}")
        return game

    def _deal(self, entry: PlayerEntry) -> PlayerState:
        cards = [BattleCard.from_catalog(c) for c in entry.cards]
        self._rng.shuffle(cards)
        return PlayerState(
            connection_id=entry.connection_id,
            user_id=entry.user_id,
            username=entry.username,
            hand=cards[:HAND_SIZE],
            deck=cards[HAND_SIZE:],
        )

    def get_game(self, room_id: int) -> Optional[GameState]:
        with self._lock:
            return self._games.get(room_id)

    def remove_game(self, room_id: int) -> Optional[GameState]:
        with self._lock:
            lock = self._game_locks.pop(room_id, None)
        if lock is None:
            return None
        # Wait for an in-flight action on this room to finish
        with lock:
            with self._lock:
                return self._games.pop(room_id, None)

    def games_for_connection(self, connection_id: str) -> List[GameState]:
        with self._lock:
            return [g for g in self._games.values() if connection_id in g.players]

    @contextmanager
    def _locked(self, room_id: int) -> Iterator[Optional[GameState]]:
        with self._lock:
            lock = self._game_locks.get(room_id)
        if lock is None:
            yield None
            return
        with lock:
            with self._lock:
                game = self._games.get(room_id)
            yield game

    # ---- views ----

    def project_view(self, room_id: int, viewer_connection_id: str) -> Optional[dict]:
        with self._locked(room_id) as game:
            return project_view(game, viewer_connection_id)

    # ---- actions ----

    @staticmethod
    def _guard(game: Optional[GameState], connection_id: str) -> _Guarded:
        if game is None:
            return ActionResult.failure(ErrorKind.NOT_FOUND, 'Game does not exist')
        player = game.players.get(connection_id)
        if player is None:
            return ActionResult.failure(ErrorKind.NOT_FOUND, 'You are not part of this game')
        opponent = game.opponent_of(connection_id)
        if opponent is None:
            return ActionResult.failure(ErrorKind.NOT_FOUND, 'Opponent not found for this game')
        if game.is_finished:
            return ActionResult.failure(ErrorKind.FORBIDDEN, 'The game is already over')
        if game.current_player_connection_id != connection_id:
            return ActionResult.failure(ErrorKind.FORBIDDEN, 'It is not your turn')
        return game, player, opponent

    def _reject(self, action: str, room_id: int, connection_id: str, result: ActionResult) -> ActionResult:
        logger.info(f"[{action}-rejected] room={room_id} conn={connection_id} kind={result.kind.value} reason={result.error}")
        return result

    def apply_draw_cards(self, room_id: int, connection_id: str) -> ActionResult:
        with self._locked(room_id) as game:
            guarded = self._guard(game, connection_id)
            if isinstance(guarded, ActionResult):
                return self._reject('draw', room_id, connection_id, guarded)
            _, player, _ = guarded

            drawn = 0
            while len(player.hand) < HAND_SIZE and player.deck:
                player.hand.append(player.deck.pop(0))
                drawn += 1
            logger.info(f"[draw] room={room_id} conn={connection_id} drawn={drawn} deck_left={len(player.deck)}")
            return ActionResult.success()

    def apply_play_card(self, room_id: int, connection_id: str, hand_index) -> ActionResult:
        with self._locked(room_id) as game:
            guarded = self._guard(game, connection_id)
            if isinstance(guarded, ActionResult):
                return self._reject('play', room_id, connection_id, guarded)
            _, player, _ = guarded

            if (not isinstance(hand_index, int) or isinstance(hand_index, bool)
                    or not 0 <= hand_index < len(player.hand)):
                return self._reject('play', room_id, connection_id,
                                    ActionResult.failure(ErrorKind.INVALID_INPUT, 'Invalid card index'))

            card = player.hand.pop(hand_index)
            if player.active_card is not None:
                # Only one card on the field; the previous one goes back to hand
                player.hand.append(player.active_card)
            player.active_card = card
            logger.info(f"[play] room={room_id} conn={connection_id} card={card.name}")
            return ActionResult.success()

    def apply_end_turn(self, room_id: int, connection_id: str) -> ActionResult:
        with self._locked(room_id) as game:
            guarded = self._guard(game, connection_id)
            if isinstance(guarded, ActionResult):
                return self._reject('end-turn', room_id, connection_id, guarded)
            game, _, opponent = guarded

            game.current_player_connection_id = opponent.connection_id
            return ActionResult.success()

    def apply_attack(self, room_id: int, connection_id: str) -> ActionResult:
        with self._locked(room_id) as game:
            guarded = self._guard(game, connection_id)
            if isinstance(guarded, ActionResult):
                return self._reject('attack', room_id, connection_id, guarded)
            game, player, opponent = guarded

            if player.active_card is None:
                return self._reject('attack', room_id, connection_id, ActionResult.failure(
                    ErrorKind.STATE_CONFLICT, 'You have no active card'))
            if opponent.active_card is None:
                return self._reject('attack', room_id, connection_id, ActionResult.failure(
                    ErrorKind.STATE_CONFLICT, 'Your opponent has no active card'))

            attacker, defender = player.active_card, opponent.active_card
            damage = calculate_damage(attacker.attack_power, attacker.element, defender.element)
            defender.current_hp -= damage
            knocked_out = defender.current_hp <= 0
            logger.info(
                f"[attack] room={room_id} attacker={attacker.name} defender={defender.name} "
                f"damage={damage} hp_left={defender.current_hp} ko={knocked_out}"
            )

            if knocked_out:
                player.score += 1
                opponent.active_card = None
                if player.score >= WINNING_SCORE:
                    game.winner_connection_id = player.connection_id
                    logger.info(f"[game-finish] room={room_id} winner={player.username} score={player.score}")
                    return ActionResult.success(winner_connection_id=player.connection_id)

            game.current_player_connection_id = opponent.connection_id
            return ActionResult.success()
