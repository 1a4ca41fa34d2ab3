"""Card battle core: waiting rooms, deck checks, damage, the game engine
and the per-player views it produces.
"""

from .damage import Element, calculate_damage, effectiveness
from .engine import DECK_SIZE, HAND_SIZE, WINNING_SCORE, GameEngine
from .results import ActionResult, ErrorKind
from .rooms import RoomRegistry, WaitingRoom
from .store import BattleStore, get_store
