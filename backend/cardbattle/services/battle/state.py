from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .damage import Element


@dataclass(frozen=True)
class CatalogCard:
    """Typed snapshot of a catalog card, as handed over by the deck validator."""
    id: int
    name: str
    max_hp: int
    attack_power: int
    element: Element
    catalog_index: int
    image_url: Optional[str] = None


@dataclass
class BattleCard:
    id: int
    name: str
    max_hp: int
    attack_power: int
    element: Element
    catalog_index: int
    current_hp: int
    image_url: Optional[str] = None

    @classmethod
    def from_catalog(cls, card: CatalogCard) -> 'BattleCard':
        return cls(
            id=card.id,
            name=card.name,
            max_hp=card.max_hp,
            attack_power=card.attack_power,
            element=card.element,
            catalog_index=card.catalog_index,
            current_hp=card.max_hp,
            image_url=card.image_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'maxHp': self.max_hp,
            'attackPower': self.attack_power,
            'element': self.element.value,
            'catalogIndex': self.catalog_index,
            'imageUrl': self.image_url,
            'currentHp': self.current_hp,
        }


@dataclass
class PlayerState:
    connection_id: str
    user_id: int
    username: str
    deck: List[BattleCard] = field(default_factory=list)
    hand: List[BattleCard] = field(default_factory=list)
    active_card: Optional[BattleCard] = None
    score: int = 0


@dataclass
class PlayerEntry:
    """A participant as known before the game starts."""
    connection_id: str
    user_id: int
    username: str
    cards: List[CatalogCard]


@dataclass
class GameState:
    room_id: int
    room_channel_name: str
    players: Dict[str, PlayerState]        # connection id -> player
    current_player_connection_id: str
    winner_connection_id: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.winner_connection_id is not None

    def opponent_of(self, connection_id: str) -> Optional[PlayerState]:
        for cid, player in self.players.items():
            if cid != connection_id:
                return player
        return None
