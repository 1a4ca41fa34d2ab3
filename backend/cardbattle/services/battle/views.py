from typing import Any, Dict, Optional

from .state import BattleCard, GameState


def _card(card: Optional[BattleCard]) -> Optional[Dict[str, Any]]:
    return card.to_dict() if card else None


def project_view(game: Optional[GameState], viewer_connection_id: str) -> Optional[Dict[str, Any]]:
    """Masked snapshot of ``game`` as seen by one participant.

    The viewer sees their own hand; the opponent's hand and deck are only
    reported as counts. Returns None when the game or the viewer is unknown.
    """
    if game is None:
        return None
    viewer = game.players.get(viewer_connection_id)
    if viewer is None:
        return None
    opponent = game.opponent_of(viewer_connection_id)
    if opponent is None:
        return None

    return {
        'roomId': game.room_id,
        'currentPlayerConnectionId': game.current_player_connection_id,
        'you': {
            'connectionId': viewer.connection_id,
            'username': viewer.username,
            'score': viewer.score,
            'hand': [c.to_dict() for c in viewer.hand],
            'activeCard': _card(viewer.active_card),
            'deckCount': len(viewer.deck),
        },
        'opponent': {
            'connectionId': opponent.connection_id,
            'username': opponent.username,
            'score': opponent.score,
            'activeCard': _card(opponent.active_card),
            'handCount': len(opponent.hand),
            'deckCount': len(opponent.deck),
        },
    }
