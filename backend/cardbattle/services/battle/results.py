from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = 'invalid_input'
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    STATE_CONFLICT = 'state_conflict'


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a game action. Rule violations are failures, not exceptions."""
    ok: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    winner_connection_id: Optional[str] = None

    @classmethod
    def success(cls, winner_connection_id: Optional[str] = None) -> 'ActionResult':
        return cls(ok=True, winner_connection_id=winner_connection_id)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> 'ActionResult':
        return cls(ok=False, error=message, kind=kind)

    def to_error_payload(self) -> Dict[str, Any]:
        return {'message': self.error, 'kind': self.kind.value if self.kind else None}
