import math
from typing import Any, Dict, Optional

DEFAULT_PLAYER_NAME = 'Player'
DEFAULT_HEALTH = 10
CHOICE_MIN = 0
CHOICE_MAX = 100


def normalize_name(name: Any) -> str:
    """Trim a display name, falling back to 'Player' when nothing is left."""
    if name is None:
        return DEFAULT_PLAYER_NAME
    return str(name).strip() or DEFAULT_PLAYER_NAME


def clamp_choice(raw: Any):
    """Coerce a submitted value to a number in [0, 100].

    Numeric strings are parsed, anything else non-numeric counts as 0.
    Fractions are kept; whole numbers come back as int.
    """
    if isinstance(raw, str):
        try:
            value = float(raw.strip() or 0)
        except ValueError:
            value = 0.0
    elif isinstance(raw, int):
        # clamp first: big ints do not fit in a float
        value = float(max(CHOICE_MIN, min(CHOICE_MAX, raw)))
    elif isinstance(raw, float):
        value = raw
    else:
        value = 0.0
    if math.isnan(value):
        value = 0.0
    value = max(CHOICE_MIN, min(CHOICE_MAX, value))
    if float(value).is_integer():
        return int(value)
    return value


class Player:
    def __init__(self, id: str, name: Any = None, health: int = DEFAULT_HEALTH):
        self.id = id
        self.name = normalize_name(name)
        self.health = health

    def __repr__(self):
        return f'<Player {self.id} {self.name!r} hp={self.health}>'

    def to_dict(self):
        return {
            'name': self.name,
            'health': self.health,
        }


class SessionState:
    """The single in-memory game session.

    ``players`` keeps join order. ``choices`` is emptied when a round starts
    and left alone after resolution so the last round stays visible.
    """

    def __init__(self):
        self.players: Dict[str, Player] = {}
        self.round = 1
        self.round_active = False
        self.choices: Dict[str, Any] = {}

    @property
    def player_count(self) -> int:
        return len(self.players)

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def all_submitted(self) -> bool:
        return len(self.choices) == len(self.players)

    def roster(self) -> Dict[str, Dict[str, Any]]:
        return {pid: p.to_dict() for pid, p in self.players.items()}

    def to_dict(self):
        return {
            'round': self.round,
            'round_active': self.round_active,
            'players': self.roster(),
            'choices': dict(self.choices),
            'player_count': self.player_count,
            'submitted_count': len(self.choices),
        }
