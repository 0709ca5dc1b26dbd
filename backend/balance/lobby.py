"""Single shared game session and its round lifecycle.

Every mutation of the session goes through :class:`Lobby` and runs under
one lock, so the "has everyone submitted" check and the resolution that
follows always see a consistent state. Notifications are pushed through an
injected ``emit(event, payload)`` callable while the lock is held, which
keeps them in mutation order.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

from balance.models import DEFAULT_HEALTH, Player, SessionState, clamp_choice
from balance.services.games.scoring import RoundResult, resolve_round

Emitter = Callable[[str, Any], None]


def _discard(event: str, payload: Any) -> None:
    pass


class Lobby:
    def __init__(self, app=None, emit: Optional[Emitter] = None):
        self._lock = threading.Lock()
        self._emit: Emitter = emit or _discard
        self.logger = logging.getLogger(__name__)
        self.min_players = 2
        self.starting_health = DEFAULT_HEALTH
        self.state = SessionState()
        if app is not None:
            self.init_app(app, emit=emit)

    def init_app(self, app, emit: Optional[Emitter] = None) -> None:
        self.logger = app.logger
        self.min_players = int(app.config.get('MIN_PLAYERS', 2))
        self.starting_health = int(app.config.get('STARTING_HEALTH', DEFAULT_HEALTH))
        if emit is not None:
            self._emit = emit
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.state = SessionState()

    # ---- lifecycle ----

    def join(self, player_id: str, name: Any = None) -> Player:
        with self._lock:
            player = self.state.get_player(player_id)
            if player is None:
                player = Player(player_id, name, health=self.starting_health)
                self.state.players[player_id] = player
                self.logger.info(f"[join] id={player_id} name={player.name!r} players={self.state.player_count}")
            else:
                self.logger.info(f"[join] id={player_id} already registered as {player.name!r}")
            self._emit('players', self.state.roster())
            return player

    def leave(self, player_id: str) -> bool:
        with self._lock:
            player = self.state.players.pop(player_id, None)
            if player is None:
                return False
            stale = ' (choice left in round)' if player_id in self.state.choices else ''
            self.logger.info(f"[leave] id={player_id} name={player.name!r}{stale}")
            self._emit('players', self.state.roster())
            return True

    def start_round(self) -> bool:
        with self._lock:
            state = self.state
            if state.round_active or state.player_count < self.min_players:
                self.logger.debug(
                    f"[round-start-skip] active={state.round_active} players={state.player_count}"
                )
                return False
            state.round_active = True
            state.choices = {}
            self.logger.info(f"[round-start] round={state.round} players={state.player_count}")
            self._emit('roundStart', state.round)
            return True

    def submit_choice(self, player_id: str, raw_value: Any) -> Optional[int]:
        """Record a choice for the active round.

        Returns the round number once every registered player has a choice
        recorded, which is the caller's cue to schedule resolution.
        """
        with self._lock:
            state = self.state
            if not state.round_active:
                return None
            value = clamp_choice(raw_value)
            state.choices[player_id] = value
            player = state.get_player(player_id)
            self.logger.info(
                f"[choice] round={state.round} value={value} from={player.name if player else player_id}"
            )
            if state.all_submitted():
                return state.round
            return None

    def resolve(self, expected_round: Optional[int] = None) -> Optional[RoundResult]:
        with self._lock:
            state = self.state
            if not state.round_active or (expected_round is not None and state.round != expected_round):
                self.logger.info(
                    f"[resolve-skip] expected_round={expected_round} round={state.round} active={state.round_active}"
                )
                return None
            result = resolve_round(state)
            if result is None:
                return None
            self.logger.info(
                f"[resolve] round={result.round} target={result.target:.1f} winners={result.winners} "
                f"voided={result.voided_ids} damage={result.damage_per_loser}"
            )
            self._emit('result', result.to_dict())
            self._emit('players', state.roster())
            return result

    # ---- read-only views ----

    def roster(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return self.state.roster()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self.state.to_dict()
