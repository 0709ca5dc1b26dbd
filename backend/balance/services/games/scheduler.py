import threading
import time
from typing import Dict, Optional

from balance import lobby, socketio


# round number -> deadline of the schedule that owns it
_pending_rounds: Dict[int, float] = {}
_pending_lock = threading.Lock()


def schedule_resolution(app, round_number: int) -> bool:
    """Resolve ``round_number`` after RESOLVE_DELAY_MS without blocking the caller.

    - One pending resolution per round; later requests for the same round are skipped
    - Runs inline under TESTING unless ENABLE_SCHEDULER_IN_TESTS is set
    - The worker claims its own schedule and the lobby re-checks its round before resolving

    Returns False when the round was already scheduled.
    """
    delay = max(0, int(app.config.get('RESOLVE_DELAY_MS', 500))) / 1000.0
    deadline = time.monotonic() + delay
    with _pending_lock:
        if _pending_rounds.setdefault(round_number, deadline) != deadline:
            app.logger.info(f"[timer-skip] round={round_number} already scheduled")
            return False
    app.logger.info(f"[timer-set] round={round_number} delay={delay:.3f}s")

    def _worker(expected_round: int, expected_deadline: float):
        sleep_for = max(0.0, expected_deadline - time.monotonic())
        if sleep_for:
            socketio.sleep(sleep_for)
        if not cancel_resolution(expected_round, expected_deadline):
            app.logger.info(f"[timer-abort] round={expected_round} cancelled")
            return
        app.logger.info(f"[timer-fire] round={expected_round}")
        with app.app_context():
            try:
                lobby.resolve(expected_round)
            except Exception:
                app.logger.exception(f"[timer-error] round={expected_round} resolution failed")

    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        _worker(round_number, deadline)
    else:
        socketio.start_background_task(_worker, round_number, deadline)
    return True


def cancel_resolution(round_number: int, deadline: Optional[float] = None) -> bool:
    """Remove the pending resolution for ``round_number``.

    With ``deadline`` only the schedule that owns it is removed; this is how a
    worker claims its round before resolving. Returns whether anything was removed.
    """
    with _pending_lock:
        if round_number not in _pending_rounds:
            return False
        if deadline is not None and _pending_rounds[round_number] != deadline:
            return False
        del _pending_rounds[round_number]
        return True


def cancel_all() -> None:
    """Drop every pending resolution; their workers become no-ops."""
    with _pending_lock:
        _pending_rounds.clear()
