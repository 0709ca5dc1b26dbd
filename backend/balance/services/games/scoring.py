import math
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from balance.models import SessionState

TARGET_FACTOR = 0.8
BASE_DAMAGE = 1
EXACT_TARGET_DAMAGE = 2


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def format_fixed(value: float, places: int = 1) -> str:
    """Fixed-point formatting with half-up ties on the exact binary value."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


class ResolutionContext:
    """Working data shared by the rules while one round is resolved."""

    def __init__(self, player_count: int, choices: Dict[str, Any], target: float):
        self.player_count = player_count
        self.choices = choices
        self.target = target
        self.effective_choices: Dict[str, Any] = dict(choices)
        self.voided_ids: List[str] = []
        self.forced_winners: Optional[List[str]] = None
        self.damage_per_loser = BASE_DAMAGE
        self.winners: List[str] = []


class Rule:
    number = 0
    name = ''
    max_players: Optional[int] = None
    exact_players: Optional[int] = None

    def is_active(self, player_count: int) -> bool:
        if self.exact_players is not None:
            return player_count == self.exact_players
        if self.max_players is not None:
            return player_count <= self.max_players
        return True

    def apply(self, ctx: ResolutionContext) -> None:
        raise NotImplementedError

    def __repr__(self):
        return f'<Rule {self.number} {self.name}>'


class VoidDuplicates(Rule):
    """Rule 4: a value picked by two or more players cannot win."""

    number = 4
    name = 'void-duplicates'
    max_players = 4

    def apply(self, ctx):
        by_value = OrderedDict()
        for pid, value in ctx.effective_choices.items():
            by_value.setdefault(value, []).append(pid)
        for ids in by_value.values():
            if len(ids) < 2:
                continue
            for pid in ids:
                ctx.voided_ids.append(pid)
                del ctx.effective_choices[pid]


class ZeroVersusHundred(Rule):
    """Rule 2: with two players, 100 beats 0 outright."""

    number = 2
    name = 'zero-vs-hundred'
    exact_players = 2

    def apply(self, ctx):
        if len(ctx.effective_choices) != 2:
            return
        if set(ctx.effective_choices.values()) != {0, 100}:
            return
        ctx.forced_winners = [pid for pid, value in ctx.effective_choices.items() if value == 100]


class ExactTargetDoubleDamage(Rule):
    """Rule 3: hitting the rounded target doubles everyone else's damage."""

    number = 3
    name = 'exact-target'
    max_players = 3

    def apply(self, ctx):
        rounded_target = round_half_up(ctx.target)
        if any(round_half_up(value) == rounded_target for value in ctx.effective_choices.values()):
            ctx.damage_per_loser = EXACT_TARGET_DAMAGE


class ClosestToTarget(Rule):
    """Rule 5: closest effective choice wins; ties share the win."""

    number = 5
    name = 'closest-to-target'

    def apply(self, ctx):
        if ctx.forced_winners is not None:
            ctx.winners = list(ctx.forced_winners)
            return
        closest = math.inf
        winners: List[str] = []
        for pid, value in ctx.effective_choices.items():
            distance = abs(value - ctx.target)
            if distance < closest:
                closest = distance
                winners = [pid]
            elif distance == closest:
                winners.append(pid)
        ctx.winners = winners


# Applied in this order; Rule 5 must come last.
RULES = (
    VoidDuplicates(),
    ZeroVersusHundred(),
    ExactTargetDoubleDamage(),
    ClosestToTarget(),
)


def _rule_active(number: int, player_count: int) -> bool:
    return any(rule.number == number and rule.is_active(player_count) for rule in RULES)


class RoundResult:
    def __init__(self, round_number: int, average: float, ctx: ResolutionContext):
        self.round = round_number
        self.average = average
        self.target = ctx.target
        self.winners = list(ctx.winners)
        self.choices = dict(ctx.choices)
        self.player_count = ctx.player_count
        self.use_rule2 = _rule_active(2, ctx.player_count)
        self.use_rule3 = _rule_active(3, ctx.player_count)
        self.use_rule4 = _rule_active(4, ctx.player_count)
        self.voided_ids = list(ctx.voided_ids)
        self.forced_winners = list(ctx.forced_winners) if ctx.forced_winners is not None else None
        self.damage_per_loser = ctx.damage_per_loser

    def to_dict(self):
        return {
            'round': self.round,
            'avg': format_fixed(self.average),
            'target': format_fixed(self.target),
            'winners': self.winners,
            'choices': self.choices,
            'appliedRules': {
                'playerCount': self.player_count,
                'useRule2': self.use_rule2,
                'useRule3': self.use_rule3,
                'useRule4': self.use_rule4,
                'voidedIds': self.voided_ids,
                'forcedWinners': self.forced_winners,
                'damagePerLoser': self.damage_per_loser,
            },
        }


def resolve_round(state: SessionState) -> Optional[RoundResult]:
    """Resolve the active round of ``state`` and advance it.

    Applies damage to every registered non-winner, bumps the round counter
    and clears the active flag. The submitted choices are left in place.
    Returns None without touching the state when no round is active or no
    choice was recorded.
    """
    if not state.round_active or not state.choices:
        return None

    values = list(state.choices.values())
    average = sum(values) / len(values)
    ctx = ResolutionContext(state.player_count, dict(state.choices), average * TARGET_FACTOR)

    for rule in RULES:
        if rule.is_active(ctx.player_count):
            rule.apply(ctx)

    winners = set(ctx.winners)
    for pid, player in state.players.items():
        if pid not in winners:
            player.health -= ctx.damage_per_loser

    result = RoundResult(state.round, average, ctx)
    state.round += 1
    state.round_active = False
    return result
