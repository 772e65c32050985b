# games/dungeon/engine/dice.py
import random
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from ..content.balance import BOSS_DICE_BONUS, DIFFICULTIES

_FORMULA = re.compile(r"^(\d+)d(\d+)(?:\+(\d+))?$")


def rng_for(seed: int, turn: int) -> random.Random:
    # deterministic per session seed + turn
    return random.Random(f"{seed}:{turn}")


class FixedRandom:
    """Replays scripted draws so a turn can be resolved with known outcomes.

    ``rolls`` feeds ``randint`` (die faces), ``chances`` feeds ``random`` (proc
    rolls) and ``picks`` feeds ``choice`` (indexes into the sequence). When a
    queue runs dry the defaults are used: the lowest face, a chance that never
    procs, and the first element.
    """

    def __init__(
        self,
        rolls: Iterable[int] = (),
        chances: Iterable[float] = (),
        picks: Iterable[int] = (),
        default_chance: float = 0.99,
    ) -> None:
        self.rolls = list(rolls)
        self.chances = list(chances)
        self.picks = list(picks)
        self.default_chance = default_chance

    def randint(self, a: int, b: int) -> int:
        if not self.rolls:
            return a
        return max(a, min(b, self.rolls.pop(0)))

    def random(self) -> float:
        if not self.chances:
            return self.default_chance
        return self.chances.pop(0)

    def choice(self, seq: Sequence):
        if not self.picks:
            return seq[0]
        return seq[self.picks.pop(0) % len(seq)]


def parse_formula(formula: str) -> Tuple[int, int, int]:
    # supports "2d12+4", "1d20"
    match = _FORMULA.match(formula.replace(" ", ""))
    if not match:
        raise ValueError(f"dice formula must be like '2d12+4', got {formula!r}")
    count, sides, mod = match.groups()
    return int(count), int(sides), int(mod or 0)


def formula_for(difficulty: str, is_boss: bool = False) -> Tuple[int, int, int]:
    count, sides, mod = parse_formula(DIFFICULTIES[difficulty]["dice"])
    if is_boss:
        count += BOSS_DICE_BONUS["count"]
        sides += BOSS_DICE_BONUS["sides"]
        mod += BOSS_DICE_BONUS["mod"]
    return count, sides, mod


def roll_die(sides: int, r) -> int:
    return r.randint(1, sides)


def roll(difficulty: str, is_boss: bool, r) -> Tuple[List[int], int]:
    """Roll the difficulty's attack formula; boss targets use the boosted formula."""
    count, sides, mod = formula_for(difficulty, is_boss)
    dice = [roll_die(sides, r) for _ in range(count)]
    return dice, sum(dice) + mod


def chance(p: float, r) -> bool:
    return r.random() < p


def weighted_pick(weights: dict, r) -> Optional[str]:
    """Pick a key by cumulative weight using a single ``random`` draw."""
    point = r.random()
    running = 0.0
    last = None
    for key, weight in weights.items():
        running += weight
        last = key
        if point < running:
            return key
    return last
