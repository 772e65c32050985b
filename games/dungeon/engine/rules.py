# games/dungeon/engine/rules.py
from typing import Iterable


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def scale(value: int, multipliers: Iterable[float]) -> int:
    # multipliers stack multiplicatively, result floored
    total = float(value)
    for multiplier in multipliers:
        total *= multiplier
    return max(0, int(total))


def armor_multiplier(armor_bonus: int) -> float:
    return 1.0 - clamp(armor_bonus, 0, 100) / 100.0


def take_damage(hp: int, amount: int) -> int:
    return max(0, hp - max(0, amount))


def heal(hp: int, amount: int, hp_max: int) -> int:
    return min(hp + max(0, amount), hp_max)
