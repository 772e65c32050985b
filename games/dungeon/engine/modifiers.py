# games/dungeon/engine/modifiers.py
from typing import Any, Dict

from .dice import chance
from ..content.balance import DEFAULTS
from ..content.modifiers import MODIFIERS, ROLLABLE


def modifier_data(modifier_id: str) -> Dict[str, Any]:
    return MODIFIERS.get(modifier_id, MODIFIERS["none"])


def roll_modifier(r) -> str:
    """One-time creation roll: most dungeons get a blessing or curse, the rest none."""
    if chance(DEFAULTS["modifier_chance"], r):
        return r.choice(ROLLABLE)
    return "none"


def enemy_hp(base_hp: int, modifier_id: str) -> int:
    return int(base_hp * float(modifier_data(modifier_id).get("enemy_hp", 1.0)))


def outgoing_multiplier(modifier_id: str) -> float:
    return float(modifier_data(modifier_id).get("outgoing", 1.0))


def incoming_multiplier(modifier_id: str) -> float:
    return float(modifier_data(modifier_id).get("incoming", 1.0))


def boss_counter_multiplier(modifier_id: str) -> float:
    return float(modifier_data(modifier_id).get("boss_counter", 1.0))


def crit_chance(modifier_id: str) -> float:
    return float(modifier_data(modifier_id).get("crit_chance", 0.0))


def crit_multiplier(modifier_id: str) -> float:
    return float(modifier_data(modifier_id).get("crit_multiplier", 1.0))
