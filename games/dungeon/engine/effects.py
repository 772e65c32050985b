# games/dungeon/engine/effects.py
from __future__ import annotations

from typing import List, Tuple

from .models import DungeonState, StatusEffects, StatusEvent
from .rules import take_damage
from ..content.balance import STATUS_EFFECTS

FIELDS = {
    "poison": "poison_turns",
    "burn": "burn_turns",
    "stun": "stun_turns",
}

# DoTs resolve before stun is checked.
TICK_ORDER = ["poison", "burn", "stun"]


def turns_left(status: StatusEffects, effect_id: str) -> int:
    return int(getattr(status, FIELDS[effect_id]))


def is_active(status: StatusEffects, effect_id: str) -> bool:
    return turns_left(status, effect_id) > 0


def is_stunned(status: StatusEffects) -> bool:
    return is_active(status, "stun")


def apply_status(status: StatusEffects, effect_id: str) -> bool:
    """Start an effect at full duration. No-op (returns False) while it is still running."""
    if effect_id not in FIELDS:
        raise KeyError(f"unknown status effect {effect_id!r}")
    if is_active(status, effect_id):
        return False
    setattr(status, FIELDS[effect_id], STATUS_EFFECTS[effect_id]["turns"])
    return True


def tick_status(state: DungeonState) -> Tuple[List[StatusEvent], bool]:
    """Start-of-turn pipeline: DoT damage, then stun consumption, each timer -1.

    Returns the tick events and whether the hero loses this turn to a stun.
    """
    status = state.status_effects
    events: List[StatusEvent] = []
    stunned = False
    for effect_id in TICK_ORDER:
        left = turns_left(status, effect_id)
        if left <= 0:
            continue
        damage = int(STATUS_EFFECTS[effect_id]["damage"])
        if damage > 0:
            state.hero_hp = take_damage(state.hero_hp, damage)
        else:
            stunned = True
        setattr(status, FIELDS[effect_id], left - 1)
        events.append(StatusEvent(effect=effect_id, amount=damage))
    return events, stunned
