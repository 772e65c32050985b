# games/dungeon/engine/heroes.py
"""Per-class behaviour as a closed strategy table.

Each hero class is one ``HeroStrategy`` row built from plain functions. The
resolver only talks to the row, never to the class id, so adding a class means
adding content plus one row here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import DungeonState, HeroEvent
from .rules import heal
from ..content.classes import ABILITIES, CLASSES


def _passive(class_id: str) -> Dict[str, float]:
    return CLASSES[class_id]["passive"]


def _no_dodge(state: DungeonState) -> float:
    return 0.0


def _no_spend(state: DungeonState) -> float:
    return 1.0


def _no_kill_bonus(state: DungeonState, target_is_boss: bool) -> None:
    return None


# Warrior

def _warrior_outgoing(state: DungeonState, target_is_boss: bool, backstab: bool) -> float:
    return 1.0


def _warrior_incoming(state: DungeonState) -> float:
    multiplier = float(_passive("warrior")["incoming"])
    if taunt_is_active(state):
        multiplier *= float(ABILITIES["taunt"]["incoming"])
    return multiplier


def taunt_is_active(state: DungeonState) -> bool:
    return state.taunt_active >= int(ABILITIES["taunt"]["active_turns"])


def _warrior_check(state: DungeonState) -> Optional[str]:
    if state.taunt_active > 0:
        return "Taunt is on cooldown."
    return None


def _warrior_ability(state: DungeonState) -> HeroEvent:
    state.taunt_active = int(ABILITIES["taunt"]["active_turns"])
    return HeroEvent(kind="taunt")


def _warrior_advance(state: DungeonState, used_ability: bool) -> None:
    state.taunt_active = max(0, state.taunt_active - 1)


# Mage

def _mage_outgoing(state: DungeonState, target_is_boss: bool, backstab: bool) -> float:
    if target_is_boss:
        return float(_passive("mage")["boss_multiplier"])
    return 1.0


def _mage_incoming(state: DungeonState) -> float:
    return 1.0


def _mage_spend(state: DungeonState) -> float:
    """Each attack burns mana; an empty pool halves the hit instead of blocking it."""
    passive = _passive("mage")
    cost = int(passive["mana_per_attack"])
    if state.hero_mana < cost:
        state.hero_mana = 0
        return float(passive["no_mana_multiplier"])
    state.hero_mana -= cost
    return 1.0


def _mage_kill_bonus(state: DungeonState, target_is_boss: bool) -> None:
    if not target_is_boss:
        state.hero_mana += int(_passive("mage")["mana_on_kill"])


def _mage_check(state: DungeonState) -> Optional[str]:
    ability = ABILITIES["heal"]
    cost = int(ability["cost"]["mana"])
    if state.hero_mana < cost:
        return "not enough mana"
    if state.hero_hp >= state.max_hero_hp * float(ability["max_hp_ratio"]):
        return "HP is too high to heal."
    return None


def _mage_ability(state: DungeonState) -> HeroEvent:
    ability = ABILITIES["heal"]
    state.hero_mana -= int(ability["cost"]["mana"])
    before = state.hero_hp
    state.hero_hp = heal(state.hero_hp, int(ability["amount"]), state.max_hero_hp)
    return HeroEvent(kind="heal", amount=state.hero_hp - before, target="hero")


def _mage_advance(state: DungeonState, used_ability: bool) -> None:
    return None


# Rogue

def _rogue_outgoing(state: DungeonState, target_is_boss: bool, backstab: bool) -> float:
    if backstab:
        return float(ABILITIES["backstab"]["multiplier"])
    return float(_passive("rogue")["outgoing"])


def _rogue_incoming(state: DungeonState) -> float:
    return 1.0


def _rogue_dodge(state: DungeonState) -> float:
    return float(_passive("rogue")["dodge"])


def _rogue_check(state: DungeonState) -> Optional[str]:
    if state.backstab_cooldown > 0:
        return f"Backstab is on cooldown ({state.backstab_cooldown} turns)."
    return None


def _rogue_ability(state: DungeonState) -> HeroEvent:
    # Called after the backstab hit lands; the damage itself goes through the attack pipeline.
    state.backstab_cooldown = int(ABILITIES["backstab"]["cooldown"])
    return HeroEvent(kind="backstab")


def _rogue_advance(state: DungeonState, used_ability: bool) -> None:
    # the turn that sets the cooldown does not count against it
    if not used_ability:
        state.backstab_cooldown = max(0, state.backstab_cooldown - 1)


@dataclass(frozen=True)
class HeroStrategy:
    class_id: str
    ability: str
    outgoing: Callable[[DungeonState, bool, bool], float]
    incoming: Callable[[DungeonState], float]
    dodge_chance: Callable[[DungeonState], float]
    spend_attack: Callable[[DungeonState], float]
    on_kill: Callable[[DungeonState, bool], None]
    check_ability: Callable[[DungeonState], Optional[str]]
    use_ability: Callable[[DungeonState], HeroEvent]
    advance: Callable[[DungeonState, bool], None]

    @property
    def ability_data(self) -> Dict:
        return ABILITIES[self.ability]


HERO_CLASSES: Dict[str, HeroStrategy] = {
    "warrior": HeroStrategy(
        class_id="warrior",
        ability="taunt",
        outgoing=_warrior_outgoing,
        incoming=_warrior_incoming,
        dodge_chance=_no_dodge,
        spend_attack=_no_spend,
        on_kill=_no_kill_bonus,
        check_ability=_warrior_check,
        use_ability=_warrior_ability,
        advance=_warrior_advance,
    ),
    "mage": HeroStrategy(
        class_id="mage",
        ability="heal",
        outgoing=_mage_outgoing,
        incoming=_mage_incoming,
        dodge_chance=_no_dodge,
        spend_attack=_mage_spend,
        on_kill=_mage_kill_bonus,
        check_ability=_mage_check,
        use_ability=_mage_ability,
        advance=_mage_advance,
    ),
    "rogue": HeroStrategy(
        class_id="rogue",
        ability="backstab",
        outgoing=_rogue_outgoing,
        incoming=_rogue_incoming,
        dodge_chance=_rogue_dodge,
        spend_attack=_no_spend,
        on_kill=_no_kill_bonus,
        check_ability=_rogue_check,
        use_ability=_rogue_ability,
        advance=_rogue_advance,
    ),
}


def strategy_for(class_id: str) -> HeroStrategy:
    return HERO_CLASSES[class_id]
