# games/dungeon/engine/loot.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from .dice import chance, weighted_pick
from .errors import InvalidItem
from .models import DungeonState, HeroEvent
from .rules import heal
from ..content.balance import DIFFICULTIES
from ..content.classes import CLASSES
from ..content.items import (
    BOSS_RARITIES,
    CATEGORIES,
    ITEMS,
    RARITY_WEIGHTS,
    item_id,
    split_item_id,
)

logger = logging.getLogger(__name__)


def roll_drop(state: DungeonState, target_is_boss: bool, r) -> Optional[str]:
    """Roll the kill drop and put it in the inventory.

    Monsters drop on a difficulty-based chance with weighted rarity; the boss
    always drops one rare or epic item.
    """
    if target_is_boss:
        category = r.choice(CATEGORIES)
        rarity = r.choice(BOSS_RARITIES)
    else:
        if not chance(float(DIFFICULTIES[state.difficulty]["drop_chance"]), r):
            return None
        category = r.choice(CATEGORIES)
        rarity = weighted_pick(RARITY_WEIGHTS, r)
    dropped = item_id(category, rarity)
    state.inventory.append(dropped)
    logger.debug("%s/%s dropped %s", state.namespace, state.name, dropped)
    return dropped


def roll_treasure(state: DungeonState, r) -> str:
    category = r.choice(CATEGORIES)
    rarity = r.choice(BOSS_RARITIES)
    found = item_id(category, rarity)
    state.inventory.append(found)
    state.treasure_opened = True
    state.treasure_loot = found
    return found


def check_item(state: DungeonState, item: Optional[str]) -> Tuple[str, str]:
    """Validate an inventory item id, returning (category, rarity)."""
    parsed = split_item_id(item or "")
    if parsed is None:
        raise InvalidItem(f"Unknown item '{item}'.")
    if item not in state.inventory:
        raise InvalidItem(f"'{item}' is not in the inventory.")
    return parsed


def check_equippable(state: DungeonState, item: Optional[str]) -> Tuple[str, str]:
    category, rarity = check_item(state, item)
    if not ITEMS[category].get("slot"):
        raise InvalidItem(f"'{item}' cannot be equipped.")
    return category, rarity


def check_usable(state: DungeonState, item: Optional[str]) -> Tuple[str, str]:
    category, rarity = check_item(state, item)
    if "mana" in ITEMS[category] and not CLASSES[state.hero_class].get("mana_pool"):
        raise InvalidItem(f"{CLASSES[state.hero_class]['name']} has no mana to restore.")
    return category, rarity


def equip(state: DungeonState, item: str) -> HeroEvent:
    category, rarity = check_equippable(state, item)
    data = ITEMS[category]
    state.inventory.remove(item)
    # equipping discards whatever held the slot before
    if data["slot"] == "weapon":
        state.equipment.weapon_bonus = int(data["bonus"][rarity])
        state.equipment.weapon_uses = data["uses"][rarity]
    else:
        state.equipment.armor_bonus = int(data["bonus"][rarity])
    return HeroEvent(kind="equip_item", amount=int(data["bonus"][rarity]), item=item)


def use(state: DungeonState, item: str) -> HeroEvent:
    category, rarity = check_usable(state, item)
    data = ITEMS[category]
    if not data.get("consumable"):
        return equip(state, item)

    state.inventory.remove(item)
    if category == "hppotion":
        amount = data["heal"][rarity]
        before = state.hero_hp
        if amount is None:
            state.hero_hp = state.max_hero_hp
        else:
            state.hero_hp = heal(state.hero_hp, int(amount), state.max_hero_hp)
        return HeroEvent(kind="use_item", amount=state.hero_hp - before, target="hero", item=item)

    gained = int(data["mana"][rarity])
    state.hero_mana += gained
    return HeroEvent(kind="use_item", amount=gained, target="hero", item=item)


def weapon_bonus(state: DungeonState) -> int:
    """Bonus for the current hit; spends one use and clears the weapon when used up."""
    equipment = state.equipment
    bonus = equipment.weapon_bonus
    if bonus <= 0:
        return 0
    if equipment.weapon_uses is not None:
        equipment.weapon_uses -= 1
        if equipment.weapon_uses <= 0:
            equipment.weapon_bonus = 0
            equipment.weapon_uses = 0
    return bonus
