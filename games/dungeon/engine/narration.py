# games/dungeon/engine/narration.py
from typing import List

from .models import CombatLog, HeroEvent
from ..content.classes import ABILITIES
from ..content.items import ITEMS, split_item_id

EFFECT_NAMES = {"poison": "Poison", "burn": "Burn", "stun": "Stun"}


def entity_label(target: str) -> str:
    if target == "boss":
        return "the Boss"
    return target.replace("-", " #").title() if target else "nothing"


def item_label(item: str) -> str:
    parsed = split_item_id(item or "")
    if not parsed:
        return str(item)
    category, rarity = parsed
    return f"{rarity.title()} {ITEMS[category]['name']}"


def hero_line(event: HeroEvent) -> str:
    if event.kind == "stunned":
        return "Hero is stunned and cannot act."
    if event.kind == "collapsed":
        return "Hero collapses before acting."
    if event.kind in ("attack", "backstab"):
        verb = "backstabs" if event.kind == "backstab" else "attacks"
        line = f"Hero {verb} {entity_label(event.target)} for {event.amount} damage"
        if event.crit:
            line += " (CRITICAL)"
        if event.killed:
            line += " and slays it"
        return line + "."
    if event.kind == "taunt":
        return f"Hero uses {ABILITIES['taunt']['name']}! Enemy blows are blunted this round."
    if event.kind == "heal":
        return f"Hero heals for {event.amount} HP."
    if event.kind == "equip_item":
        return f"Hero equips {item_label(event.item)}."
    if event.kind == "use_item":
        return f"Hero uses {item_label(event.item)} (+{event.amount})."
    if event.kind == "open_treasure":
        return f"Hero opens the treasure and finds {item_label(event.item)}!"
    return f"Hero does {event.kind}."


def narrate(log: CombatLog) -> List[str]:
    """Render a CombatLog as the short sentences a UI shows in its event feed."""
    lines = [f"Round {log.round}"]
    for tick in log.status_events:
        name = EFFECT_NAMES.get(tick.effect, tick.effect)
        if tick.amount:
            lines.append(f"{name} deals {tick.amount} damage to the Hero.")
        else:
            lines.append(f"{name} wears off the Hero.")
    lines.append(hero_line(log.hero_event))
    for enemy in log.enemy_events:
        if enemy.dodged:
            lines.append(f"Hero dodges {entity_label(enemy.source)}.")
            continue
        line = f"{entity_label(enemy.source)} strikes back for {enemy.amount} damage"
        if enemy.status_applied:
            names = ", ".join(EFFECT_NAMES.get(e, e) for e in enemy.status_applied)
            line += f" and inflicts {names}"
        lines.append(line + ".")
    if log.loot_dropped and log.hero_event.kind != "open_treasure":
        lines.append(f"Loot dropped: {item_label(log.loot_dropped)}.")
    if log.terminal == "victory" and log.hero_event.kind != "open_treasure":
        lines.append("VICTORY! The dungeon has been conquered!")
    elif log.terminal == "defeated":
        lines.append("The Hero has fallen. DEFEAT.")
    return lines
