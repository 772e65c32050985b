# games/dungeon/engine/resolver.py
from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple

from .dice import chance, rng_for, roll
from .effects import apply_status, is_active, tick_status
from .errors import AbilityUnavailable, GameOver, InvalidCommand, InvalidTarget
from .heroes import HeroStrategy, strategy_for
from .loot import check_equippable, check_usable, equip, roll_drop, roll_treasure, use, weapon_bonus
from .models import (
    Boss,
    CombatLog,
    Command,
    DungeonState,
    EnemyEvent,
    HeroEvent,
    Monster,
)
from .modifiers import (
    boss_counter_multiplier,
    crit_chance,
    crit_multiplier,
    enemy_hp,
    incoming_multiplier,
    outgoing_multiplier,
    roll_modifier,
)
from .rules import armor_multiplier, scale, take_damage
from ..content.balance import COUNTER_PROCS, DEFAULTS, DIFFICULTIES
from ..content.classes import ABILITIES, CLASSES
from ..content.modifiers import MODIFIERS

logger = logging.getLogger(__name__)

ITEM_ACTIONS = ("use_item", "equip_item")

Target = Tuple[str, Optional[int]]


def new_seed() -> int:
    return int(time.time() * 1000) & 0xFFFFFFFF


def create_dungeon(
    namespace: str,
    name: str,
    difficulty: str = "normal",
    hero_class: str = "warrior",
    monsters: Optional[int] = None,
    seed: Optional[int] = None,
    modifier: Optional[str] = None,
) -> DungeonState:
    """
    Build a fresh session state from the difficulty and class tables.
    The modifier is rolled once from the session seed unless one is forced.
    """
    if difficulty not in DIFFICULTIES:
        raise InvalidCommand("difficulty must be easy, normal, or hard")
    if hero_class not in CLASSES:
        raise InvalidCommand("heroClass must be warrior, mage, or rogue")
    count = DEFAULTS["monsters"] if monsters is None else int(monsters)
    if not DEFAULTS["monsters_min"] <= count <= DEFAULTS["monsters_max"]:
        raise InvalidCommand(
            f"monsters must be between {DEFAULTS['monsters_min']} and {DEFAULTS['monsters_max']}"
        )
    if modifier is not None and modifier not in MODIFIERS:
        raise InvalidCommand(f"unknown modifier '{modifier}'")

    seed = new_seed() if seed is None else int(seed)
    if modifier is None:
        modifier = roll_modifier(rng_for(seed, -1))

    table = DIFFICULTIES[difficulty]
    monster_hp = enemy_hp(int(table["monster_hp"]), modifier)
    boss_hp = enemy_hp(int(table["boss_hp"]), modifier)
    resources = CLASSES[hero_class]["resources"]

    return DungeonState(
        namespace=namespace,
        name=name,
        difficulty=difficulty,
        hero_class=hero_class,
        hero_hp=int(resources["hp"]),
        max_hero_hp=int(resources["hp"]),
        hero_mana=int(resources["mana"]),
        monsters=[Monster(hp=monster_hp, max_hp=monster_hp) for _ in range(count)],
        boss=Boss(hp=boss_hp, max_hp=boss_hp),
        modifier=modifier,
        seed=seed,
    )


def parse_target(state: DungeonState, target: Optional[str]) -> Target:
    """Resolve "monster-<n>" / "boss" into a living, attackable entity."""
    if not target:
        raise InvalidTarget("target required")
    if target == "boss":
        if state.boss.state == "pending":
            raise InvalidTarget("The boss is locked until every monster is dead.")
        if state.boss.hp <= 0:
            raise InvalidTarget("The boss is already dead.")
        return "boss", None

    kind, _, index = target.rpartition("-")
    if kind != "monster" or not index.isdigit():
        raise InvalidTarget(f"Unknown target '{target}'.")
    idx = int(index)
    if idx >= len(state.monsters):
        raise InvalidTarget(f"There is no {target}.")
    if not state.monsters[idx].alive:
        raise InvalidTarget(f"{target} is already dead.")
    return "monster", idx


def _check_ability(strategy: HeroStrategy, state: DungeonState, ability_id: str) -> None:
    ability = ABILITIES.get(ability_id)
    if not ability:
        raise InvalidCommand(f"Unknown ability '{ability_id}'.")
    if strategy.class_id not in ability.get("classes", []):
        raise AbilityUnavailable(f"{CLASSES[state.hero_class]['name']} cannot use {ability['name']}.")
    reason = strategy.check_ability(state)
    if reason:
        raise AbilityUnavailable(reason)


def _normalize(state: DungeonState, command: Command) -> Command:
    # ability("backstab") is the rogue's targeted ability
    if command.action != "ability" or state.hero_class not in CLASSES:
        return command
    if (command.ability or strategy_for(state.hero_class).ability) == "backstab":
        return Command(action="backstab", target=command.target)
    return command


def validate_command(state: DungeonState, command: Command) -> Optional[Target]:
    """Reject anything that cannot resolve, before a single field is touched."""
    if command.action == "open_treasure":
        if state.defeated:
            raise GameOver("The hero has fallen.")
        if not state.victory:
            raise InvalidCommand("The treasure is locked until the boss falls.")
        if state.treasure_opened:
            raise InvalidCommand("The treasure has already been opened.")
        return None

    if state.game_over:
        raise GameOver("The dungeon is already over.")

    strategy = strategy_for(state.hero_class)
    if command.action == "attack":
        return parse_target(state, command.target)
    if command.action == "backstab":
        _check_ability(strategy, state, "backstab")
        return parse_target(state, command.target)
    if command.action == "ability":
        _check_ability(strategy, state, command.ability or strategy.ability)
        return None
    if command.action == "use_item":
        check_usable(state, command.item)
        return None
    if command.action == "equip_item":
        check_equippable(state, command.item)
        return None
    raise InvalidCommand(f"Unknown action '{command.action}'.")


def hero_attack(
    state: DungeonState,
    strategy: HeroStrategy,
    target: Target,
    backstab: bool,
    r,
) -> HeroEvent:
    kind, idx = target
    is_boss = kind == "boss"
    dice, total = roll(state.difficulty, is_boss, r)

    multipliers = [
        strategy.outgoing(state, is_boss, backstab),
        strategy.spend_attack(state),
        outgoing_multiplier(state.modifier),
    ]
    damage = scale(total, multipliers) + weapon_bonus(state)

    crit = False
    crit_p = crit_chance(state.modifier)
    if crit_p > 0 and chance(crit_p, r):
        crit = True
        damage = scale(damage, [crit_multiplier(state.modifier)])

    entity = state.boss if is_boss else state.monsters[idx]
    before = entity.hp
    entity.hp = take_damage(entity.hp, damage)
    killed = before > 0 and entity.hp == 0
    if killed:
        strategy.on_kill(state, is_boss)

    return HeroEvent(
        kind="backstab" if backstab else "attack",
        amount=damage,
        target="boss" if is_boss else f"monster-{idx}",
        crit=crit,
        killed=killed,
        dice=dice,
    )


def counter_attacks(state: DungeonState, strategy: HeroStrategy, r) -> List[EnemyEvent]:
    """Every living monster, then a ready boss, strikes back once."""
    table = DIFFICULTIES[state.difficulty]
    incoming = [
        strategy.incoming(state),
        armor_multiplier(state.equipment.armor_bonus),
        incoming_multiplier(state.modifier),
    ]

    sources = [
        (f"monster-{idx}", "monster", int(table["monster_counter"]), 1.0)
        for idx, monster in enumerate(state.monsters)
        if monster.alive
    ]
    if state.boss.state == "ready" and state.boss.hp > 0:
        sources.append(("boss", "boss", int(table["boss_counter"]), boss_counter_multiplier(state.modifier)))

    dodge_p = strategy.dodge_chance(state)
    events: List[EnemyEvent] = []
    for source, kind, base, extra in sources:
        if dodge_p > 0 and chance(dodge_p, r):
            events.append(EnemyEvent(source=source, dodged=True))
            continue

        amount = scale(base, [extra] + incoming)
        state.hero_hp = take_damage(state.hero_hp, amount)

        applied = []
        for effect_id, proc_p in COUNTER_PROCS[kind]:
            if is_active(state.status_effects, effect_id):
                continue
            if chance(proc_p, r) and apply_status(state.status_effects, effect_id):
                applied.append(effect_id)
        events.append(EnemyEvent(source=source, amount=amount, status_applied=applied))
    return events


def check_terminal(state: DungeonState) -> str:
    """Defeat first, then victory, then the boss unlock."""
    if state.hero_hp <= 0:
        state.hero_hp = 0
        state.defeated = True
        return "defeated"
    if state.boss.state == "ready" and state.boss.hp <= 0:
        state.boss.state = "defeated"
        state.victory = True
        return "victory"
    if state.boss.state == "pending" and not any(monster.alive for monster in state.monsters):
        state.boss.state = "ready"
    return "none"


def _finish(state: DungeonState, log: CombatLog) -> CombatLog:
    state.last_hero_action = log.hero_event
    state.last_enemy_action = list(log.enemy_events)
    return log


def resolve_command(state: DungeonState, command: Command, r=None) -> CombatLog:
    """
    Resolves one command against ``state`` in place and returns its CombatLog.
    Raises a DungeonError before any mutation when the command is rejected.
    Draw order: hero dice, crit, per counter source (dodge, status procs), loot.
    """
    command = _normalize(state, command)
    target = validate_command(state, command)
    if r is None:
        r = rng_for(state.seed, state.turn_round)

    if command.action == "open_treasure":
        found = roll_treasure(state, r)
        state.turn_round += 1
        logger.info("%s/%s treasure opened: %s", state.namespace, state.name, found)
        return _finish(state, CombatLog(
            round=state.turn_round,
            hero_event=HeroEvent(kind="open_treasure", item=found),
            loot_dropped=found,
            terminal="victory",
        ))

    if command.action in ITEM_ACTIONS:
        # inventory changes are free: no ticks, no cooldowns, no counter-attacks
        if command.action == "equip_item":
            hero_event = equip(state, command.item)
        else:
            hero_event = use(state, command.item)
        state.turn_round += 1
        return _finish(state, CombatLog(round=state.turn_round, hero_event=hero_event))

    strategy = strategy_for(state.hero_class)
    status_events, stunned = tick_status(state)
    enemy_events: List[EnemyEvent] = []
    loot_dropped = None
    used_ability = False
    requested = command.target if command.action != "ability" else None

    if state.hero_hp <= 0:
        hero_event = HeroEvent(kind="collapsed", target=requested)
    elif stunned:
        hero_event = HeroEvent(kind="stunned", target=requested)
    elif command.action in ("attack", "backstab"):
        backstab = command.action == "backstab"
        hero_event = hero_attack(state, strategy, target, backstab, r)
        if backstab:
            strategy.use_ability(state)
            used_ability = True
        enemy_events = counter_attacks(state, strategy, r)
        if hero_event.killed:
            loot_dropped = roll_drop(state, target[0] == "boss", r)
    else:
        hero_event = strategy.use_ability(state)
        used_ability = True
        if strategy.ability_data.get("triggers_counter"):
            enemy_events = counter_attacks(state, strategy, r)

    strategy.advance(state, used_ability)
    state.turn_round += 1
    terminal = check_terminal(state)
    if terminal != "none":
        logger.info("%s/%s ended in %s on round %d", state.namespace, state.name, terminal, state.turn_round)

    return _finish(state, CombatLog(
        round=state.turn_round,
        hero_event=hero_event,
        enemy_events=enemy_events,
        status_events=status_events,
        loot_dropped=loot_dropped,
        terminal=terminal,
    ))
