"""Automated regression suite for dungeon turn resolution.

Directly exercises create_dungeon + resolve_command with scripted dice so every
scenario replays the same way.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from games.dungeon.engine import errors
from games.dungeon.engine.dice import FixedRandom
from games.dungeon.engine.models import Command
from games.dungeon.engine.resolver import create_dungeon, resolve_command


BOSS_ORDER = {"pending": 0, "ready": 1, "defeated": 2}
STATUS_FIELDS = ("poison_turns", "burn_turns", "stun_turns")


def state_extract(state) -> Dict[str, Any]:
    return {
        "turn_round": state.turn_round,
        "hero_hp": state.hero_hp,
        "hero_mana": state.hero_mana,
        "monsters": [monster.hp for monster in state.monsters],
        "boss": (state.boss.hp, state.boss.state),
        "status": {name: getattr(state.status_effects, name) for name in STATUS_FIELDS},
        "inventory": list(state.inventory),
        "victory": state.victory,
        "defeated": state.defeated,
    }


def _assert_invariants(before: Dict[str, Any], state) -> None:
    assert state.turn_round == before["turn_round"] + 1, "a resolved command should advance turn_round exactly once"
    assert state.hero_hp >= 0, "negative hero hp"
    assert all(monster.hp >= 0 for monster in state.monsters), "negative monster hp"
    assert BOSS_ORDER[state.boss.state] >= BOSS_ORDER[before["boss"][1]], "boss state regressed"
    assert not (state.victory and state.defeated), "victory and defeat are mutually exclusive"
    if before["victory"]:
        assert state.victory, "victory is sticky"
    if before["defeated"]:
        assert state.defeated, "defeat is sticky"
    for name in STATUS_FIELDS:
        now, prior = getattr(state.status_effects, name), before["status"][name]
        assert now >= 0, f"{name} below zero"
        if prior > 0:
            assert now <= prior, f"{name} grew while active"


def make_dungeon(hero_class="warrior", difficulty="easy", monsters=1, modifier="none", seed=123):
    return create_dungeon("regression", "dungeon", difficulty, hero_class, monsters=monsters, seed=seed, modifier=modifier)


def submit(state, command: Command, rng=None):
    before = state_extract(state)
    log = resolve_command(state, command, rng or FixedRandom())
    _assert_invariants(before, state)
    return log


def expect_rejected(state, command: Command, error_cls, rng=None) -> None:
    before = state_extract(state)
    try:
        resolve_command(state, command, rng or FixedRandom())
    except error_cls:
        assert state_extract(state) == before, "a rejected command must not change state"
        return
    raise AssertionError(f"expected {error_cls.__name__} for {command}")


def attack(target: str) -> Command:
    return Command(action="attack", target=target)


def ability(kind: Optional[str] = None, target: Optional[str] = None) -> Command:
    return Command(action="ability", ability=kind, target=target)


def clear_monsters(state) -> None:
    for monster in state.monsters:
        monster.hp = 0
    state.boss.state = "ready"


def scenario_lethal_hit_unlocks_boss() -> bool:
    state = make_dungeon("warrior", "easy", monsters=1)
    state.hero_hp = 100
    state.monsters[0].hp = 10

    log = submit(state, attack("monster-0"), FixedRandom(rolls=[13]))

    assert log.hero_event.amount == 15, "1d20+2 with a 13 should hit for 15"
    assert state.monsters[0].hp == 0
    assert log.hero_event.killed is True
    assert state.last_hero_action.killed is True
    assert state.boss.state == "ready", "last monster down should unlock the boss"
    assert log.enemy_events == [], "dead monsters and a pending boss do not counter"
    return True


def scenario_mana_exhaustion_halves_damage() -> bool:
    full = make_dungeon("mage", "normal", monsters=1)
    empty = make_dungeon("mage", "normal", monsters=1)
    empty.hero_mana = 0

    full_log = submit(full, attack("monster-0"), FixedRandom(rolls=[7, 8]))
    empty_log = submit(empty, attack("monster-0"), FixedRandom(rolls=[7, 8]))

    assert full_log.hero_event.amount == 19
    assert empty_log.hero_event.amount == full_log.hero_event.amount // 2
    assert full.hero_mana == 4, "each attack spends one mana"
    assert empty.hero_mana == 0, "mana is clamped at zero"
    return True


def scenario_stun_consumes_turn() -> bool:
    state = make_dungeon("warrior", "easy", monsters=2)
    state.status_effects.stun_turns = 1
    hp_before = state.hero_hp

    log = submit(state, attack("monster-0"))

    assert log.hero_event.kind == "stunned"
    assert [monster.hp for monster in state.monsters] == [30, 30], "no damage while stunned"
    assert log.enemy_events == [], "no counter-attack on a stunned turn"
    assert state.status_effects.stun_turns == 0
    assert state.turn_round == 1
    assert state.hero_hp == hp_before
    return True


def scenario_victory_is_terminal() -> bool:
    state = make_dungeon("warrior", "easy", monsters=2)
    clear_monsters(state)
    state.boss.hp = 5

    log = submit(state, attack("boss"))

    assert state.boss.hp == 0
    assert state.boss.state == "defeated"
    assert state.victory is True and log.terminal == "victory"
    assert log.loot_dropped == "weapon-rare", "the boss always drops a rare or epic item"

    expect_rejected(state, attack("boss"), errors.GameOver)
    expect_rejected(state, ability("taunt"), errors.GameOver)
    expect_rejected(state, Command(action="equip_item", item="weapon-rare"), errors.GameOver)

    treasure = submit(state, Command(action="open_treasure"), FixedRandom(picks=[1, 1]))
    assert treasure.loot_dropped == "armor-epic"
    assert state.treasure_opened and state.treasure_loot == "armor-epic"
    expect_rejected(state, Command(action="open_treasure"), errors.InvalidCommand)
    return True


def scenario_taunt_blunts_one_round() -> bool:
    state = make_dungeon("warrior", "normal", monsters=1)

    log = submit(state, ability("taunt"))
    assert log.hero_event.kind == "taunt"
    assert log.enemy_events[0].amount == 1, "4 x 0.8 x 0.5 floors to 1"
    assert state.hero_hp == 149
    assert state.taunt_active == 1, "taunt cools down for one turn"

    expect_rejected(state, ability("taunt"), errors.AbilityUnavailable)

    log = submit(state, attack("monster-0"))
    assert log.enemy_events[0].amount == 3, "only the passive 20% applies once taunt lapses"
    assert state.taunt_active == 0

    submit(state, ability("taunt"))
    return True


def scenario_heal_costs_mana_and_skips_counters() -> bool:
    state = make_dungeon("mage", "normal", monsters=2)
    state.hero_hp = 40

    log = submit(state, ability("heal"))
    assert log.hero_event.kind == "heal" and log.hero_event.amount == 30
    assert state.hero_hp == 70
    assert state.hero_mana == 3
    assert log.enemy_events == [], "healing does not provoke counter-attacks"

    expect_rejected(state, ability("heal"), errors.AbilityUnavailable)

    state.hero_hp = 10
    state.hero_mana = 1
    expect_rejected(state, ability("heal"), errors.AbilityUnavailable)
    return True


def scenario_backstab_cooldown() -> bool:
    state = make_dungeon("rogue", "easy", monsters=2)

    log = submit(state, Command(action="backstab", target="monster-0"), FixedRandom(rolls=[10]))
    assert log.hero_event.kind == "backstab"
    assert log.hero_event.amount == 36, "(10 + 2) x 3"
    assert state.monsters[0].hp == 0
    assert state.backstab_cooldown == 3
    assert state.hero_hp == 98, "the surviving monster counters for 2"

    expect_rejected(state, ability("backstab", "monster-1"), errors.AbilityUnavailable)

    for expected in (2, 1, 0):
        submit(state, attack("monster-1"))
        assert state.backstab_cooldown == expected
    submit(state, ability("backstab", "monster-1"))
    assert state.backstab_cooldown == 3
    return True


def scenario_rogue_dodges_per_source() -> bool:
    state = make_dungeon("rogue", "easy", monsters=2)

    log = submit(state, attack("monster-0"), FixedRandom(chances=[0.1]))

    assert log.hero_event.amount == 3, "(1 + 2) x 1.2 floors to 3"
    assert log.enemy_events[0].dodged is True and log.enemy_events[0].amount == 0
    assert log.enemy_events[1].dodged is False and log.enemy_events[1].amount == 2
    assert state.hero_hp == 98
    return True


def scenario_poison_does_not_stack() -> bool:
    state = make_dungeon("warrior", "easy", monsters=2)

    log = submit(state, attack("monster-0"), FixedRandom(chances=[0.1, 0.1]))
    assert log.enemy_events[0].status_applied == ["poison"]
    assert log.enemy_events[1].status_applied == [], "an active poison cannot be re-applied"
    assert state.status_effects.poison_turns == 3

    hp_before = state.hero_hp
    log = submit(state, attack("monster-0"), FixedRandom(chances=[0.1, 0.1]))
    assert log.status_events[0].effect == "poison" and log.status_events[0].amount == 5
    assert state.status_effects.poison_turns == 2, "re-application while active is ignored"
    assert state.hero_hp == hp_before - 5 - 1 - 1
    return True


def scenario_boss_burn_and_stun() -> bool:
    state = make_dungeon("warrior", "easy", monsters=1)
    clear_monsters(state)

    log = submit(state, attack("boss"), FixedRandom(chances=[0.1, 0.1]))
    assert log.enemy_events[0].source == "boss"
    assert log.enemy_events[0].status_applied == ["burn", "stun"]
    assert state.hero_hp == 149
    assert state.status_effects.burn_turns == 2 and state.status_effects.stun_turns == 1

    boss_hp = state.boss.hp
    log = submit(state, attack("boss"))
    assert log.hero_event.kind == "stunned"
    assert state.boss.hp == boss_hp
    assert state.hero_hp == 141, "burn ticks for 8 before the stun is consumed"
    assert state.status_effects.burn_turns == 1 and state.status_effects.stun_turns == 0
    return True


def scenario_weapon_drop_equip_and_decay() -> bool:
    state = make_dungeon("warrior", "easy", monsters=1)
    state.monsters[0].hp = 10

    log = submit(state, attack("monster-0"), FixedRandom(rolls=[13], chances=[0.5, 0.1]))
    assert log.loot_dropped == "weapon-common"
    assert state.inventory == ["weapon-common"]

    log = submit(state, Command(action="equip_item", item="weapon-common"))
    assert log.enemy_events == [] and log.status_events == []
    assert state.inventory == []
    assert state.equipment.weapon_bonus == 5 and state.equipment.weapon_uses == 3

    for uses_left in (2, 1, 0):
        log = submit(state, attack("boss"))
        assert log.hero_event.amount == 11, "2d22+4 at minimum plus the weapon bonus"
        assert state.equipment.weapon_uses == uses_left
    assert state.equipment.weapon_bonus == 0, "a spent weapon loses its bonus"

    log = submit(state, attack("boss"))
    assert log.hero_event.amount == 6
    return True


def scenario_potions_and_armor() -> bool:
    state = make_dungeon("warrior", "normal", monsters=1)
    state.hero_hp = 100
    state.inventory = ["hppotion-common", "hppotion-epic", "manapotion-rare", "armor-epic", "armor-common"]

    submit(state, Command(action="use_item", item="hppotion-common"))
    assert state.hero_hp == 120
    submit(state, Command(action="use_item", item="hppotion-epic"))
    assert state.hero_hp == 150
    expect_rejected(state, Command(action="use_item", item="manapotion-rare"), errors.InvalidItem)

    submit(state, Command(action="equip_item", item="armor-epic"))
    assert state.equipment.armor_bonus == 30
    log = submit(state, attack("monster-0"))
    assert log.enemy_events[0].amount == 2, "4 x 0.8 x 0.7 floors to 2"

    submit(state, Command(action="use_item", item="armor-common"))
    assert state.equipment.armor_bonus == 10, "equipping swaps out the old armor"
    assert state.inventory == ["manapotion-rare"], "only a mage can drink mana"

    expect_rejected(state, Command(action="use_item", item="hppotion-rare"), errors.InvalidItem)
    expect_rejected(state, Command(action="use_item", item="sword-legendary"), errors.InvalidItem)
    return True


def scenario_modifiers() -> bool:
    fortitude = make_dungeon("warrior", "easy", monsters=2, modifier="curse-fortitude")
    assert [m.max_hp for m in fortitude.monsters] == [45, 45]
    assert fortitude.boss.max_hp == 300

    strength = make_dungeon("warrior", "easy", modifier="blessing-strength")
    log = submit(strength, attack("monster-0"), FixedRandom(rolls=[8]))
    assert log.hero_event.amount == 15

    darkness = make_dungeon("warrior", "easy", modifier="curse-darkness")
    log = submit(darkness, attack("monster-0"), FixedRandom(rolls=[8]))
    assert log.hero_event.amount == 7

    fortune = make_dungeon("warrior", "easy", modifier="blessing-fortune")
    log = submit(fortune, attack("monster-0"), FixedRandom(rolls=[8], chances=[0.1]))
    assert log.hero_event.crit is True and log.hero_event.amount == 20

    fury = make_dungeon("warrior", "easy", modifier="curse-fury")
    clear_monsters(fury)
    log = submit(fury, attack("boss"))
    assert log.enemy_events[0].amount == 3, "2 x 2 x 0.8 floors to 3"

    resilience = make_dungeon("warrior", "normal", monsters=1, modifier="blessing-resilience")
    log = submit(resilience, attack("monster-0"))
    assert log.enemy_events[0].amount == 1, "4 x 0.8 x 0.5 floors to 1"
    return True


def scenario_mage_kill_regenerates_mana() -> bool:
    state = make_dungeon("mage", "easy", monsters=2)
    state.monsters[0].hp = 3

    submit(state, attack("monster-0"))
    assert state.hero_mana == 5, "spent one on the attack, regained one on the kill"

    clear_monsters(state)
    log = submit(state, attack("boss"), FixedRandom(rolls=[10, 10]))
    assert log.hero_event.amount == 36, "(10 + 10 + 4) x 1.5 against the boss"
    return True


def scenario_invalid_commands_leave_state_alone() -> bool:
    state = make_dungeon("warrior", "easy", monsters=2)
    state.monsters[1].hp = 0

    expect_rejected(state, attack("boss"), errors.InvalidTarget)
    expect_rejected(state, attack("monster-1"), errors.InvalidTarget)
    expect_rejected(state, attack("monster-7"), errors.InvalidTarget)
    expect_rejected(state, attack("dragon"), errors.InvalidTarget)
    expect_rejected(state, attack(None), errors.InvalidTarget)
    expect_rejected(state, ability("heal"), errors.AbilityUnavailable)
    expect_rejected(state, Command(action="backstab", target="monster-0"), errors.AbilityUnavailable)
    expect_rejected(state, ability("fireball"), errors.InvalidCommand)
    expect_rejected(state, Command(action="dance"), errors.InvalidCommand)
    expect_rejected(state, Command(action="open_treasure"), errors.InvalidCommand)
    assert state.turn_round == 0
    return True


def scenario_hero_defeat_is_terminal() -> bool:
    state = make_dungeon("warrior", "hard", monsters=3)
    state.hero_hp = 5

    log = submit(state, attack("monster-0"))

    assert log.terminal == "defeated"
    assert state.defeated is True and state.victory is False
    assert state.hero_hp == 0
    expect_rejected(state, attack("monster-0"), errors.GameOver)
    expect_rejected(state, Command(action="open_treasure"), errors.GameOver)
    return True


def scenario_poison_tick_can_kill() -> bool:
    state = make_dungeon("warrior", "easy", monsters=1)
    state.hero_hp = 4
    state.status_effects.poison_turns = 2

    log = submit(state, attack("monster-0"))

    assert log.hero_event.kind == "collapsed"
    assert state.monsters[0].hp == 30
    assert state.defeated is True
    return True


SCENARIOS = [
    scenario_lethal_hit_unlocks_boss,
    scenario_mana_exhaustion_halves_damage,
    scenario_stun_consumes_turn,
    scenario_victory_is_terminal,
    scenario_taunt_blunts_one_round,
    scenario_heal_costs_mana_and_skips_counters,
    scenario_backstab_cooldown,
    scenario_rogue_dodges_per_source,
    scenario_poison_does_not_stack,
    scenario_boss_burn_and_stun,
    scenario_weapon_drop_equip_and_decay,
    scenario_potions_and_armor,
    scenario_modifiers,
    scenario_mage_kill_regenerates_mana,
    scenario_invalid_commands_leave_state_alone,
    scenario_hero_defeat_is_terminal,
    scenario_poison_tick_can_kill,
]


def select(patterns: Optional[List[str]] = None) -> List:
    """Scenarios whose name contains any of ``patterns`` (all of them when empty)."""
    if not patterns:
        return list(SCENARIOS)
    return [fn for fn in SCENARIOS if any(p in fn.__name__ for p in patterns)]


def run_all(scenarios: Optional[List] = None) -> List[Tuple[str, bool, str]]:
    results: List[Tuple[str, bool, str]] = []
    for scenario in SCENARIOS if scenarios is None else scenarios:
        try:
            scenario()
            results.append((scenario.__name__, True, ""))
        except AssertionError as exc:
            results.append((scenario.__name__, False, str(exc)))
    return results
