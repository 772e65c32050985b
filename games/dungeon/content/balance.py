# games/dungeon/content/balance.py
DEFAULTS = {
    "monsters": 3,
    "monsters_min": 1,
    "monsters_max": 10,
    "modifier_chance": 0.8,
    "lock_timeout": 0.5,
    "command_interval": 0.3,
}

DIFFICULTIES = {
    "easy": {
        "dice": "1d20+2",
        "monster_hp": 30,
        "boss_hp": 200,
        "monster_counter": 2,
        "boss_counter": 2,
        "drop_chance": 0.60,
    },
    "normal": {
        "dice": "2d12+4",
        "monster_hp": 50,
        "boss_hp": 400,
        "monster_counter": 4,
        "boss_counter": 10,
        "drop_chance": 0.45,
    },
    "hard": {
        "dice": "3d20+5",
        "monster_hp": 80,
        "boss_hp": 800,
        "monster_counter": 6,
        "boss_counter": 15,
        "drop_chance": 0.35,
    },
}

# Boss formula relative to the difficulty's base formula.
BOSS_DICE_BONUS = {"count": 1, "sides": 2, "mod": 2}

STATUS_EFFECTS = {
    "poison": {"damage": 5, "turns": 3},
    "burn": {"damage": 8, "turns": 2},
    "stun": {"damage": 0, "turns": 1},
}

# Per-source proc chances for counter-attacks, evaluated in list order.
COUNTER_PROCS = {
    "monster": [("poison", 0.20)],
    "boss": [("burn", 0.25), ("stun", 0.15)],
}
