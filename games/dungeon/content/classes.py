# games/dungeon/content/classes.py
CLASSES = {
    "warrior": {
        "name": "Warrior",
        "resources": {"hp": 150, "mana": 0},
        "passive": {"incoming": 0.8},
        "ability": "taunt",
    },
    "mage": {
        "name": "Mage",
        "resources": {"hp": 80, "mana": 5},
        "mana_pool": True,
        "passive": {"boss_multiplier": 1.5, "mana_per_attack": 1, "mana_on_kill": 1, "no_mana_multiplier": 0.5},
        "ability": "heal",
    },
    "rogue": {
        "name": "Rogue",
        "resources": {"hp": 100, "mana": 0},
        "passive": {"outgoing": 1.2, "dodge": 0.30},
        "ability": "backstab",
    },
}

ABILITIES = {
    "taunt": {
        "name": "Taunt",
        "classes": ["warrior"],
        "incoming": 0.5,
        # 2 = active this round, 1 = cooling down, 0 = ready
        "active_turns": 2,
        "triggers_counter": True,
    },
    "heal": {
        "name": "Heal",
        "classes": ["mage"],
        "cost": {"mana": 2},
        "amount": 30,
        "max_hp_ratio": 0.8,
        "triggers_counter": False,
    },
    "backstab": {
        "name": "Backstab",
        "classes": ["rogue"],
        "multiplier": 3.0,
        "cooldown": 3,
        "requires_target": True,
        "triggers_counter": True,
    },
}
