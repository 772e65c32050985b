# games/dungeon/content/modifiers.py
MODIFIERS = {
    "none": {"name": "None"},
    "curse-fortitude": {"name": "Curse of Fortitude", "kind": "curse", "enemy_hp": 1.5},
    "curse-fury": {"name": "Curse of Fury", "kind": "curse", "boss_counter": 2.0},
    "curse-darkness": {"name": "Curse of Darkness", "kind": "curse", "outgoing": 0.75},
    "blessing-strength": {"name": "Blessing of Strength", "kind": "blessing", "outgoing": 1.5},
    "blessing-resilience": {"name": "Blessing of Resilience", "kind": "blessing", "incoming": 0.5},
    "blessing-fortune": {"name": "Blessing of Fortune", "kind": "blessing", "crit_chance": 0.20, "crit_multiplier": 2.0},
}

ROLLABLE = [modifier_id for modifier_id in MODIFIERS if modifier_id != "none"]
