# games/dungeon/content/items.py
CATEGORIES = ["weapon", "armor", "hppotion", "manapotion"]

RARITIES = ["common", "rare", "epic"]

RARITY_WEIGHTS = {"common": 0.70, "rare": 0.25, "epic": 0.05}

BOSS_RARITIES = ["rare", "epic"]

ITEMS = {
    "weapon": {
        "name": "Weapon",
        "slot": "weapon",
        "bonus": {"common": 5, "rare": 10, "epic": 20},
        # None = lasts the whole encounter
        "uses": {"common": 3, "rare": None, "epic": None},
    },
    "armor": {
        "name": "Armor",
        "slot": "armor",
        "bonus": {"common": 10, "rare": 20, "epic": 30},
    },
    "hppotion": {
        "name": "HP Potion",
        "consumable": True,
        # None = full heal
        "heal": {"common": 20, "rare": 40, "epic": None},
    },
    "manapotion": {
        "name": "Mana Potion",
        "consumable": True,
        "mana": {"common": 2, "rare": 3, "epic": 5},
    },
}


def item_id(category: str, rarity: str) -> str:
    return f"{category}-{rarity}"


def split_item_id(item: str):
    category, _, rarity = item.partition("-")
    if category not in ITEMS or rarity not in RARITIES:
        return None
    return category, rarity
