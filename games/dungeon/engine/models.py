# games/dungeon/engine/models.py
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .errors import InvalidCommand


@dataclass
class Monster:
    hp: int
    max_hp: int

    @property
    def alive(self) -> bool:
        return self.hp > 0


@dataclass
class Boss:
    hp: int
    max_hp: int
    state: str = "pending"                 # "pending" | "ready" | "defeated"


@dataclass
class StatusEffects:
    poison_turns: int = 0
    burn_turns: int = 0
    stun_turns: int = 0


@dataclass
class Equipment:
    weapon_bonus: int = 0
    weapon_uses: Optional[int] = None      # None = unlimited while a bonus is equipped
    armor_bonus: int = 0                   # percent reduction of counter damage


@dataclass
class HeroEvent:
    kind: str                              # attack | backstab | taunt | heal | stunned | use_item | equip_item | open_treasure
    amount: int = 0
    target: Optional[str] = None
    crit: bool = False
    killed: bool = False
    dice: List[int] = field(default_factory=list)
    item: Optional[str] = None


@dataclass
class EnemyEvent:
    source: str
    amount: int = 0
    status_applied: List[str] = field(default_factory=list)
    dodged: bool = False


@dataclass
class StatusEvent:
    effect: str
    amount: int = 0


@dataclass
class CombatLog:
    round: int
    hero_event: HeroEvent
    enemy_events: List[EnemyEvent] = field(default_factory=list)
    status_events: List[StatusEvent] = field(default_factory=list)
    loot_dropped: Optional[str] = None
    terminal: str = "none"                 # "victory" | "defeated" | "none"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Command:
    action: str                            # attack | backstab | ability | use_item | equip_item | open_treasure
    target: Optional[str] = None
    ability: Optional[str] = None
    item: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Command":
        values = {}
        for key in ("action", "target", "ability", "item"):
            value = payload.get(key)
            if value is not None and not isinstance(value, str):
                raise InvalidCommand(f"{key} must be a string")
            values[key] = value
        return cls(
            action=(values["action"] or "").strip(),
            target=values["target"],
            ability=values["ability"],
            item=values["item"],
        )


@dataclass
class DungeonState:
    namespace: str
    name: str
    difficulty: str
    hero_class: str
    hero_hp: int
    max_hero_hp: int
    hero_mana: int = 0
    backstab_cooldown: int = 0
    taunt_active: int = 0
    monsters: List[Monster] = field(default_factory=list)
    boss: Optional[Boss] = None
    modifier: str = "none"
    status_effects: StatusEffects = field(default_factory=StatusEffects)
    equipment: Equipment = field(default_factory=Equipment)
    inventory: List[str] = field(default_factory=list)
    treasure_opened: bool = False
    treasure_loot: Optional[str] = None
    victory: bool = False
    defeated: bool = False
    turn_round: int = 0
    last_hero_action: Optional[HeroEvent] = None
    last_enemy_action: List[EnemyEvent] = field(default_factory=list)
    seed: int = 0

    @property
    def game_over(self) -> bool:
        return self.victory or self.defeated

    def living_monsters(self) -> int:
        return sum(1 for monster in self.monsters if monster.alive)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for packed, monster in zip(data["monsters"], self.monsters):
            packed["alive"] = monster.alive
        data["living_monsters"] = self.living_monsters()
        return data
