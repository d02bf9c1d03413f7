from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .tile import Tile


@dataclass
class ChestItem:
    stack: int
    id: int
    prefix_id: int
    name: str = ""
    prefix: str = ""


@dataclass
class Chest:
    x: int
    y: int
    name: str
    items: List[ChestItem] = field(default_factory=list)


@dataclass
class Sign:
    text: str
    x: int
    y: int


@dataclass
class NPC:
    title: str = ""
    name: str = ""
    sprite: int = 0
    head: int = 0
    x: float = 0.0
    y: float = 0.0
    homeless: bool = True
    home_x: int = 0
    home_y: int = 0
    town_variation: Optional[int] = None


# Tile entities. The tag byte in the file selects the record shape.

@dataclass
class TrainingDummy:
    id: int
    x: int
    y: int
    npc: int
    kind = 0


@dataclass
class ItemFrame:
    id: int
    x: int
    y: int
    itemid: int
    prefix: int
    stack: int
    kind = 1


@dataclass
class LogicSensor:
    id: int
    x: int
    y: int
    type: int
    on: bool
    kind = 2


ENTITY_KINDS = {0: TrainingDummy, 1: ItemFrame, 2: LogicSensor}


class World:
    """A decoded world: tile grid plus the metadata sections.

    Tiles are stored row by row, `tiles[y * tiles_wide + x]`.
    """

    def __init__(self, header, version):
        self.header = header
        self.version = version
        self.tiles_wide = int(header["tilesWide"])
        self.tiles_high = int(header["tilesHigh"])
        self.tiles = [Tile() for _ in range(self.tiles_wide * self.tiles_high)]
        self.chests: List[Chest] = []
        self.signs: List[Sign] = []
        self.npcs: List[NPC] = []
        self.other_npcs: List[NPC] = []
        self.entities = []
        self.shimmered_npcs: Set[int] = set()
        self.kills: Dict[str, int] = {}
        self.sighted: List[str] = []
        self.chats: List[str] = []
        self.player_path = None

    @property
    def name(self):
        return self.header.get("name", "")

    def in_bounds(self, x, y):
        return 0 <= x < self.tiles_wide and 0 <= y < self.tiles_high

    def tile(self, x, y):
        if not self.in_bounds(x, y):
            raise IndexError(f"tile ({x}, {y}) outside {self.tiles_wide}x{self.tiles_high} world")
        return self.tiles[y * self.tiles_wide + x]

    def __getitem__(self, xy):
        x, y = xy
        return self.tile(x, y)

    def set_player(self, player_path):
        """Recomputes explored flags from another player's map file."""
        from .player import apply_player
        apply_player(self, player_path)

    def explored_ratio(self):
        if not self.tiles:
            return 0.0
        return sum(1 for t in self.tiles if t.seen) / len(self.tiles)

    def summary(self):
        return {
            "name": self.name,
            "version": self.version,
            "width": self.tiles_wide,
            "height": self.tiles_high,
            "chests": len(self.chests),
            "signs": len(self.signs),
            "npcs": len(self.npcs),
            "other_npcs": len(self.other_npcs),
            "entities": len(self.entities),
            "explored": round(self.explored_ratio() * 100, 2),
        }
