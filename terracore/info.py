import json
import logging

from .errors import InitError

logger = logging.getLogger("TerraCore.info")


class TileInfo:
    def __init__(self, id, name, color=None):
        self.id = id
        self.name = name
        self.color = color


class NPCInfo:
    def __init__(self, id, name, title="", head=0):
        self.id = id
        self.name = name
        self.title = title
        self.head = head


def _parse_color(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(int(c) for c in value[:3])
    s = str(value).lstrip('#')
    if len(s) != 6:
        raise ValueError(f"bad colour {value!r}")
    return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))


class WorldInfo:
    """Read-only id -> metadata tables queried by the decoder.

    Loaded once, then shared between decodes; nothing mutates it after
    construction.
    """

    def __init__(self, tiles=None, walls=None, items=None, prefixes=None, npcs=None):
        self.tiles = tiles or {}
        self.walls = walls or {}
        self.items = items or {}
        self.prefixes = prefixes or {}
        self.npcs_by_id = {}
        self.npcs_by_name = {}
        for npc in npcs or []:
            self.npcs_by_id[npc.id] = npc
            self.npcs_by_name[npc.name] = npc

    @classmethod
    def load(cls, path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise InitError("Failed to init definitions", str(e))
        try:
            return cls.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise InitError("Failed to init definitions", f"{path}: {e}")

    @classmethod
    def from_dict(cls, raw):
        tiles = {int(t["id"]): TileInfo(int(t["id"]), t["name"], _parse_color(t.get("color")))
                 for t in raw.get("tiles", [])}
        walls = {int(w["id"]): TileInfo(int(w["id"]), w["name"], _parse_color(w.get("color")))
                 for w in raw.get("walls", [])}
        items = {int(i["id"]): i["name"] for i in raw.get("items", [])}
        prefixes = {int(p["id"]): p["name"] for p in raw.get("prefixes", [])}
        npcs = [NPCInfo(int(n["id"]), n["name"], n.get("title", n["name"]), int(n.get("head", 0)))
                for n in raw.get("npcs", [])]
        info = cls(tiles, walls, items, prefixes, npcs)
        logger.info(f"Definitions loaded: {len(tiles)} tiles, {len(walls)} walls, {len(items)} items, "
                    f"{len(prefixes)} prefixes, {len(npcs)} npcs")
        return info

    def item_name(self, item_id):
        return self.items.get(item_id, "")

    def prefix_name(self, prefix_id):
        return self.prefixes.get(prefix_id, "")
