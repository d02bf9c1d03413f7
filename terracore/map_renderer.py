import os
import json
import logging
import hashlib
from PIL import Image

logger = logging.getLogger("TerraCore.MapGen")


class MapRenderer:
    # Fallback colours when the definitions carry none
    DEFAULT_PALETTE = {
        "unseen": (0, 0, 0),
        "sky": (155, 209, 255),
        "earth": (88, 61, 46),
        "water": (9, 61, 191),
        "lava": (253, 32, 3),
        "honey": (254, 194, 20),
        "shimmer": (182, 146, 255),
    }

    def __init__(self, info=None, render_unseen=False):
        self.info = info
        self.render_unseen = render_unseen
        self.palette = self.DEFAULT_PALETTE.copy()

    def _get_id_color(self, kind, gid):
        h = hashlib.md5(f"{kind}:{gid}".encode()).digest()
        r, g, b = 50 + (h[0] % 150), 50 + (h[1] % 150), 50 + (h[2] % 150)
        return (r, g, b)

    def _lookup(self, table, kind, gid):
        entry = table.get(gid) if table else None
        if entry and entry.color:
            return entry.color
        return self._get_id_color(kind, gid)

    def tile_color(self, tile, y, ground_level):
        if not tile.seen and not self.render_unseen:
            return self.palette["unseen"]
        if tile.active:
            return self._lookup(self.info.tiles if self.info else None, "tile", tile.type)
        if tile.liquid > 0:
            if tile.shimmer:
                return self.palette["shimmer"]
            if tile.lava:
                return self.palette["lava"]
            if tile.honey:
                return self.palette["honey"]
            return self.palette["water"]
        if tile.wall > 0:
            return self._lookup(self.info.walls if self.info else None, "wall", tile.wall)
        return self.palette["sky"] if y < ground_level else self.palette["earth"]

    def render(self, world):
        img = Image.new('RGB', (world.tiles_wide, world.tiles_high), color=self.palette["unseen"])
        pxs = img.load()
        ground_level = world.header.get("groundLevel", world.tiles_high)
        wide = world.tiles_wide
        for offset, tile in enumerate(world.tiles):
            y, x = divmod(offset, wide)
            pxs[x, y] = self.tile_color(tile, y, ground_level)
        return img

    def save(self, world, path):
        img = self.render(world)
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        img.save(path, format="PNG")
        meta_path = os.path.splitext(path)[0] + ".json"
        with open(meta_path, "w") as f:
            json.dump(world.summary(), f, indent=2)
        logger.info(f"Map for '{world.name}' saved to {path}")
        return {"status": "success", "image": path, "metadata": meta_path}
