import os
import sys
import argparse
import logging

from terracore.constants import VERSION
from terracore.errors import InitError, LoadError
from terracore.info import WorldInfo
from terracore.map_renderer import MapRenderer
from terracore.storage import StorageManager
from terracore.world import decode

logger = logging.getLogger("TerraCore")


def setup_logging(storage, verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(storage.log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


def main(argv=None):
    ap = argparse.ArgumentParser(description=f"TerraCore {VERSION} - world file decoder")
    ap.add_argument("world", nargs="?", help="Path to a .wld file (default: newest in the worlds folder)")
    ap.add_argument("--player", help="Player .plr file whose map marks explored tiles")
    ap.add_argument("--defs", help="Definitions JSON (tiles, walls, items, prefixes, npcs)")
    ap.add_argument("--render", help="Write a PNG map to this path")
    ap.add_argument("--data-dir", help="Data directory for config, logs and map cache")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    storage = StorageManager(args.data_dir)
    setup_logging(storage, args.verbose)

    world_path = args.world
    if not world_path:
        worlds = storage.list_worlds()
        if not worlds:
            print("No world given and none found in the default folders")
            return 1
        world_path = worlds[0]

    defs = args.defs or storage.config.get("definitions")
    info = None
    if defs:
        try:
            info = WorldInfo.load(defs)
        except InitError as e:
            print(f"Error: {e}")
            return 1

    try:
        world = decode(world_path, args.player, info=info, on_status=lambda m: logger.debug(m))
    except LoadError as e:
        print(f"Error ({e.stage or 'unknown'}): {e.message}")
        return 1

    for key, value in world.summary().items():
        print(f"{key:>11}: {value}")

    if args.render:
        renderer = MapRenderer(info, render_unseen=storage.config.get("render_unseen", False))
        renderer.save(world, args.render)
        print(f"Map written to {os.path.abspath(args.render)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
