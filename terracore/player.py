import os
import zlib
import logging

from .constants import (
    MAGIC, FILE_TYPE_PLAYER, V_MAGIC, PLAYER_V_LEGACY_MAX, PLAYER_V_TILE_BYTE_MAX,
    PLAYER_V_MISC2, PLAYER_V_COMPRESSED,
)
from .errors import BadFileType, BadMagic, CorruptData, DecompressionError, LoadError
from .handle import ByteCursor

logger = logging.getLogger("TerraCore.player")


def find_map_file(world, player_path):
    """Locates the player's map file for `world`, or None.

    Maps live in a directory named after the player file without its
    extension. The guid-named file wins over the older worldID-named one.
    """
    base = os.path.splitext(player_path)[0]
    token = world.header.guid_token()
    if token:
        path = os.path.join(base, f"{token}.map")
        if os.path.isfile(path):
            return path
    world_id = world.header.get("worldID")
    if world_id is not None:
        path = os.path.join(base, f"{world_id}.map")
        if os.path.isfile(path):
            return path
    return None


def inflate_raw(data):
    d = zlib.decompressobj(-15)
    try:
        out = d.decompress(data)
        out += d.flush()
    except zlib.error as e:
        raise DecompressionError(f"Corrupt map data: {e}")
    if not d.eof:
        raise DecompressionError("Compressed map data ends before the end of the deflate stream")
    return out


class PlayerOverlayDecoder:
    """Reads explored flags from a player map file.

    The flags are collected first and only copied onto the world once the
    whole file has decoded, so a failure leaves the grid untouched.
    """

    def __init__(self, world, check_cancel=None):
        self.world = world
        self.wide = world.tiles_wide
        self.high = world.tiles_high
        self.check_cancel = check_cancel or (lambda: None)
        self.seen = bytearray(self.wide * self.high)

    def decode(self, handle):
        version = handle.u32()
        logger.info(f"Player map {handle.name}: version {version}")
        if version <= PLAYER_V_LEGACY_MAX:
            self._load_legacy(handle, version)
        else:
            self._load_modern(handle, version)
        return self.seen

    def apply(self):
        for tile, seen in zip(self.world.tiles, self.seen):
            tile.seen = seen

    def _mark(self, offset, count, step, value):
        for i in range(count):
            self.seen[offset + i * step] = value

    def _load_legacy(self, handle, version):
        handle.string()  # name
        handle.u32()  # world id
        handle.u32()  # tiles high
        handle.u32()  # tiles wide
        for x in range(self.wide):
            self.check_cancel()
            y = 0
            while y < self.high:
                if handle.u8():
                    handle.skip(1 if version <= PLAYER_V_TILE_BYTE_MAX else 2)  # tile id
                    handle.skip(2)  # light, misc
                    if version >= PLAYER_V_MISC2:
                        handle.skip(1)  # misc2
                    value = 1
                else:
                    value = 0
                rle = handle.u16()
                if y + rle >= self.high:
                    raise CorruptData(f"Map run of {rle} at ({x}, {y}) overflows column", "player")
                self._mark(y * self.wide + x, rle + 1, self.wide, value)
                y += rle + 1

    def _read_file_header(self, handle):
        magic = handle.bytes(7)
        if magic != MAGIC:
            raise BadMagic(magic.decode('latin-1'), player=True)
        file_type = handle.u8()
        if file_type != FILE_TYPE_PLAYER:
            raise BadFileType(file_type, FILE_TYPE_PLAYER, player=True)
        handle.skip(4 + 8)  # revision + favorites

    def _load_modern(self, handle, version):
        if version >= V_MAGIC:
            self._read_file_header(handle)

        handle.string()  # name
        handle.u32()  # world id
        handle.u32()  # tiles high
        handle.u32()  # tiles wide

        num_tiles = handle.u16()
        num_walls = handle.u16()
        handle.skip(2 * 4)  # unused counts
        tiles_present = handle.bitmap(num_tiles)
        walls_present = handle.bitmap(num_walls)
        handle.skip(sum(tiles_present))
        handle.skip(sum(walls_present))

        if version >= PLAYER_V_COMPRESSED:
            data = inflate_raw(handle.rest())
            logger.debug(f"Inflated map data: {len(data)} bytes")
            handle = ByteCursor(data, name=f"{handle.name}[inflated]")

        for y in range(self.high):
            self.check_cancel()
            x = 0
            while x < self.wide:
                flags = handle.u8()
                if flags & 1:
                    handle.u8()  # color
                kind = (flags >> 1) & 7
                if kind in (1, 2, 7):
                    if flags & 16:
                        handle.u16()  # tile id
                    else:
                        handle.u8()  # tile id
                light = handle.u8() if flags & 32 else 255

                size = (flags >> 6) & 3
                rle = 0
                if size == 1:
                    rle = handle.u8()
                elif size == 2:
                    rle = handle.u16()
                if x + rle >= self.wide:
                    raise CorruptData(f"Map run of {rle} at ({x}, {y}) overflows row", "player")

                offset = y * self.wide + x
                if kind:
                    if light != 255:
                        # each repeated cell carries its own light byte
                        handle.skip(rle)
                    self._mark(offset, rle + 1, 1, 1)
                else:
                    self._mark(offset, rle + 1, 1, 0)
                x += rle + 1


def mark_all_seen(world):
    for tile in world.tiles:
        tile.seen = True


def apply_player(world, player_path, check_cancel=None):
    """Sets every tile's explored flag from the player's map file.

    A missing map file is not an error: the whole world counts as explored.
    """
    world.player_path = player_path
    path = find_map_file(world, player_path)
    if path is None:
        logger.warning(f"No map file for '{world.name}' next to {player_path}; marking everything explored")
        mark_all_seen(world)
        return
    try:
        handle = ByteCursor.from_file(path)
    except OSError as e:
        raise LoadError(f"Cannot open {path}: {e}", "player")
    try:
        decoder = PlayerOverlayDecoder(world, check_cancel)
        decoder.decode(handle)
    except LoadError as e:
        if e.stage is None:
            e.stage = "player"
        raise
    decoder.apply()
