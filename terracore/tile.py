from .constants import (
    TILE_ACTIVE, TILE_LAVA, TILE_HONEY, TILE_SHIMMER, TILE_RED_WIRE, TILE_BLUE_WIRE,
    TILE_GREEN_WIRE, TILE_YELLOW_WIRE, TILE_HALF, TILE_ACTUATOR, TILE_INACTIVE, TILE_SEEN,
)
from .errors import CorruptData


class Tile:
    __slots__ = ('flags', 'type', 'wall', 'liquid', 'slope', 'color', 'wall_color', 'u', 'v')

    def __init__(self):
        self.flags = 0
        self.type = 0
        self.wall = 0
        self.liquid = 0
        self.slope = 0
        self.color = 0
        self.wall_color = 0
        self.u = -1
        self.v = -1

    def copy(self):
        t = Tile.__new__(Tile)
        for name in Tile.__slots__:
            setattr(t, name, getattr(self, name))
        return t

    def _flag(self, bit):
        return bool(self.flags & bit)

    @property
    def active(self):
        return self._flag(TILE_ACTIVE)

    @property
    def lava(self):
        return self._flag(TILE_LAVA)

    @property
    def honey(self):
        return self._flag(TILE_HONEY)

    @property
    def shimmer(self):
        return self._flag(TILE_SHIMMER)

    @property
    def red_wire(self):
        return self._flag(TILE_RED_WIRE)

    @property
    def blue_wire(self):
        return self._flag(TILE_BLUE_WIRE)

    @property
    def green_wire(self):
        return self._flag(TILE_GREEN_WIRE)

    @property
    def yellow_wire(self):
        return self._flag(TILE_YELLOW_WIRE)

    @property
    def half(self):
        return self._flag(TILE_HALF)

    @property
    def actuator(self):
        return self._flag(TILE_ACTUATOR)

    @property
    def inactive(self):
        return self._flag(TILE_INACTIVE)

    @property
    def seen(self):
        return self._flag(TILE_SEEN)

    @seen.setter
    def seen(self, value):
        if value:
            self.flags |= TILE_SEEN
        else:
            self.flags &= ~TILE_SEEN

    def __eq__(self, other):
        if not isinstance(other, Tile):
            return NotImplemented
        return all(getattr(self, n) == getattr(other, n) for n in Tile.__slots__)

    def __repr__(self):
        return (f"Tile(type={self.type}, wall={self.wall}, liquid={self.liquid}, "
                f"slope={self.slope}, flags=0x{self.flags:x}, u={self.u}, v={self.v})")


def load_tile(tile, handle, extra):
    """Decodes one packed tile record from `handle` into `tile`.

    `extra` is the importance bitmap: tile types whose flag is set carry
    u/v frame coordinates. Returns the run length, the number of following
    cells that repeat this record.
    """
    flags1 = handle.u8()
    flags2 = flags3 = 0
    if flags1 & 1:
        flags2 = handle.u8()
        if flags2 & 1:
            flags3 = handle.u8()

    active = bool(flags1 & 2)
    flags = TILE_ACTIVE if active else 0
    tile.color = 0
    tile.wall_color = 0
    tile.u = tile.v = -1
    if active:
        tile.type = handle.u8()
        if flags1 & 0x20:  # 2-byte type
            tile.type |= handle.u8() << 8
        if tile.type >= len(extra):
            raise CorruptData(f"Tile type {tile.type} outside importance bitmap of {len(extra)} types")
        if extra[tile.type]:
            tile.u = handle.u16()
            tile.v = handle.u16()
        if flags3 & 0x8:
            tile.color = handle.u8()
    else:
        tile.type = 0

    if flags1 & 4:
        tile.wall = handle.u8()
        if flags3 & 0x10:
            tile.wall_color = handle.u8()
    else:
        tile.wall = 0

    liquid = flags1 & 0x18
    if liquid:
        tile.liquid = handle.u8()
        if liquid == 0x10:
            flags |= TILE_LAVA
        elif liquid == 0x18:
            flags |= TILE_HONEY
        if flags3 & 0x80:
            flags |= TILE_SHIMMER
    else:
        tile.liquid = 0

    if flags2 & 2:
        flags |= TILE_RED_WIRE
    if flags2 & 4:
        flags |= TILE_BLUE_WIRE
    if flags2 & 8:
        flags |= TILE_GREEN_WIRE
    slope = (flags2 >> 4) & 7
    if slope == 1:
        flags |= TILE_HALF
    tile.slope = slope - 1 if slope > 1 else 0

    if flags3 & 2:
        flags |= TILE_ACTUATOR
    if flags3 & 4:
        flags |= TILE_INACTIVE
    if flags3 & 0x20:
        flags |= TILE_YELLOW_WIRE
    if flags3 & 0x40:  # wall id high byte comes last
        tile.wall |= handle.u8() << 8

    tile.flags = flags

    rle = flags1 >> 6
    if rle == 1:
        return handle.u8()
    if rle == 2:
        return handle.u16()
    return 0
