import logging

from .constants import V_NPC_SPRITE_ID, V_OTHER_NPCS, V_SHIMMERED_NPCS, V_TOWN_VARIATION
from .errors import CorruptData
from .models import NPC, Chest, ChestItem, ENTITY_KINDS, ItemFrame, LogicSensor, Sign, TrainingDummy
from .tile import load_tile

logger = logging.getLogger("TerraCore.sections")


def min_column_bytes(high):
    """Fewest bytes any tile column of `high` cells can be encoded in.

    One record is at least its flag byte; a 1-byte run covers 257 cells,
    a 2-byte run 65536.
    """
    full, rest = divmod(high, 65536)
    if rest == 0:
        tail = 0
    elif rest == 1:
        tail = 1
    elif rest <= 257:
        tail = 2
    else:
        tail = 3
    return 3 * full + tail


def load_tiles(handle, world, extra, on_column=None):
    """Reads the tile grid column by column.

    A record's run length repeats it down the same column; a run that would
    leave the column is corrupt data.
    """
    wide, high, tiles = world.tiles_wide, world.tiles_high, world.tiles
    for x in range(wide):
        if on_column:
            on_column(x, wide)
        y = 0
        while y < high:
            offset = y * wide + x
            tile = tiles[offset]
            rle = load_tile(tile, handle, extra)
            if y + rle >= high:
                raise CorruptData(f"Tile run of {rle} at ({x}, {y}) overflows column of height {high}", "tiles")
            for r in range(1, rle + 1):
                tiles[offset + r * wide] = tile.copy()
            y += rle + 1


def load_chests(handle, world, info):
    world.chests = []
    num_chests = handle.u16()
    items_per_chest = handle.u16()
    for _ in range(num_chests):
        chest = Chest(x=handle.i32(), y=handle.i32(), name=handle.string())
        for _ in range(items_per_chest):
            stack = handle.u16()
            if stack > 0:
                item_id = handle.i32()
                prefix_id = handle.u8()
                chest.items.append(ChestItem(stack=stack, id=item_id, prefix_id=prefix_id,
                                             name=info.item_name(item_id),
                                             prefix=info.prefix_name(prefix_id)))
        world.chests.append(chest)
    logger.info(f"Chests: {num_chests} ({items_per_chest} slots each)")


def load_signs(handle, world):
    world.signs = []
    num_signs = handle.u16()
    for _ in range(num_signs):
        text = handle.string()
        world.signs.append(Sign(text=text, x=handle.i32(), y=handle.i32()))
    logger.info(f"Signs: {num_signs}")


def _read_identity(handle, npc, info, version):
    # Newer files name NPCs by sprite id, older ones by title
    if version >= V_NPC_SPRITE_ID:
        npc.sprite = handle.i32()
        known = info.npcs_by_id.get(npc.sprite)
        if known:
            npc.head = known.head
            npc.title = known.title
    else:
        npc.title = handle.string()
        known = info.npcs_by_name.get(npc.title)
        if known:
            npc.head = known.head
            npc.sprite = known.id


def load_npcs(handle, world, info, version):
    world.npcs = []
    world.other_npcs = []
    world.shimmered_npcs = set()
    if version >= V_SHIMMERED_NPCS:
        for _ in range(handle.u32()):
            world.shimmered_npcs.add(handle.i32())

    while handle.u8():
        npc = NPC()
        _read_identity(handle, npc, info, version)
        npc.name = handle.string()
        npc.x = handle.f32()
        npc.y = handle.f32()
        npc.homeless = handle.u8() != 0
        npc.home_x = handle.i32()
        npc.home_y = handle.i32()
        if version >= V_TOWN_VARIATION and handle.u8():
            npc.town_variation = handle.i32()
        world.npcs.append(npc)

    if version >= V_OTHER_NPCS:
        while handle.u8():
            npc = NPC()
            _read_identity(handle, npc, info, version)
            npc.head = 0
            npc.x = handle.f32()
            npc.y = handle.f32()
            world.other_npcs.append(npc)
    logger.info(f"NPCs: {len(world.npcs)} town, {len(world.other_npcs)} other, "
                f"{len(world.shimmered_npcs)} shimmered")


def load_dummies(handle, world):
    # Legacy dummy positions; nothing in them is kept.
    num_dummies = handle.i32()
    for _ in range(num_dummies):
        handle.i16()  # x
        handle.i16()  # y
    logger.debug(f"Skipped {num_dummies} legacy dummies")


def load_entities(handle, world):
    world.entities = []
    num_entities = handle.i32()
    for i in range(num_entities):
        kind = handle.u8()
        if kind == TrainingDummy.kind:
            entity = TrainingDummy(id=handle.i32(), x=handle.i16(), y=handle.i16(), npc=handle.i16())
        elif kind == ItemFrame.kind:
            entity = ItemFrame(id=handle.i32(), x=handle.i16(), y=handle.i16(),
                               itemid=handle.i16(), prefix=handle.u8(), stack=handle.i16())
        elif kind == LogicSensor.kind:
            entity = LogicSensor(id=handle.i32(), x=handle.i16(), y=handle.i16(),
                                 type=handle.u8(), on=handle.u8() != 0)
        else:
            raise CorruptData(f"Unknown entity type {kind} in record {i} "
                              f"(known: {sorted(ENTITY_KINDS)})", "entities")
        world.entities.append(entity)
    logger.info(f"Entities: {num_entities}")


def load_pressure_plates(handle, world):
    num_plates = handle.i32()
    for _ in range(num_plates):
        handle.i32()  # x
        handle.i32()  # y
    logger.debug(f"Skipped {num_plates} pressure plates")


def load_town_manager(handle, world):
    num_rooms = handle.i32()
    for _ in range(num_rooms):
        handle.i32()  # npc
        handle.i32()  # x
        handle.i32()  # y
    logger.debug(f"Skipped {num_rooms} town rooms")


def load_bestiary(handle, world):
    world.kills = {}
    world.sighted = []
    world.chats = []
    for _ in range(handle.i32()):
        npc = handle.string()
        world.kills[npc] = handle.i32()
    for _ in range(handle.i32()):
        world.sighted.append(handle.string())
    for _ in range(handle.i32()):
        world.chats.append(handle.string())
    logger.info(f"Bestiary: {len(world.kills)} kills, {len(world.sighted)} sighted, {len(world.chats)} chats")


def load_creative_powers(handle, world):
    # Present in the file but not modelled yet.
    pass
