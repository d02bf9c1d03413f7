import pytest

from terracore.errors import CorruptData
from terracore.handle import ByteCursor
from terracore.models import ItemFrame, LogicSensor, TrainingDummy
from terracore.world import WorldDecoder
from tests.builders import Writer, build_world, npc_section


def decode_bytes(data, info=None):
    return WorldDecoder(ByteCursor(data), info=info).decode()


def chest_bytes(items_per_chest, filled):
    w = Writer().u16(1).u16(items_per_chest)
    w.i32(100).i32(200).string("Loot")
    for slot in range(items_per_chest):
        if slot in filled:
            w.u16(filled[slot]).i32(8).u8(81)
        else:
            w.u16(0)
    return w.getvalue()


def test_chest_keeps_only_filled_slots(info):
    filled = {0: 99, 3: 1, 10: 5, 20: 2, 39: 30}
    world = decode_bytes(build_world(200, chests=chest_bytes(40, filled)), info)
    chest = world.chests[0]
    assert (chest.x, chest.y, chest.name) == (100, 200, "Loot")
    assert len(chest.items) == 5
    assert [i.stack for i in chest.items] == [99, 1, 5, 2, 30]
    assert chest.items[0].name == "Torch"
    assert chest.items[0].prefix == "Legendary"


def test_chest_items_without_definitions():
    world = decode_bytes(build_world(200, chests=chest_bytes(10, {2: 4})))
    item = world.chests[0].items[0]
    assert item.id == 8 and item.prefix_id == 81
    assert item.name == ""


def test_signs():
    signs = Writer().u16(2).string("Welcome").i32(1).i32(2).string("").i32(3).i32(4).getvalue()
    world = decode_bytes(build_world(150, signs=signs))
    assert [(s.text, s.x, s.y) for s in world.signs] == [("Welcome", 1, 2), ("", 3, 4)]


def town_npc(version, identity, name="Bob", variation=None):
    w = Writer().u8(1)
    if version >= 190:
        w.i32(identity)
    else:
        w.string(identity)
    w.string(name).f32(10.5).f32(20.0).u8(0).i32(30).i32(40)
    if version >= 213:
        if variation is None:
            w.u8(0)
        else:
            w.u8(1).i32(variation)
    return w.getvalue()


def test_npc_by_sprite_id(info):
    version = 200
    world = decode_bytes(build_world(version, npcs=npc_section(version, npcs=town_npc(version, 17))), info)
    npc = world.npcs[0]
    assert npc.sprite == 17
    assert npc.title == "Merchant"
    assert npc.head == 2
    assert npc.name == "Bob"
    assert (npc.x, npc.y) == (10.5, 20.0)
    assert not npc.homeless
    assert (npc.home_x, npc.home_y) == (30, 40)
    assert npc.town_variation is None


def test_npc_by_name(info):
    version = 150
    world = decode_bytes(build_world(version, npcs=npc_section(version, npcs=town_npc(version, "Guide"))), info)
    npc = world.npcs[0]
    assert npc.title == "Guide"
    assert npc.sprite == 22
    assert npc.head == 1


@pytest.mark.parametrize("version", [189, 190, 191])
def test_npc_identity_by_id_from_190(version, info):
    identity = 17 if version >= 190 else "Merchant"
    world = decode_bytes(build_world(version, npcs=npc_section(version, npcs=town_npc(version, identity))), info)
    npc = world.npcs[0]
    assert npc.sprite == 17
    assert npc.title == "Merchant"
    assert (npc.home_x, npc.home_y) == (30, 40)


def test_unknown_npc_id_keeps_raw_sprite(info):
    version = 200
    world = decode_bytes(build_world(version, npcs=npc_section(version, npcs=town_npc(version, 555))), info)
    assert world.npcs[0].sprite == 555
    assert world.npcs[0].title == ""


@pytest.mark.parametrize("version", [212, 213, 214])
def test_town_variation_from_213(version):
    npcs = town_npc(version, 22, variation=1) + town_npc(version, 17)
    world = decode_bytes(build_world(version, npcs=npc_section(version, npcs=npcs)))
    assert len(world.npcs) == 2
    if version >= 213:
        assert world.npcs[0].town_variation == 1
    else:
        assert world.npcs[0].town_variation is None
    assert world.npcs[1].town_variation is None


def test_other_npcs(info):
    version = 230
    other = Writer().u8(1).i32(17).f32(5.0).f32(6.0).getvalue()
    world = decode_bytes(build_world(version, npcs=npc_section(version, other=other)), info)
    assert world.npcs == []
    npc = world.other_npcs[0]
    assert npc.title == "Merchant"
    assert npc.homeless
    assert npc.name == ""
    assert (npc.x, npc.y) == (5.0, 6.0)


@pytest.mark.parametrize("version,expected", [(267, set()), (268, {5, 9})])
def test_shimmered_npcs(version, expected):
    npcs = npc_section(version, shimmered=(5, 9))
    world = decode_bytes(build_world(version, npcs=npcs))
    assert world.shimmered_npcs == expected


def test_entity_variants():
    entities = (Writer().i32(3)
                .u8(0).i32(1).i16(10).i16(11).i16(-1)
                .u8(1).i32(2).i16(12).i16(13).i16(8).u8(81).i16(3)
                .u8(2).i32(3).i16(14).i16(15).u8(4).u8(0)
                .getvalue())
    world = decode_bytes(build_world(230, entities=entities))
    assert world.entities == [
        TrainingDummy(id=1, x=10, y=11, npc=-1),
        ItemFrame(id=2, x=12, y=13, itemid=8, prefix=81, stack=3),
        LogicSensor(id=3, x=14, y=15, type=4, on=False),
    ]


def test_unknown_entity_type():
    entities = Writer().i32(1).u8(9).i32(1).getvalue()
    with pytest.raises(CorruptData) as exc:
        decode_bytes(build_world(230, entities=entities))
    assert exc.value.stage == "entities"


def test_pressure_plates_and_town_manager_are_skipped():
    plates = Writer().i32(2).i32(1).i32(2).i32(3).i32(4).getvalue()
    rooms = Writer().i32(1).i32(17).i32(100).i32(200).getvalue()
    world = decode_bytes(build_world(230, pressure_plates=plates, town_manager=rooms))
    assert world.version == 230


def test_bestiary():
    bestiary = (Writer()
                .i32(2).string("BlueSlime").i32(40).string("Zombie").i32(3)
                .i32(1).string("DemonEye")
                .i32(1).string("Guide")
                .getvalue())
    world = decode_bytes(build_world(230, bestiary=bestiary))
    assert world.kills == {"BlueSlime": 40, "Zombie": 3}
    assert world.sighted == ["DemonEye"]
    assert world.chats == ["Guide"]
