import json

from terracore.handle import ByteCursor
from terracore.map_renderer import MapRenderer
from terracore.world import WorldDecoder
from tests.builders import Writer, build_world


def small_world():
    tiles = Writer()
    tiles.u8(0x02).u8(1).u8(0x00)  # column 0: stone, air
    tiles.u8(0x08).u8(255).u8(0x04).u8(1)  # column 1: water, stone wall
    world = WorldDecoder(ByteCursor(build_world(230, width=2, height=2, tiles=tiles.getvalue(),
                                                header={"groundLevel": 1.0}))).decode()
    return world


def test_unseen_tiles_are_black(info):
    world = small_world()
    img = MapRenderer(info).render(world)
    assert img.size == (2, 2)
    assert img.getpixel((0, 0)) == (0, 0, 0)


def test_colours(info):
    world = small_world()
    for t in world.tiles:
        t.seen = True
    renderer = MapRenderer(info)
    img = renderer.render(world)
    assert img.getpixel((0, 0)) == (0x80, 0x80, 0x80)
    assert img.getpixel((1, 0)) == renderer.palette["water"]
    assert img.getpixel((1, 1)) == (0x34, 0x34, 0x34)
    assert img.getpixel((0, 1)) == renderer.palette["earth"]


def test_unknown_ids_get_stable_colour():
    world = small_world()
    renderer = MapRenderer(render_unseen=True)
    first = renderer.render(world).getpixel((0, 0))
    assert first == renderer.render(world).getpixel((0, 0))
    assert first != renderer.palette["unseen"]


def test_save_writes_png_and_metadata(tmp_path, info):
    world = small_world()
    out = tmp_path / "maps" / "small.png"
    result = MapRenderer(info, render_unseen=True).save(world, str(out))
    assert result["status"] == "success"
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    meta = json.loads((tmp_path / "maps" / "small.json").read_text())
    assert meta["width"] == 2 and meta["height"] == 2
