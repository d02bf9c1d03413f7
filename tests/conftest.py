import os

import pytest

from terracore.info import WorldInfo


@pytest.fixture
def write_file(tmp_path):
    def _write(relpath, data):
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)
    return _write


@pytest.fixture
def info():
    return WorldInfo.from_dict({
        "tiles": [{"id": 0, "name": "Dirt", "color": "976b4b"}, {"id": 1, "name": "Stone", "color": "808080"}],
        "walls": [{"id": 1, "name": "Stone Wall", "color": "343434"}],
        "items": [{"id": 1, "name": "Iron Pickaxe"}, {"id": 8, "name": "Torch"}],
        "prefixes": [{"id": 0, "name": ""}, {"id": 81, "name": "Legendary"}],
        "npcs": [
            {"id": 17, "name": "Merchant", "title": "Merchant", "head": 2},
            {"id": 22, "name": "Guide", "title": "Guide", "head": 1},
        ],
    })


@pytest.fixture
def player_dir(tmp_path):
    plr = tmp_path / "Players" / "Alice.plr"
    plr.parent.mkdir(parents=True, exist_ok=True)
    plr.write_bytes(b"")
    os.makedirs(tmp_path / "Players" / "Alice", exist_ok=True)
    return str(plr), str(tmp_path / "Players" / "Alice")
