import os
import json
import uuid
import logging

from .errors import InitError

logger = logging.getLogger("TerraCore.header")

DEFAULT_HEADER_PATH = os.path.join(os.path.dirname(__file__), "data", "header.json")

_READERS = {
    "s": lambda h: h.string(),
    "b": lambda h: h.u8() != 0,
    "u8": lambda h: h.u8(),
    "i16": lambda h: h.i16(),
    "u16": lambda h: h.u16(),
    "i32": lambda h: h.i32(),
    "u32": lambda h: h.u32(),
    "i64": lambda h: h.i64(),
    "u64": lambda h: h.u64(),
    "f32": lambda h: h.f32(),
    "f64": lambda h: h.f64(),
}


class HeaderField:
    def __init__(self, name, type, min_version=0, max_version=None, num=0):
        self.name = name
        self.type = type
        self.min_version = min_version
        self.max_version = max_version
        self.num = num

    def present(self, version):
        if version < self.min_version:
            return False
        return self.max_version is None or version <= self.max_version

    def read(self, handle):
        reader = _READERS[self.type]
        if self.num:
            return [reader(handle) for _ in range(self.num)]
        return reader(handle)


def load_header_fields(path=DEFAULT_HEADER_PATH):
    try:
        with open(path, 'r') as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise InitError("Failed to init header", str(e))

    fields = []
    for entry in raw:
        try:
            name, type_ = entry["name"], entry["type"]
        except (KeyError, TypeError):
            raise InitError("Failed to init header", f"malformed field entry {entry!r}")
        if type_ not in _READERS:
            raise InitError("Failed to init header", f"unknown type {type_!r} for field {name}")
        fields.append(HeaderField(name, type_, entry.get("min", 0), entry.get("max"), entry.get("num", 0)))
    return fields


class WorldHeader:
    """Ordered bag of named properties read from the header section.

    Which keys exist depends on the file version; anything outside the
    header component treats it as opaque and looks values up by name.
    """

    def __init__(self, fields=None):
        self.fields = fields if fields is not None else load_header_fields()
        self.values = {}

    def load(self, handle, version):
        self.values = {}
        for field in self.fields:
            if field.present(version):
                self.values[field.name] = field.read(handle)
        logger.debug(f"Header: read {len(self.values)} fields for version {version}")

    def has(self, key):
        return key in self.values

    def __contains__(self, key):
        return key in self.values

    def __getitem__(self, key):
        return self.values[key]

    def get(self, key, default=None):
        return self.values.get(key, default)

    def keys(self):
        return list(self.values.keys())

    def guid_token(self):
        """Formats the 16 guid bytes the way the game names its map files."""
        if "guid" not in self.values:
            return None
        return str(uuid.UUID(bytes_le=bytes(self.values["guid"])))
