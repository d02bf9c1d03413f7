import logging

from .constants import (
    MAGIC, FILE_TYPE_WORLD, MINIMUM_VERSION, HIGHEST_VERSION, V_MAGIC, V_DUMMIES, V_ENTITIES,
    V_PRESSURE_PLATES, V_TOWN_MANAGER, V_BESTIARY, V_CREATIVE_POWERS,
    SECTION_HEADER, SECTION_TILES, SECTION_CHESTS, SECTION_SIGNS, SECTION_NPCS, SECTION_ENTITIES,
    SECTION_PRESSURE_PLATES, SECTION_TOWN_MANAGER, SECTION_BESTIARY, SECTION_CREATIVE_POWERS,
)
from .errors import (
    BadFileType, BadMagic, BadSectionOffset, CorruptData, DecodeCancelled, LoadError,
    UnsupportedVersionTooNew, UnsupportedVersionTooOld,
)
from .handle import ByteCursor
from .header import WorldHeader
from .info import WorldInfo
from .models import World
from . import sections
from .sections import min_column_bytes
from .player import apply_player

logger = logging.getLogger("TerraCore.world")

# (slot, stage, first version, last version, status message, method name)
SECTIONS = [
    (SECTION_HEADER, "header", 0, None, "Loading Header...", "_load_header"),
    (SECTION_TILES, "tiles", 0, None, None, "_load_tiles"),
    (SECTION_CHESTS, "chests", 0, None, "Loading Chests...", "_load_chests"),
    (SECTION_SIGNS, "signs", 0, None, "Loading Signs...", "_load_signs"),
    (SECTION_NPCS, "npcs", 0, None, "Loading NPCs...", "_load_npcs"),
    (SECTION_ENTITIES, "dummies", V_DUMMIES, V_ENTITIES - 1, "Loading Dummies...", "_load_dummies"),
    (SECTION_ENTITIES, "entities", V_ENTITIES, None, "Loading Entities...", "_load_entities"),
    (SECTION_PRESSURE_PLATES, "pressure-plates", V_PRESSURE_PLATES, None, "Loading Pressure Plates...",
     "_load_pressure_plates"),
    (SECTION_TOWN_MANAGER, "town-manager", V_TOWN_MANAGER, None, "Loading Town Manager...",
     "_load_town_manager"),
    (SECTION_BESTIARY, "bestiary", V_BESTIARY, None, "Loading Bestiary...", "_load_bestiary"),
    (SECTION_CREATIVE_POWERS, "creative-powers", V_CREATIVE_POWERS, None, "Loading Creative Powers...",
     "_load_creative_powers"),
]

EMPTY_INFO = WorldInfo()


def sections_for(version):
    return [s for s in SECTIONS if version >= s[2] and (s[3] is None or version <= s[3])]


class WorldDecoder:
    """Decodes one world file into a World.

    States run in order: ReadVersion, ValidateVersion, ValidateMagic (135+),
    ReadSectionOffsets, ReadImportanceBitmap, DispatchSections, then Done.
    Any LoadError moves to Failed and is re-raised with the stage that
    produced it; nothing partially decoded escapes.
    """

    def __init__(self, handle, info=None, header_fields=None, on_status=None, cancel_event=None):
        self.handle = handle
        self.info = info or EMPTY_INFO
        self.header_fields = header_fields
        self.on_status = on_status
        self.cancel_event = cancel_event
        self.state = "Init"
        self.stage = None
        self.version = None
        self.offsets = []
        self.extra = []
        self.world = None

    def _status(self, message):
        if self.on_status:
            self.on_status(message)

    def check_cancel(self):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise DecodeCancelled(self.stage)

    def decode(self, player_path=None):
        try:
            self.stage = "validation"
            self.state = "ReadVersion"
            self.version = self.handle.u32()
            self.state = "ValidateVersion"
            self._validate_version()
            if self.version >= V_MAGIC:
                self.state = "ValidateMagic"
                self._validate_magic()
            self.state = "ReadSectionOffsets"
            self._read_section_offsets()
            self.state = "ReadImportanceBitmap"
            self._read_importance()
            self.state = "DispatchSections"
            self._dispatch()
            if player_path:
                self.stage = "player"
                self._status("Loading Player Map...")
                apply_player(self.world, player_path, self.check_cancel)
        except LoadError as e:
            self.state = "Failed"
            if e.stage is None:
                e.stage = self.stage
            logger.error(f"Decode of {self.handle.name} failed: {e}")
            self.world = None
            raise
        self.state = "Done"
        logger.info(f"Decoded '{self.world.name}' ({self.world.tiles_wide}x{self.world.tiles_high}, "
                    f"version {self.version})")
        return self.world

    def _validate_version(self):
        logger.info(f"{self.handle.name}: version {self.version}")
        if self.version > HIGHEST_VERSION:
            raise UnsupportedVersionTooNew(self.version, HIGHEST_VERSION)
        if self.version < MINIMUM_VERSION:
            raise UnsupportedVersionTooOld(self.version, MINIMUM_VERSION)

    def _validate_magic(self):
        magic = self.handle.bytes(7)
        if magic != MAGIC:
            raise BadMagic(magic.decode('latin-1'))
        file_type = self.handle.u8()
        if file_type != FILE_TYPE_WORLD:
            raise BadFileType(file_type, FILE_TYPE_WORLD)
        self.handle.skip(4 + 8)  # revision + favorites

    def _read_section_offsets(self):
        count = self.handle.u16()
        self.offsets = [self.handle.u32() for _ in range(count)]
        logger.info(f"Section offsets: {self.offsets}")

        length = self.handle.length()
        for slot, stage, *_ in sections_for(self.version):
            if slot >= count:
                raise BadSectionOffset(f"No offset for section '{stage}' (table has {count} entries)")
            if self.offsets[slot] > length:
                raise BadSectionOffset(f"Section '{stage}' offset {self.offsets[slot]} is past end of "
                                       f"file ({length} bytes)")

    def _read_importance(self):
        count = self.handle.u16()
        self.extra = self.handle.bitmap(count)
        logger.debug(f"Importance bitmap: {sum(self.extra)} of {count} tile types are framed")

    def _dispatch(self):
        for slot, stage, _, _, message, method in sections_for(self.version):
            self.stage = stage
            self.check_cancel()
            if message:
                self._status(message)
            self.handle.seek(self.offsets[slot])
            getattr(self, method)()

    def _load_header(self):
        header = WorldHeader(self.header_fields)
        header.load(self.handle, self.version)
        wide, high = header.get("tilesWide", 0), header.get("tilesHigh", 0)
        if wide <= 0 or high <= 0:
            raise CorruptData(f"Bad world dimensions {wide}x{high}")
        available = self.handle.length() - self.offsets[SECTION_TILES]
        needed = wide * min_column_bytes(high)
        if needed > available:
            raise CorruptData(f"World dimensions {wide}x{high} need at least {needed} bytes of tile data, "
                              f"only {available} in the file")
        try:
            self.world = World(header, self.version)
        except MemoryError:
            raise CorruptData(f"Not enough memory for a {wide}x{high} world")

    def _on_column(self, x, wide):
        self.check_cancel()
        self._status(f"Reading tiles: {int(x * 100.0 / wide)}%")

    def _load_tiles(self):
        sections.load_tiles(self.handle, self.world, self.extra, self._on_column)

    def _load_chests(self):
        sections.load_chests(self.handle, self.world, self.info)

    def _load_signs(self):
        sections.load_signs(self.handle, self.world)

    def _load_npcs(self):
        sections.load_npcs(self.handle, self.world, self.info, self.version)

    def _load_dummies(self):
        sections.load_dummies(self.handle, self.world)

    def _load_entities(self):
        sections.load_entities(self.handle, self.world)

    def _load_pressure_plates(self):
        sections.load_pressure_plates(self.handle, self.world)

    def _load_town_manager(self):
        sections.load_town_manager(self.handle, self.world)

    def _load_bestiary(self):
        sections.load_bestiary(self.handle, self.world)

    def _load_creative_powers(self):
        sections.load_creative_powers(self.handle, self.world)


def decode(world_path, player_path=None, info=None, on_status=None, cancel_event=None, header_fields=None):
    """Decodes the world file at `world_path`.

    When `player_path` is given, the player's map file marks which tiles
    have been explored. Raises LoadError on any failure.
    """
    try:
        handle = ByteCursor.from_file(world_path)
    except OSError as e:
        raise LoadError(f"Cannot open {world_path}: {e}", "open")
    decoder = WorldDecoder(handle, info=info, header_fields=header_fields,
                           on_status=on_status, cancel_event=cancel_event)
    return decoder.decode(player_path)
