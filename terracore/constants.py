VERSION = "1.0.0"

# Range of world file versions the decoder understands
MINIMUM_VERSION = 69
HIGHEST_VERSION = 279

MAGIC = b"relogic"
FILE_TYPE_PLAYER = 1
FILE_TYPE_WORLD = 2

# Version thresholds. A field gated at T is read for every version >= T.
V_MAGIC = 135
V_DUMMIES = 116
V_ENTITIES = 122
V_OTHER_NPCS = 140
V_PRESSURE_PLATES = 170
V_TOWN_MANAGER = 189
V_NPC_SPRITE_ID = 190
V_BESTIARY = 210
V_TOWN_VARIATION = 213
V_CREATIVE_POWERS = 220
V_SHIMMERED_NPCS = 268

# Player map (companion file) thresholds
PLAYER_V_LEGACY_MAX = 91
PLAYER_V_TILE_BYTE_MAX = 77
PLAYER_V_MISC2 = 50
PLAYER_V_COMPRESSED = 93

# Section slots in the offset table
SECTION_HEADER = 0
SECTION_TILES = 1
SECTION_CHESTS = 2
SECTION_SIGNS = 3
SECTION_NPCS = 4
SECTION_ENTITIES = 5
SECTION_PRESSURE_PLATES = 6
SECTION_TOWN_MANAGER = 7
SECTION_BESTIARY = 8
SECTION_CREATIVE_POWERS = 9

# Tile.flags bits
TILE_ACTIVE = 0x1
TILE_LAVA = 0x2
TILE_HONEY = 0x4
TILE_RED_WIRE = 0x8
TILE_BLUE_WIRE = 0x10
TILE_GREEN_WIRE = 0x20
TILE_HALF = 0x40
TILE_ACTUATOR = 0x80
TILE_INACTIVE = 0x100
TILE_SEEN = 0x200
TILE_YELLOW_WIRE = 0x400
TILE_SHIMMER = 0x800
