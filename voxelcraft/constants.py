"""World constants"""
from enum import Enum, IntEnum, auto

# Colors
BLACK = (0, 0, 0)
SKY_COLOR = (128, 160, 224)

# Block types. Values are the block ids stored in chunk grids and overlays.
class BlockType(IntEnum):
    EMPTY = 0
    GRASS = 1
    DIRT = 2
    STONE = 3
    COAL_ORE = 4
    IRON_ORE = 5
    TREE = 6
    LEAVES = 7
    SAND = 8
    CLOUD = 9
    SNOW = 10
    JUNGLE_TREE = 11
    JUNGLE_LEAVES = 12
    CACTUS = 13
    JUNGLE_GRASS = 14

BLOCK_COLORS = {
    BlockType.GRASS: (86, 160, 62),
    BlockType.DIRT: (134, 96, 67),
    BlockType.STONE: (128, 128, 128),
    BlockType.COAL_ORE: (45, 45, 45),
    BlockType.IRON_ORE: (165, 156, 148),
    BlockType.TREE: (120, 81, 45),
    BlockType.LEAVES: (60, 130, 40),
    BlockType.SAND: (194, 178, 128),
    BlockType.CLOUD: (240, 240, 240),
    BlockType.SNOW: (250, 250, 255),
    BlockType.JUNGLE_TREE: (90, 70, 30),
    BlockType.JUNGLE_LEAVES: (40, 110, 20),
    BlockType.CACTUS: (80, 150, 60),
    BlockType.JUNGLE_GRASS: (70, 140, 40),
}

# Largest block id a chunk grid can hold
MAX_BLOCK_ID = 255

# Biome types
class BiomeType(Enum):
    TUNDRA = auto()
    TEMPERATE = auto()
    JUNGLE = auto()
    DESERT = auto()

# World generation
CHUNK_WIDTH = 32
CHUNK_HEIGHT = 32
DRAW_DISTANCE = 3  # Chunks generated on each side of the focal chunk
WORLD_SEED = 0

# Chunk generation is forced after this long when scheduled for idle time
GENERATION_TIMEOUT_MS = 1000

# Keys used in the persistence store
PARAMS_KEY = "voxelcraft_params"
DATA_KEY = "voxelcraft_data"
