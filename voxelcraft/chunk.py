"""
Chunk storage and procedural generation

A chunk is a ``width x height x width`` column of blocks indexed ``[x, y, z]``
in chunk-local coordinates. Generation runs terrain, biomes, ground cover,
trees and underground resources column by column, then adds the cloud layer
and finally replays the user's edits from the overlay.
"""
import logging
import math
import time
from enum import Enum, auto
from typing import Iterator, Optional, Tuple

import numpy as np

from voxelcraft.constants import BiomeType, BlockType, MAX_BLOCK_ID
from voxelcraft.noisefield import NoiseField
from voxelcraft.overlay import EditOverlay
from voxelcraft.rng import RNG
from voxelcraft.settings import WorldGenSettings

logger = logging.getLogger(__name__)

TRUNK_BLOCKS = {
    BiomeType.TEMPERATE: BlockType.TREE,
    BiomeType.TUNDRA: BlockType.TREE,
    BiomeType.JUNGLE: BlockType.JUNGLE_TREE,
    BiomeType.DESERT: BlockType.CACTUS,
}

CANOPY_BLOCKS = {
    BiomeType.TEMPERATE: BlockType.LEAVES,
    BiomeType.JUNGLE: BlockType.JUNGLE_LEAVES,
}


def _round(value: float) -> int:
    """Round half up"""
    return int(math.floor(value + 0.5))


class ChunkState(Enum):
    UNLOADED = auto()
    GENERATING = auto()
    LOADED = auto()
    DISPOSED = auto()


class TerrainGenerator:
    """Per-column terrain sampling shared by one chunk generation run"""

    def __init__(self, settings: WorldGenSettings, rng: RNG):
        """
        Draw the noise fields from the generator

        Args:
            settings: World generation settings
            rng: Generator seeded with the world seed; consumed in a fixed order
        """
        self.settings = settings
        self.noise = NoiseField(rng)
        self.resource_noise = NoiseField(rng)
        self.cloud_noise = NoiseField(rng)

    def biome_at(self, world_x: int, world_z: int) -> BiomeType:
        """
        Classify the column at a world position

        Args:
            world_x: X coordinate in world space
            world_z: Z coordinate in world space

        Returns:
            The biome of the column
        """
        biomes = self.settings.biomes
        value = 0.5 * self.noise.noise2(world_x / biomes.scale, world_z / biomes.scale) + 0.5
        value += biomes.variation_amplitude * self.noise.noise2(
            world_x / biomes.variation_scale,
            world_z / biomes.variation_scale
        )

        if value < biomes.tundra_to_temperate:
            return BiomeType.TUNDRA
        elif value < biomes.temperate_to_jungle:
            return BiomeType.TEMPERATE
        elif value < biomes.jungle_to_desert:
            return BiomeType.JUNGLE
        return BiomeType.DESERT

    def height_at(self, world_x: int, world_z: int) -> int:
        """Surface height of a column, clamped to the chunk's vertical range"""
        terrain = self.settings.terrain
        value = self.noise.noise2(world_x / terrain.scale, world_z / terrain.scale)
        height = math.floor(terrain.offset + terrain.magnitude * value)
        return max(0, min(height, self.settings.chunk_height - 1))

    def resource_at(self, world_x: int, y: int, world_z: int) -> int:
        """Block id for an underground cell; later resources win ties"""
        block_id = BlockType.DIRT
        for resource in self.settings.resources:
            value = self.resource_noise.noise3(
                world_x / resource.scale_x,
                y / resource.scale_y,
                world_z / resource.scale_z
            )
            if value > resource.scarcity:
                block_id = resource.block_id
        return block_id

    def cloud_at(self, world_x: int, world_z: int) -> bool:
        clouds = self.settings.clouds
        value = 0.5 * self.cloud_noise.noise2(world_x / clouds.scale, world_z / clouds.scale) + 0.5
        return value < clouds.density


def ground_block(biome: BiomeType) -> BlockType:
    """Surface block for a biome above the water line"""
    if biome == BiomeType.DESERT:
        return BlockType.SAND
    elif biome == BiomeType.TEMPERATE or biome == BiomeType.JUNGLE:
        return BlockType.GRASS
    elif biome == BiomeType.TUNDRA:
        return BlockType.SNOW
    elif biome == BiomeType.JUNGLE:
        # Shadowed by the branch above; jungles currently get plain grass
        return BlockType.JUNGLE_GRASS
    return BlockType.DIRT


class Chunk:
    """A column of the voxel world"""

    def __init__(self, x: int, z: int, settings: Optional[WorldGenSettings] = None,
                 overlay: Optional[EditOverlay] = None):
        """
        Initialize an empty chunk at the given position

        Args:
            x: Chunk x-coordinate
            z: Chunk z-coordinate
            settings: Generation settings (defaults if omitted)
            overlay: User edits replayed after generation
        """
        self.x = x
        self.z = z
        self.settings = settings or WorldGenSettings()
        self.overlay = overlay if overlay is not None else EditOverlay()
        self.width = self.settings.chunk_width
        self.height = self.settings.chunk_height

        shape = (self.width, self.height, self.width)
        self.blocks = np.zeros(shape, dtype=np.uint8)
        self.visible = np.zeros(shape, dtype=bool)
        self.state = ChunkState.UNLOADED

    @property
    def key(self) -> Tuple[int, int]:
        return (self.x, self.z)

    @property
    def loaded(self) -> bool:
        return self.state == ChunkState.LOADED

    def in_bounds(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and 0 <= z < self.width

    def get_block(self, x: int, y: int, z: int) -> Optional[int]:
        """
        Get the block id at a chunk-local position

        Returns:
            The block id, or None if the position is outside the chunk
        """
        if self.in_bounds(x, y, z):
            return int(self.blocks[x, y, z])
        return None

    def set_block_id(self, x: int, y: int, z: int, block_id: int) -> bool:
        """
        Set the block id at a chunk-local position

        Returns:
            False if the position is outside the chunk
        """
        if not 0 <= block_id <= MAX_BLOCK_ID:
            raise ValueError(f"block id {block_id} out of range")
        if self.in_bounds(x, y, z):
            self.blocks[x, y, z] = block_id
            return True
        return False

    def is_visible(self, x: int, y: int, z: int) -> bool:
        if self.in_bounds(x, y, z):
            return bool(self.visible[x, y, z])
        return False

    def set_visible(self, x: int, y: int, z: int, visible: bool) -> bool:
        if self.in_bounds(x, y, z):
            self.visible[x, y, z] = visible
            return True
        return False

    def is_obscured(self, x: int, y: int, z: int) -> bool:
        """True if all six neighbours inside this chunk are occupied"""
        for dx, dy, dz in ((-1, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0), (0, 0, -1), (0, 0, 1)):
            block_id = self.get_block(x + dx, y + dy, z + dz)
            if block_id is None or block_id == BlockType.EMPTY:
                return False
        return True

    def iter_visible_blocks(self) -> Iterator[Tuple[int, int, int, int]]:
        """Yield (x, y, z, block_id) for every visible block"""
        for x, y, z in np.argwhere(self.visible):
            yield int(x), int(y), int(z), int(self.blocks[x, y, z])

    def update_visibility(self, west: Optional['Chunk'] = None, east: Optional['Chunk'] = None,
                          north: Optional['Chunk'] = None, south: Optional['Chunk'] = None) -> np.ndarray:
        """
        Recompute every visibility flag

        Neighbouring chunks (west = -x, east = +x, north = -z, south = +z)
        contribute their border faces; a missing neighbour never hides a block.

        Returns:
            Boolean mask of the cells whose flag changed
        """
        solid = self.blocks != BlockType.EMPTY

        padded = np.zeros((self.width + 2, self.height + 2, self.width + 2), dtype=bool)
        padded[1:-1, 1:-1, 1:-1] = solid
        if west is not None:
            padded[0, 1:-1, 1:-1] = west.blocks[-1, :, :] != BlockType.EMPTY
        if east is not None:
            padded[-1, 1:-1, 1:-1] = east.blocks[0, :, :] != BlockType.EMPTY
        if north is not None:
            padded[1:-1, 1:-1, 0] = north.blocks[:, :, -1] != BlockType.EMPTY
        if south is not None:
            padded[1:-1, 1:-1, -1] = south.blocks[:, :, 0] != BlockType.EMPTY

        obscured = (
            padded[:-2, 1:-1, 1:-1] & padded[2:, 1:-1, 1:-1] &
            padded[1:-1, :-2, 1:-1] & padded[1:-1, 2:, 1:-1] &
            padded[1:-1, 1:-1, :-2] & padded[1:-1, 1:-1, 2:]
        )
        visible = solid & ~obscured

        changed = visible != self.visible
        self.visible[...] = visible
        return changed

    def generate(self) -> None:
        """Fill the chunk from the world seed, then apply overlay edits"""
        if self.state != ChunkState.UNLOADED:
            return

        start = time.perf_counter()
        self.state = ChunkState.GENERATING

        rng = RNG(self.settings.seed)
        terrain = TerrainGenerator(self.settings, rng)

        self.generate_terrain(terrain, rng)
        self.generate_clouds(terrain)
        self.apply_overlay()
        self.update_visibility()

        self.state = ChunkState.LOADED
        logger.debug("Loaded chunk (%d, %d) in %.1fms",
                     self.x, self.z, (time.perf_counter() - start) * 1000)

    def generate_terrain(self, terrain: TerrainGenerator, rng: RNG) -> None:
        """Surface, trees and underground fill, one column at a time"""
        water_offset = self.settings.terrain.water_offset
        tree_frequency = self.settings.trees.frequency

        for x in range(self.width):
            for z in range(self.width):
                world_x = self.x * self.width + x
                world_z = self.z * self.width + z

                biome = terrain.biome_at(world_x, world_z)
                height = terrain.height_at(world_x, world_z)

                for y in range(self.height - 1, -1, -1):
                    if y == height:
                        if y <= water_offset:
                            self.blocks[x, y, z] = BlockType.SAND
                        else:
                            self.blocks[x, y, z] = ground_block(biome)
                            if rng.random() < tree_frequency:
                                self.generate_tree(rng, biome, x, height + 1, z)
                    elif y < height and self.blocks[x, y, z] == BlockType.EMPTY:
                        # Leaves from a neighbouring tree may already be here
                        self.blocks[x, y, z] = terrain.resource_at(world_x, y, world_z)

    def generate_tree(self, rng: RNG, biome: BiomeType, x: int, y: int, z: int) -> None:
        """
        Grow a tree whose trunk starts at a chunk-local position

        Args:
            rng: Generator shared with the rest of the chunk
            biome: Biome of the column, selects trunk and canopy blocks
            x: Local x of the trunk
            y: Lowest trunk block
            z: Local z of the trunk
        """
        trees = self.settings.trees
        trunk_height = _round(
            trees.trunk_min_height + (trees.trunk_max_height - trees.trunk_min_height) * rng.random()
        )

        trunk_block = TRUNK_BLOCKS[biome]
        for trunk_y in range(y, y + trunk_height):
            if self.in_bounds(x, trunk_y, z):
                self.blocks[x, trunk_y, z] = trunk_block

        canopy_block = CANOPY_BLOCKS.get(biome)
        if canopy_block is None:
            return

        radius = _round(
            trees.canopy_min_radius + (trees.canopy_max_radius - trees.canopy_min_radius) * rng.random()
        )
        top = y + trunk_height
        radius_sq = radius * radius
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                for dz in range(-radius, radius + 1):
                    if dx * dx + dy * dy + dz * dz > radius_sq:
                        continue
                    if rng.random() < trees.canopy_density and \
                            self.get_block(x + dx, top + dy, z + dz) == BlockType.EMPTY:
                        self.blocks[x + dx, top + dy, z + dz] = canopy_block

    def generate_clouds(self, terrain: TerrainGenerator) -> None:
        """Scatter clouds over the top layer of the chunk"""
        if self.settings.clouds.density <= 0:
            return

        y = self.height - 1
        for x in range(self.width):
            for z in range(self.width):
                if self.blocks[x, y, z] != BlockType.EMPTY:
                    continue
                if terrain.cloud_at(self.x * self.width + x, self.z * self.width + z):
                    self.blocks[x, y, z] = BlockType.CLOUD

    def apply_overlay(self) -> None:
        """Overwrite generated blocks with the user's edits for this chunk"""
        for x, y, z, block_id in self.overlay.entries_for_chunk(self.x, self.z):
            if self.in_bounds(x, y, z):
                self.blocks[x, y, z] = block_id

    def dispose(self) -> None:
        self.state = ChunkState.DISPOSED
