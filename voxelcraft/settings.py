"""
World generation settings

Settings serialize to a flat-ish dictionary using the option names the
persistence store expects (``terrain.waterOffset``, ``trees.trunk.minHeight``
and so on are nested dictionaries in the serialized form).
"""
import math
from typing import Any, Dict, List, Optional

from voxelcraft.constants import (
    BlockType, CHUNK_WIDTH, CHUNK_HEIGHT, DRAW_DISTANCE, WORLD_SEED, MAX_BLOCK_ID
)


class SettingsError(ValueError):
    """Raised when a serialized settings record is missing or mistyped"""


def _lookup(data: Dict[str, Any], path: str) -> Any:
    node: Any = data
    for part in path.split('.'):
        if not isinstance(node, dict) or part not in node:
            raise SettingsError(f"missing setting '{path}'")
        node = node[part]
    return node


def _number(data: Dict[str, Any], path: str) -> float:
    value = _lookup(data, path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"setting '{path}' must be a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise SettingsError(f"setting '{path}' must be finite, got {value!r}")
    return number


def _positive(data: Dict[str, Any], path: str) -> float:
    value = _number(data, path)
    if value <= 0:
        raise SettingsError(f"setting '{path}' must be positive, got {value!r}")
    return value


def _integer(data: Dict[str, Any], path: str) -> int:
    value = _lookup(data, path)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"setting '{path}' must be an integer, got {value!r}")
    return value


class TerrainSettings:
    def __init__(self, scale: float = 100, magnitude: float = 8,
                 offset: float = 6, water_offset: float = 4):
        self.scale = scale
        self.magnitude = magnitude
        self.offset = offset
        self.water_offset = water_offset  # Surface at or below this is beach/underwater

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scale': self.scale,
            'magnitude': self.magnitude,
            'offset': self.offset,
            'waterOffset': self.water_offset,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TerrainSettings':
        return cls(
            scale=_positive(data, 'scale'),
            magnitude=_number(data, 'magnitude'),
            offset=_number(data, 'offset'),
            water_offset=_number(data, 'waterOffset'),
        )


class BiomeSettings:
    def __init__(self, scale: float = 500, variation_amplitude: float = 0.2,
                 variation_scale: float = 50, tundra_to_temperate: float = 0.25,
                 temperate_to_jungle: float = 0.5, jungle_to_desert: float = 0.75):
        self.scale = scale
        self.variation_amplitude = variation_amplitude
        self.variation_scale = variation_scale
        # Ascending classification thresholds
        self.tundra_to_temperate = tundra_to_temperate
        self.temperate_to_jungle = temperate_to_jungle
        self.jungle_to_desert = jungle_to_desert

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scale': self.scale,
            'variation': {
                'amplitude': self.variation_amplitude,
                'scale': self.variation_scale,
            },
            'tundraToTemperate': self.tundra_to_temperate,
            'temperateToJungle': self.temperate_to_jungle,
            'jungleToDesert': self.jungle_to_desert,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BiomeSettings':
        return cls(
            scale=_positive(data, 'scale'),
            variation_amplitude=_number(data, 'variation.amplitude'),
            variation_scale=_positive(data, 'variation.scale'),
            tundra_to_temperate=_number(data, 'tundraToTemperate'),
            temperate_to_jungle=_number(data, 'temperateToJungle'),
            jungle_to_desert=_number(data, 'jungleToDesert'),
        )


class TreeSettings:
    def __init__(self, trunk_min_height: float = 4, trunk_max_height: float = 7,
                 canopy_min_radius: float = 3, canopy_max_radius: float = 3,
                 canopy_density: float = 0.7, frequency: float = 0.005):
        self.trunk_min_height = trunk_min_height
        self.trunk_max_height = trunk_max_height
        self.canopy_min_radius = canopy_min_radius
        self.canopy_max_radius = canopy_max_radius
        self.canopy_density = canopy_density  # 0.0 to 1.0
        self.frequency = frequency  # Chance of a tree per surface column

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trunk': {
                'minHeight': self.trunk_min_height,
                'maxHeight': self.trunk_max_height,
            },
            'canopy': {
                'minRadius': self.canopy_min_radius,
                'maxRadius': self.canopy_max_radius,
                'density': self.canopy_density,
            },
            'frequency': self.frequency,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TreeSettings':
        return cls(
            trunk_min_height=_number(data, 'trunk.minHeight'),
            trunk_max_height=_number(data, 'trunk.maxHeight'),
            canopy_min_radius=_number(data, 'canopy.minRadius'),
            canopy_max_radius=_number(data, 'canopy.maxRadius'),
            canopy_density=_number(data, 'canopy.density'),
            frequency=_number(data, 'frequency'),
        )


class CloudSettings:
    def __init__(self, scale: float = 30, density: float = 0.3):
        self.scale = scale
        self.density = density  # 0 disables the cloud layer

    def to_dict(self) -> Dict[str, Any]:
        return {'scale': self.scale, 'density': self.density}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CloudSettings':
        return cls(scale=_positive(data, 'scale'), density=_number(data, 'density'))


class ResourceSettings:
    """An ore-like block scattered underground by a 3D noise field"""

    def __init__(self, name: str, block_id: int, scale=(30, 30, 30), scarcity: float = 0.5):
        self.name = name
        self.block_id = block_id
        self.scale_x, self.scale_y, self.scale_z = scale
        self.scarcity = scarcity  # Noise must exceed this to place the block

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'blockId': int(self.block_id),
            'scale': {'x': self.scale_x, 'y': self.scale_y, 'z': self.scale_z},
            'scarcity': self.scarcity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResourceSettings':
        block_id = _integer(data, 'blockId')
        if not 0 <= block_id <= MAX_BLOCK_ID:
            raise SettingsError(f"resource block id {block_id} out of range")
        name = data.get('name', f"block {block_id}")
        if not isinstance(name, str):
            raise SettingsError(f"resource name must be a string, got {name!r}")
        return cls(
            name=name,
            block_id=block_id,
            scale=(_positive(data, 'scale.x'), _positive(data, 'scale.y'), _positive(data, 'scale.z')),
            scarcity=_number(data, 'scarcity'),
        )


def default_resources() -> List[ResourceSettings]:
    """Resources in evaluation order; a later match overrides an earlier one"""
    return [
        ResourceSettings('stone', BlockType.STONE, scale=(30, 30, 30), scarcity=0.3),
        ResourceSettings('coal', BlockType.COAL_ORE, scale=(20, 20, 20), scarcity=0.4),
        ResourceSettings('iron', BlockType.IRON_ORE, scale=(40, 40, 40), scarcity=0.45),
    ]


class WorldGenSettings:
    """All parameters that drive procedural generation"""

    def __init__(self, seed: int = WORLD_SEED, chunk_width: int = CHUNK_WIDTH,
                 chunk_height: int = CHUNK_HEIGHT, draw_distance: int = DRAW_DISTANCE,
                 terrain: Optional[TerrainSettings] = None,
                 biomes: Optional[BiomeSettings] = None,
                 trees: Optional[TreeSettings] = None,
                 clouds: Optional[CloudSettings] = None,
                 resources: Optional[List[ResourceSettings]] = None):
        self.seed = seed
        self.chunk_width = chunk_width
        self.chunk_height = chunk_height
        self.draw_distance = draw_distance
        self.terrain = terrain or TerrainSettings()
        self.biomes = biomes or BiomeSettings()
        self.trees = trees or TreeSettings()
        self.clouds = clouds or CloudSettings()
        self.resources = default_resources() if resources is None else resources

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seed': self.seed,
            'chunk': {'width': self.chunk_width, 'height': self.chunk_height},
            'drawDistance': self.draw_distance,
            'terrain': self.terrain.to_dict(),
            'biomes': self.biomes.to_dict(),
            'trees': self.trees.to_dict(),
            'clouds': self.clouds.to_dict(),
            'resources': [resource.to_dict() for resource in self.resources],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorldGenSettings':
        """
        Build settings from their serialized form

        Raises:
            SettingsError: if a field is missing, mistyped or out of range
        """
        if not isinstance(data, dict):
            raise SettingsError("settings record must be a mapping")

        chunk_width = _integer(data, 'chunk.width')
        chunk_height = _integer(data, 'chunk.height')
        draw_distance = _integer(data, 'drawDistance')
        if chunk_width <= 0 or chunk_height <= 0:
            raise SettingsError("chunk dimensions must be positive")
        if draw_distance < 0:
            raise SettingsError("draw distance must not be negative")

        resources = _lookup(data, 'resources')
        if not isinstance(resources, list):
            raise SettingsError("setting 'resources' must be a list")

        # Clouds were added after the first save format, so they are optional
        clouds = CloudSettings.from_dict(data['clouds']) if 'clouds' in data else CloudSettings()

        trees = TreeSettings.from_dict(_lookup(data, 'trees'))
        # Tree sizes are bounded by the chunk height
        for size in (trees.trunk_min_height, trees.trunk_max_height,
                     trees.canopy_min_radius, trees.canopy_max_radius):
            if not 0 <= size <= chunk_height:
                raise SettingsError(f"tree size {size!r} must be between 0 and the chunk height")

        return cls(
            seed=_integer(data, 'seed'),
            chunk_width=chunk_width,
            chunk_height=chunk_height,
            draw_distance=draw_distance,
            terrain=TerrainSettings.from_dict(_lookup(data, 'terrain')),
            biomes=BiomeSettings.from_dict(_lookup(data, 'biomes')),
            trees=trees,
            clouds=clouds,
            resources=[ResourceSettings.from_dict(r) for r in resources],
        )
