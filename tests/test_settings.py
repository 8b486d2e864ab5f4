"""
Tests for world generation settings
"""
import copy

import pytest

from voxelcraft.constants import BlockType
from voxelcraft.settings import ResourceSettings, SettingsError, WorldGenSettings


def test_default_settings():
    settings = WorldGenSettings()
    assert settings.seed == 0
    assert settings.chunk_width == 32
    assert settings.chunk_height == 32
    assert settings.draw_distance == 3
    assert settings.terrain.water_offset == 4
    assert [r.block_id for r in settings.resources] == [BlockType.STONE, BlockType.COAL_ORE, BlockType.IRON_ORE]


def test_settings_serialized_names():
    """Serialized settings use the persisted option names"""
    data = WorldGenSettings().to_dict()
    assert data['chunk'] == {'width': 32, 'height': 32}
    assert data['drawDistance'] == 3
    assert data['terrain']['waterOffset'] == 4
    assert data['biomes']['variation'] == {'amplitude': 0.2, 'scale': 50}
    assert data['biomes']['jungleToDesert'] == 0.75
    assert data['trees']['trunk'] == {'minHeight': 4, 'maxHeight': 7}
    assert data['trees']['canopy']['density'] == 0.7
    assert data['resources'][0]['scale'] == {'x': 30, 'y': 30, 'z': 30}
    assert data['resources'][2]['blockId'] == BlockType.IRON_ORE


def test_settings_round_trip():
    settings = WorldGenSettings(
        seed=42,
        draw_distance=2,
        resources=[ResourceSettings('gold', 20, scale=(5, 6, 7), scarcity=0.9)],
    )
    restored = WorldGenSettings.from_dict(settings.to_dict())

    assert restored.to_dict() == settings.to_dict()
    assert restored.seed == 42
    assert restored.resources[0].scale_y == 6


def test_settings_clouds_optional():
    data = WorldGenSettings().to_dict()
    del data['clouds']
    assert WorldGenSettings.from_dict(data).clouds.density == 0.3


@pytest.mark.parametrize("path, value", [
    (('seed',), "zero"),
    (('seed',), True),
    (('seed',), 1.5),
    (('chunk', 'width'), 0),
    (('drawDistance',), -1),
    (('terrain', 'scale'), "big"),
    (('trees', 'canopy'), 3),
    (('resources',), {}),
    (('terrain', 'scale'), 0),
    (('terrain', 'offset'), float('nan')),
    (('terrain', 'magnitude'), float('inf')),
    (('terrain', 'magnitude'), 10 ** 400),
    (('biomes', 'scale'), -5),
    (('biomes', 'variation', 'scale'), 0),
    (('clouds', 'scale'), 0),
    (('resources', 0, 'scale', 'y'), 0),
    (('trees', 'trunk', 'maxHeight'), 1e9),
    (('trees', 'canopy', 'minRadius'), -1),
])
def test_settings_rejects_bad_values(path, value):
    data = WorldGenSettings().to_dict()
    node = data
    for part in path[:-1]:
        node = node[part]
    node[path[-1]] = value

    with pytest.raises(SettingsError):
        WorldGenSettings.from_dict(data)


def test_settings_rejects_missing_fields():
    data = WorldGenSettings().to_dict()
    broken = copy.deepcopy(data)
    del broken['biomes']['tundraToTemperate']
    with pytest.raises(SettingsError):
        WorldGenSettings.from_dict(broken)

    broken = copy.deepcopy(data)
    broken['resources'][0]['blockId'] = 999
    with pytest.raises(SettingsError):
        WorldGenSettings.from_dict(broken)

    with pytest.raises(SettingsError):
        WorldGenSettings.from_dict([])
