"""
Shared fixtures for the voxelcraft tests
"""
import pytest

from voxelcraft.render import ChunkRenderer
from voxelcraft.settings import CloudSettings, TerrainSettings, TreeSettings, WorldGenSettings

FLAT_HEIGHT = 10


class RecordingRenderer(ChunkRenderer):
    """Renderer that remembers every notification"""

    def __init__(self):
        self.loaded = []
        self.disposed = []
        self.shown = []
        self.hidden = []

    def chunk_loaded(self, chunk):
        self.loaded.append(chunk.key)

    def chunk_disposed(self, chunk):
        self.disposed.append(chunk.key)

    def block_shown(self, chunk, x, y, z, block_id):
        self.shown.append((chunk.key, (x, y, z), block_id))

    def block_hidden(self, chunk, x, y, z):
        self.hidden.append((chunk.key, (x, y, z)))


def make_flat_settings(**kwargs):
    """Small chunks with level ground at FLAT_HEIGHT, no trees and no clouds"""
    options = dict(
        seed=7,
        chunk_width=8,
        chunk_height=16,
        draw_distance=1,
        terrain=TerrainSettings(scale=100, magnitude=0, offset=FLAT_HEIGHT, water_offset=4),
        trees=TreeSettings(frequency=0),
        clouds=CloudSettings(density=0),
    )
    options.update(kwargs)
    return WorldGenSettings(**options)


@pytest.fixture
def flat_settings():
    return make_flat_settings()


@pytest.fixture
def renderer():
    return RecordingRenderer()
