"""
Tests for saving and loading worlds
"""
import json

import pytest

from voxelcraft.constants import BlockType, DATA_KEY, PARAMS_KEY
from voxelcraft.storage import FileStorage, MemoryStorage, PersistenceError
from voxelcraft.world import World

from conftest import FLAT_HEIGHT, make_flat_settings


@pytest.fixture
def world():
    world = World(settings=make_flat_settings(seed=3))
    world.regenerate()
    return world


def test_memory_storage():
    storage = MemoryStorage()
    assert storage.get_item("a") is None
    storage.set_item("a", "1")
    assert storage.get_item("a") == "1"
    storage.remove_item("a")
    assert storage.get_item("a") is None


def test_file_storage(tmp_path):
    path = str(tmp_path / "save.json")
    storage = FileStorage(path)
    assert storage.get_item("a") is None

    storage.set_item("a", "1")
    storage.set_item("b", "2")
    assert FileStorage(path).get_item("a") == "1"
    assert FileStorage(path).get_item("b") == "2"

    storage.remove_item("a")
    assert storage.get_item("a") is None


def test_file_storage_corrupt(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json")
    with pytest.raises(PersistenceError):
        FileStorage(str(path)).get_item("a")

    path.write_text("[1, 2]")
    with pytest.raises(PersistenceError):
        FileStorage(str(path)).get_item("a")


def test_save_writes_params_and_edits(world):
    storage = MemoryStorage()
    world.add_block(1, FLAT_HEIGHT + 1, 1, BlockType.STONE)

    assert world.save(storage)

    assert json.loads(storage.get_item(PARAMS_KEY))['seed'] == 3
    assert json.loads(storage.get_item(DATA_KEY)) == {f"0,0,1,{FLAT_HEIGHT + 1},1": BlockType.STONE}


def test_save_and_load(world, tmp_path):
    """A saved world loads into a fresh World with the same settings and edits"""
    storage = FileStorage(str(tmp_path / "world.json"))
    world.add_block(-3, FLAT_HEIGHT + 1, 2, BlockType.CACTUS)
    world.remove_block(5, FLAT_HEIGHT, 5)
    assert world.save(storage)

    other = World()
    assert other.load(storage)

    assert other.settings.to_dict() == world.settings.to_dict()
    assert other.overlay.dump() == world.overlay.dump()
    assert other.get_block(-3, FLAT_HEIGHT + 1, 2) == BlockType.CACTUS
    assert other.get_block(5, FLAT_HEIGHT, 5) == BlockType.EMPTY
    assert len(other.chunks) == 9


def test_load_missing_save(world):
    world.add_block(1, FLAT_HEIGHT + 1, 1, BlockType.STONE)
    assert not world.load(MemoryStorage())
    assert world.get_block(1, FLAT_HEIGHT + 1, 1) == BlockType.STONE
    assert len(world.overlay) == 1


@pytest.mark.parametrize("params, data", [
    ("{broken", "{}"),
    (json.dumps({"seed": 1}), "{}"),
    (None, "{}"),
    ("PARAMS", "{broken"),
    ("PARAMS", json.dumps({"1,2,x,4,5": 1})),
    ("PARAMS", json.dumps([1, 2])),
])
def test_failed_load_leaves_state_untouched(world, params, data):
    world.add_block(1, FLAT_HEIGHT + 1, 1, BlockType.STONE)
    settings_before = world.settings.to_dict()
    overlay_before = world.overlay.dump()
    chunk_before = world.get_chunk(0, 0)

    items = {DATA_KEY: data}
    if params == "PARAMS":
        items[PARAMS_KEY] = json.dumps(make_flat_settings(seed=99).to_dict())
    elif params is not None:
        items[PARAMS_KEY] = params

    assert not world.load(MemoryStorage(items))

    assert world.settings.to_dict() == settings_before
    assert world.overlay.dump() == overlay_before
    assert world.get_chunk(0, 0) is chunk_before


@pytest.mark.parametrize("path, value", [
    (('terrain', 'scale'), 0),
    (('terrain', 'offset'), float('nan')),
    (('resources', 0, 'scale', 'y'), 0),
    (('clouds', 'scale'), float('-inf')),
])
def test_load_rejects_unusable_settings(world, path, value):
    """Settings that would break generation are refused before anything is replaced"""
    world.add_block(1, FLAT_HEIGHT + 1, 1, BlockType.STONE)
    overlay_before = world.overlay.dump()
    chunk_before = world.get_chunk(0, 0)

    params = make_flat_settings(seed=99).to_dict()
    node = params
    for part in path[:-1]:
        node = node[part]
    node[path[-1]] = value
    storage = MemoryStorage({
        PARAMS_KEY: json.dumps(params),
        DATA_KEY: json.dumps({"0,0,2,2,2": BlockType.STONE}),
    })

    assert not world.load(storage)

    assert world.settings.seed == 3
    assert world.overlay.dump() == overlay_before
    assert world.get_chunk(0, 0) is chunk_before
    assert len(world.chunks) == 9
