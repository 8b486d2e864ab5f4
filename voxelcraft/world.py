"""
World management module for voxelcraft
"""
import json
import logging
import math
from typing import Dict, List, Optional, Tuple

from voxelcraft.chunk import Chunk, ChunkState
from voxelcraft.constants import BlockType, DATA_KEY, PARAMS_KEY, GENERATION_TIMEOUT_MS, MAX_BLOCK_ID
from voxelcraft.overlay import EditOverlay
from voxelcraft.render import ChunkRenderer
from voxelcraft.scheduler import IdleScheduler
from voxelcraft.settings import SettingsError, WorldGenSettings
from voxelcraft.storage import PersistenceError, Storage

logger = logging.getLogger(__name__)

NEIGHBOUR_OFFSETS = ((-1, 0, 0), (1, 0, 0), (0, -1, 0), (0, 1, 0), (0, 0, -1), (0, 0, 1))

ChunkCoords = Tuple[int, int]
BlockCoords = Tuple[int, int, int]


class World:
    """Owns the chunks around a focal point and the user's edits"""

    def __init__(self, settings: Optional[WorldGenSettings] = None,
                 overlay: Optional[EditOverlay] = None,
                 scheduler: Optional[IdleScheduler] = None,
                 renderer: Optional[ChunkRenderer] = None,
                 async_loading: bool = False):
        """
        Initialize a world with no chunks

        Args:
            settings: Generation settings (defaults if omitted)
            overlay: User edits; a fresh overlay if omitted
            scheduler: Idle-time scheduler used when async_loading is on
            renderer: Receives chunk and block visibility notifications
            async_loading: Generate chunks through the scheduler instead of inline
        """
        self.settings = settings or WorldGenSettings()
        self.overlay = overlay if overlay is not None else EditOverlay()
        self.scheduler = scheduler or IdleScheduler()
        self.renderer = renderer or ChunkRenderer()
        self.async_loading = async_loading
        self.generation_timeout_ms = GENERATION_TIMEOUT_MS

        # Map chunks, including ones still waiting to be generated
        self.chunks: Dict[ChunkCoords, Chunk] = {}
        self.focus_chunk: ChunkCoords = (0, 0)

    def world_to_chunk_coords(self, x: int, y: int, z: int) -> Tuple[ChunkCoords, BlockCoords]:
        """
        Split a world position into chunk coordinates and chunk-local block coordinates

        Args:
            x: World x-coordinate
            y: World y-coordinate (unchanged, chunks span the full height)
            z: World z-coordinate

        Returns:
            ((chunk_x, chunk_z), (local_x, y, local_z))
        """
        width = self.settings.chunk_width
        chunk_x, local_x = divmod(math.floor(x), width)
        chunk_z, local_z = divmod(math.floor(z), width)
        return (chunk_x, chunk_z), (local_x, math.floor(y), local_z)

    def get_chunk(self, cx: int, cz: int) -> Optional[Chunk]:
        """
        Get the chunk at the specified chunk coordinates

        Returns:
            The chunk, or None if it is absent or not yet generated
        """
        chunk = self.chunks.get((cx, cz))
        if chunk is None or not chunk.loaded:
            return None
        return chunk

    def get_loaded_chunks(self) -> List[Chunk]:
        return [chunk for chunk in self.chunks.values() if chunk.loaded]

    def regenerate(self, clear_overlay: bool = False) -> None:
        """
        Throw away every chunk and generate the area around the focal chunk again

        Args:
            clear_overlay: Also forget the user's edits
        """
        if clear_overlay:
            self.overlay.clear()

        self.dispose_chunks()

        distance = self.settings.draw_distance
        focus_x, focus_z = self.focus_chunk
        for cx in range(focus_x - distance, focus_x + distance + 1):
            for cz in range(focus_z - distance, focus_z + distance + 1):
                self.generate_chunk(cx, cz)

        logger.info("Regenerated %d chunks around (%d, %d)", len(self.chunks), focus_x, focus_z)

    def generate_chunk(self, cx: int, cz: int) -> Chunk:
        """
        Create the chunk at (cx, cz) and generate it, inline or when idle

        Returns:
            The new chunk; it is only visible to lookups once loaded
        """
        old = self.chunks.get((cx, cz))
        if old is not None:
            self.dispose_chunk(old)

        chunk = Chunk(cx, cz, self.settings, self.overlay)
        self.chunks[(cx, cz)] = chunk

        if self.async_loading:
            self.scheduler.submit(lambda: self._load_chunk(chunk), self.generation_timeout_ms)
        else:
            self._load_chunk(chunk)

        logger.debug("Adding chunk at X: %d Z: %d", cx, cz)
        return chunk

    def _load_chunk(self, chunk: Chunk) -> None:
        # A chunk disposed while queued stays disposed
        if chunk.state != ChunkState.UNLOADED:
            return

        chunk.generate()
        self._refresh_chunk(chunk, notify=False)
        self.renderer.chunk_loaded(chunk)
        # Border blocks of the neighbours may now be covered
        self._refresh_neighbours(chunk.x, chunk.z)

    def _refresh_neighbours(self, cx: int, cz: int) -> None:
        for dx, dz in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            neighbour = self.get_chunk(cx + dx, cz + dz)
            if neighbour is not None:
                self._refresh_chunk(neighbour, notify=True)

    def _refresh_chunk(self, chunk: Chunk, notify: bool) -> None:
        changed = chunk.update_visibility(
            west=self.get_chunk(chunk.x - 1, chunk.z),
            east=self.get_chunk(chunk.x + 1, chunk.z),
            north=self.get_chunk(chunk.x, chunk.z - 1),
            south=self.get_chunk(chunk.x, chunk.z + 1),
        )
        if not notify:
            return

        for x, y, z in zip(*changed.nonzero()):
            x, y, z = int(x), int(y), int(z)
            if chunk.visible[x, y, z]:
                self.renderer.block_shown(chunk, x, y, z, int(chunk.blocks[x, y, z]))
            else:
                self.renderer.block_hidden(chunk, x, y, z)

    def dispose_chunk(self, chunk: Chunk) -> None:
        chunk.dispose()
        self.renderer.chunk_disposed(chunk)
        if self.chunks.get(chunk.key) is chunk:
            del self.chunks[chunk.key]

    def dispose_chunks(self) -> None:
        for chunk in list(self.chunks.values()):
            self.dispose_chunk(chunk)
        self.chunks.clear()

    def update_focus(self, x: float, z: float) -> None:
        """
        Move the focal point to a world position

        When it enters a new chunk, chunks beyond the draw distance are
        disposed and missing ones are generated. Chunks that stay in range
        are kept as they are.
        """
        (focus_x, focus_z), _ = self.world_to_chunk_coords(x, 0, z)
        if (focus_x, focus_z) == self.focus_chunk and self.chunks:
            return
        self.focus_chunk = (focus_x, focus_z)

        distance = self.settings.draw_distance
        dropped = []
        for (cx, cz), chunk in list(self.chunks.items()):
            if abs(cx - focus_x) > distance or abs(cz - focus_z) > distance:
                self.dispose_chunk(chunk)
                dropped.append((cx, cz))

        # Blocks that faced a dropped chunk are exposed again
        for cx, cz in dropped:
            self._refresh_neighbours(cx, cz)

        for cx in range(focus_x - distance, focus_x + distance + 1):
            for cz in range(focus_z - distance, focus_z + distance + 1):
                if (cx, cz) not in self.chunks:
                    self.generate_chunk(cx, cz)

    def get_block(self, x: int, y: int, z: int) -> Optional[int]:
        """
        Get the block id at a world position

        Returns:
            The block id, or None if no loaded chunk holds the position
        """
        (cx, cz), (lx, ly, lz) = self.world_to_chunk_coords(x, y, z)
        chunk = self.get_chunk(cx, cz)
        if chunk is None:
            return None
        return chunk.get_block(lx, ly, lz)

    def is_visible(self, x: int, y: int, z: int) -> bool:
        (cx, cz), (lx, ly, lz) = self.world_to_chunk_coords(x, y, z)
        chunk = self.get_chunk(cx, cz)
        return chunk is not None and chunk.is_visible(lx, ly, lz)

    def is_obscured(self, x: int, y: int, z: int) -> bool:
        """True if all six neighbours exist and are occupied, across chunk borders"""
        for dx, dy, dz in NEIGHBOUR_OFFSETS:
            block_id = self.get_block(x + dx, y + dy, z + dz)
            if block_id is None or block_id == BlockType.EMPTY:
                return False
        return True

    def add_block(self, x: int, y: int, z: int, block_id: int) -> bool:
        """
        Place a block at a world position and record the edit

        Returns:
            False if the block id is out of range, the bottom layer would be
            emptied or no loaded chunk holds the position
        """
        if not 0 <= block_id <= MAX_BLOCK_ID:
            logger.debug("Ignoring add at (%d, %d, %d): block id %r out of range", x, y, z, block_id)
            return False
        if block_id == BlockType.EMPTY:
            return self.remove_block(x, y, z)

        (cx, cz), (lx, ly, lz) = self.world_to_chunk_coords(x, y, z)
        chunk = self.get_chunk(cx, cz)
        if chunk is None or not chunk.in_bounds(lx, ly, lz):
            logger.debug("Ignoring add at (%d, %d, %d): no loaded block there", x, y, z)
            return False

        chunk.set_block_id(lx, ly, lz, block_id)
        # A replaced block loses its old representation before the refresh
        if chunk.is_visible(lx, ly, lz):
            chunk.set_visible(lx, ly, lz, False)
            self.renderer.block_hidden(chunk, lx, ly, lz)

        self.overlay.set(cx, cz, lx, ly, lz, block_id)
        self._refresh_neighbourhood(x, y, z)
        return True

    def remove_block(self, x: int, y: int, z: int) -> bool:
        """
        Empty the block at a world position and record the edit

        The bottom layer cannot be removed.

        Returns:
            False if the removal was rejected or no loaded chunk holds the position
        """
        (cx, cz), (lx, ly, lz) = self.world_to_chunk_coords(x, y, z)
        if ly == 0:
            logger.debug("Ignoring removal at (%d, %d, %d): bottom layer", x, y, z)
            return False

        chunk = self.get_chunk(cx, cz)
        if chunk is None or not chunk.set_block_id(lx, ly, lz, BlockType.EMPTY):
            logger.debug("Ignoring removal at (%d, %d, %d): no loaded block there", x, y, z)
            return False

        self.overlay.set(cx, cz, lx, ly, lz, BlockType.EMPTY)
        self._refresh_neighbourhood(x, y, z)
        return True

    def _refresh_neighbourhood(self, x: int, y: int, z: int) -> None:
        self.refresh_block(x, y, z)
        for dx, dy, dz in NEIGHBOUR_OFFSETS:
            self.refresh_block(x + dx, y + dy, z + dz)

    def refresh_block(self, x: int, y: int, z: int) -> None:
        """Re-evaluate the visibility flag of one block, notifying the renderer on change"""
        (cx, cz), (lx, ly, lz) = self.world_to_chunk_coords(x, y, z)
        chunk = self.get_chunk(cx, cz)
        if chunk is None:
            return
        block_id = chunk.get_block(lx, ly, lz)
        if block_id is None:
            return

        visible = block_id != BlockType.EMPTY and not self.is_obscured(x, y, z)
        if visible == chunk.is_visible(lx, ly, lz):
            return

        chunk.set_visible(lx, ly, lz, visible)
        if visible:
            self.renderer.block_shown(chunk, lx, ly, lz, block_id)
        else:
            self.renderer.block_hidden(chunk, lx, ly, lz)

    def save(self, storage: Storage) -> bool:
        """
        Write the generation settings and the user's edits to a store

        Returns:
            True on success
        """
        try:
            storage.set_item(PARAMS_KEY, json.dumps(self.settings.to_dict()))
            storage.set_item(DATA_KEY, json.dumps(self.overlay.dump()))
        except PersistenceError as e:
            logger.warning("Failed to save world: %s", e)
            return False

        logger.info("World saved (%d edits)", len(self.overlay))
        return True

    def load(self, storage: Storage) -> bool:
        """
        Replace settings and edits with the ones in a store and regenerate

        Nothing changes if the stored state is missing or malformed.

        Returns:
            True on success
        """
        try:
            params_text = storage.get_item(PARAMS_KEY)
            data_text = storage.get_item(DATA_KEY)
            if params_text is None or data_text is None:
                raise PersistenceError("no saved world found")

            settings = WorldGenSettings.from_dict(json.loads(params_text))
            overlay = EditOverlay()
            overlay.restore(json.loads(data_text))
        except (PersistenceError, SettingsError, ValueError) as e:
            logger.warning("Failed to load world: %s", e)
            return False

        self.settings = settings
        self.overlay.chunks = overlay.chunks
        logger.info("World loaded (%d edits)", len(self.overlay))
        self.regenerate()
        return True
