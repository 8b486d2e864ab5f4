"""
Top-down world preview

Draws each column of the loaded chunks as one tile coloured by its highest
visible block, darker the lower it sits. Used by the command line viewer and
for dumping world maps to image files.
"""
import logging
from typing import Optional, Tuple

import numpy as np
import pygame

from voxelcraft.constants import BLACK, BLOCK_COLORS, BlockType, SKY_COLOR
from voxelcraft.storage import Storage
from voxelcraft.world import World

logger = logging.getLogger(__name__)

TILE_SIZE = 2
FPS = 30
IDLE_BUDGET_MS = 10  # Frame time handed to chunk generation

# Lookup table from block id to color
_PALETTE = np.zeros((256, 3), dtype=np.uint8)
_PALETTE[:] = BLACK
for _block, _color in BLOCK_COLORS.items():
    _PALETTE[_block] = _color


def _column_colors(chunk, include_clouds: bool) -> np.ndarray:
    """RGB array of shape (width, width, 3) for one chunk"""
    mask = chunk.visible.copy()
    if not include_clouds:
        mask &= chunk.blocks != BlockType.CLOUD

    has_block = mask.any(axis=1)
    # Index of the highest True along y for each column
    top = chunk.height - 1 - np.argmax(mask[:, ::-1, :], axis=1)
    xs, zs = np.indices(top.shape)
    block_ids = chunk.blocks[xs, top, zs]

    colors = _PALETTE[block_ids].astype(np.float32)
    shade = 0.5 + 0.5 * (top / max(chunk.height - 1, 1))
    colors *= shade[:, :, np.newaxis]
    colors[~has_block] = SKY_COLOR
    return colors.astype(np.uint8)


def preview_bounds(world: World) -> Optional[Tuple[int, int, int, int]]:
    """(min_cx, min_cz, max_cx, max_cz) over the loaded chunks, None if none are loaded"""
    keys = [chunk.key for chunk in world.get_loaded_chunks()]
    if not keys:
        return None
    xs = [cx for cx, _ in keys]
    zs = [cz for _, cz in keys]
    return min(xs), min(zs), max(xs), max(zs)


def focus_bounds(world: World) -> Tuple[int, int, int, int]:
    """Bounds of the area the world keeps loaded around its focal chunk"""
    focus_x, focus_z = world.focus_chunk
    distance = world.settings.draw_distance
    return focus_x - distance, focus_z - distance, focus_x + distance, focus_z + distance


def build_preview(world: World, tile_size: int = TILE_SIZE, include_clouds: bool = False,
                  bounds: Optional[Tuple[int, int, int, int]] = None) -> pygame.Surface:
    """
    Render the loaded chunks to a surface, x to the right and z downwards

    Args:
        world: The world to draw
        tile_size: Pixels per column
        include_clouds: Draw the cloud layer over the terrain
        bounds: Chunk area to draw (min_cx, min_cz, max_cx, max_cz); all
            loaded chunks if omitted

    Returns:
        A surface; 1x1 and sky coloured if there is nothing to draw
    """
    if bounds is None:
        bounds = preview_bounds(world)
    if bounds is None:
        surface = pygame.Surface((1, 1))
        surface.fill(SKY_COLOR)
        return surface

    min_cx, min_cz, max_cx, max_cz = bounds
    width = world.settings.chunk_width
    pixels = np.zeros(((max_cx - min_cx + 1) * width, (max_cz - min_cz + 1) * width, 3), dtype=np.uint8)
    pixels[:, :] = SKY_COLOR

    for chunk in world.get_loaded_chunks():
        if not (min_cx <= chunk.x <= max_cx and min_cz <= chunk.z <= max_cz):
            continue
        px = (chunk.x - min_cx) * width
        pz = (chunk.z - min_cz) * width
        pixels[px:px + width, pz:pz + width] = _column_colors(chunk, include_clouds)

    surface = pygame.surfarray.make_surface(pixels)
    if tile_size != 1:
        surface = pygame.transform.scale(
            surface, (surface.get_width() * tile_size, surface.get_height() * tile_size)
        )
    return surface


def save_preview(world: World, path: str, tile_size: int = TILE_SIZE) -> None:
    pygame.image.save(build_preview(world, tile_size), path)
    logger.info("Saved preview to %s", path)


def run_viewer(world: World, storage: Storage, tile_size: int = TILE_SIZE) -> None:
    """
    Show the world in a window until closed

    Keys: R regenerates without edits, F2 saves, F4 loads, ESC quits.
    """
    pygame.init()
    try:
        world.regenerate()
        screen = pygame.display.set_mode(build_preview(world, tile_size, bounds=focus_bounds(world)).get_size())
        pygame.display.set_caption(f"voxelcraft - seed {world.settings.seed}")
        clock = pygame.time.Clock()
        status = ""

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        world.regenerate(clear_overlay=True)
                    elif event.key == pygame.K_F2:
                        status = "WORLD SAVED" if world.save(storage) else "SAVE FAILED"
                    elif event.key == pygame.K_F4:
                        status = "WORLD LOADED" if world.load(storage) else "LOAD FAILED"

            if world.async_loading:
                world.scheduler.tick(IDLE_BUDGET_MS)

            surface = build_preview(world, tile_size, bounds=focus_bounds(world))
            if surface.get_size() != screen.get_size():
                screen = pygame.display.set_mode(surface.get_size())
            screen.fill(SKY_COLOR)
            screen.blit(surface, (0, 0))
            if status:
                pygame.display.set_caption(f"voxelcraft - seed {world.settings.seed} - {status}")
            pygame.display.flip()
            clock.tick(FPS)
    finally:
        pygame.quit()
