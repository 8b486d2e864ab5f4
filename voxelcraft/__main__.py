"""
Main entry point for voxelcraft

Shows a top-down view of a generated world, or writes it to an image with
--output.
"""
import argparse
import logging

from voxelcraft.constants import DRAW_DISTANCE, WORLD_SEED
from voxelcraft.settings import WorldGenSettings
from voxelcraft.storage import FileStorage
from voxelcraft.world import World


def main(argv=None):
    """Generate a world and preview it"""
    parser = argparse.ArgumentParser(prog="voxelcraft", description=__doc__)
    parser.add_argument("--seed", type=int, default=WORLD_SEED, help="world seed")
    parser.add_argument("--draw-distance", type=int, default=DRAW_DISTANCE, help="chunks on each side of the origin")
    parser.add_argument("--save-file", default="voxelcraft_save.json", help="file used by F2/F4 save and load")
    parser.add_argument("--output", help="write the preview to this image file and exit")
    parser.add_argument("--async-loading", action="store_true", help="generate chunks in idle frame time")
    parser.add_argument("--verbose", action="store_true", help="log chunk generation")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Imported late so --help works without a display
    from voxelcraft.preview import run_viewer, save_preview

    settings = WorldGenSettings(seed=args.seed, draw_distance=args.draw_distance)
    if args.output:
        world = World(settings=settings)
        world.regenerate()
        save_preview(world, args.output)
        return

    world = World(settings=settings, async_loading=args.async_loading)
    run_viewer(world, FileStorage(args.save_file))


if __name__ == "__main__":
    main()
