"""
Perlin noise field seeded from an RNG

The ``noise`` library functions are pure functions of their coordinates, so
a seed is applied by shifting the sampling coordinates by offsets drawn from
the generator. Values are roughly in [-1, 1] (Perlin output rarely leaves
[-0.7, 0.7]).
"""
import noise

from voxelcraft.rng import RNG

# Noise repeats every this many units; offsets are drawn inside one period
NOISE_PERIOD = 1024


class NoiseField:
    """Continuous 2D/3D value field derived from a seeded RNG"""

    def __init__(self, rng: RNG):
        self.offset_x = rng.random() * NOISE_PERIOD
        self.offset_y = rng.random() * NOISE_PERIOD
        self.offset_z = rng.random() * NOISE_PERIOD

    def noise2(self, x: float, z: float) -> float:
        return noise.pnoise2(
            x + self.offset_x,
            z + self.offset_z,
            octaves=1,
            repeatx=NOISE_PERIOD,
            repeaty=NOISE_PERIOD,
        )

    def noise3(self, x: float, y: float, z: float) -> float:
        return noise.pnoise3(
            x + self.offset_x,
            y + self.offset_y,
            z + self.offset_z,
            octaves=1,
            repeatx=NOISE_PERIOD,
            repeaty=NOISE_PERIOD,
            repeatz=NOISE_PERIOD,
        )
