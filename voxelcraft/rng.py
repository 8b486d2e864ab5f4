"""
Seeded random number generator for world generation

A multiply-with-carry generator: cheap, repeatable for a given seed and
independent of Python's ``random`` module state, so chunk generation stays
reproducible no matter what else the process does.
"""

MASK = 0xFFFFFFFF


def _int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value"""
    value &= MASK
    if value & 0x80000000:
        value -= 0x100000000
    return value


class RNG:
    """Deterministic generator of floats in [0, 1)"""

    __slots__ = ('m_w', 'm_z')

    def __init__(self, seed: int):
        """
        Initialize both generator lanes from the seed

        Args:
            seed: Integer seed; equal seeds give equal sequences
        """
        self.m_w = _int32(123456789 + seed)
        self.m_z = _int32(987654321 - seed)

    def random(self) -> float:
        """Advance the generator and return the next value in [0, 1)"""
        self.m_z = _int32(36969 * (self.m_z & 65535) + (self.m_z >> 16))
        self.m_w = _int32(18000 * (self.m_w & 65535) + (self.m_w >> 16))
        result = (_int32(self.m_z << 16) + (self.m_w & 65535)) & MASK
        return result / 4294967296

    def __iter__(self):
        return self

    def __next__(self) -> float:
        return self.random()
